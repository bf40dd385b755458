"""Tests for backend payload validation."""

import pytest
from pydantic import ValidationError

from clinicdesk.classifier import SlotStatus
from clinicdesk.schemas.availability_schema import (
    AvailableDate,
    AvailableDatesResponse,
    AvailableSlot,
)
from clinicdesk.schemas.schedule_schema import DAYS_OF_WEEK, WEEKDAYS, DayOfWeek, DoctorSchedule
from clinicdesk.schemas.token_schema import Token, TokenStatus
from tests.conftest import make_date, make_slot, slot_payload


class TestAvailableDate:
    def test_tier_follows_counts(self):
        assert make_date("2025-01-20", available=8, total=10).tier == SlotStatus.AVAILABLE
        assert make_date("2025-01-20", available=4, total=10).tier == SlotStatus.LIMITED

    def test_unbookable_date_is_full(self):
        info = make_date("2025-01-20", available=0, total=10)
        assert info.has_availability is False
        assert info.tier == SlotStatus.FULL

    def test_bookable_date_never_full(self):
        info = make_date("2025-01-20", available=1, total=10)
        assert info.tier == SlotStatus.LIMITED

    def test_rejects_count_above_total(self):
        with pytest.raises(ValidationError):
            make_date("2025-01-20", available=11, total=10)

    def test_rejects_negative_count(self):
        with pytest.raises(ValidationError):
            make_date("2025-01-20", available=-1, total=10)

    def test_rejects_bad_date(self):
        with pytest.raises(ValidationError):
            make_date("20-01-2025")

    def test_zero_total_allowed(self):
        info = make_date("2025-01-19", available=0, total=0)
        assert info.total_slots == 0

    def test_frozen(self):
        info = make_date("2025-01-20")
        with pytest.raises(ValidationError):
            info.total_slots = 3


class TestAvailableSlot:
    def test_status_derived_when_missing(self):
        assert make_slot(available=3, total=3).status == SlotStatus.AVAILABLE
        assert make_slot(available=1, total=3).status == SlotStatus.LIMITED
        assert make_slot(available=0, total=3).status == SlotStatus.FULL

    def test_consistent_status_is_kept(self):
        slot = make_slot(available=3, total=3, status="limited")
        assert slot.status == SlotStatus.LIMITED

    def test_contradicting_status_is_recomputed(self):
        slot = make_slot(available=0, total=3, is_available=False, status="available")
        assert slot.status == SlotStatus.FULL

    def test_full_status_on_bookable_slot_is_recomputed(self):
        slot = make_slot(available=2, total=3, status="full")
        assert slot.status == SlotStatus.AVAILABLE

    def test_unknown_status_is_recomputed(self):
        slot = make_slot(available=2, total=3, status="busy")
        assert slot.status == SlotStatus.AVAILABLE

    def test_numeric_booleans(self):
        payload = slot_payload("2025-01-15", "09:00", available=0)
        payload["is_available"] = "0"
        slot = AvailableSlot.model_validate(payload)
        assert slot.is_available is False
        assert slot.status == SlotStatus.FULL

    def test_rejects_available_above_total(self):
        with pytest.raises(ValidationError):
            make_slot(available=4, total=3)

    def test_rejects_bad_time(self):
        with pytest.raises(ValidationError):
            AvailableSlot.model_validate(slot_payload("2025-01-15", "25:00"))

    def test_date_property(self):
        assert make_slot(day="2025-02-03").date == "2025-02-03"


class TestAvailableDatesResponse:
    def test_defaults(self):
        response = AvailableDatesResponse()
        assert response.available_dates == []

    def test_parses_nested_dates(self):
        response = AvailableDatesResponse.model_validate({
            "month": "2025-01",
            "available_dates": [{
                "date": "2025-01-20", "has_availability": True,
                "available_slots_count": 2, "total_slots": 4,
            }],
        })
        assert isinstance(response.available_dates[0], AvailableDate)


class TestScheduleAndTokens:
    def test_days_are_monday_first(self):
        assert DAYS_OF_WEEK[0] == DayOfWeek.MONDAY
        assert DAYS_OF_WEEK[-1] == DayOfWeek.SUNDAY
        assert WEEKDAYS[-1] == DayOfWeek.FRIDAY

    def test_schedule_defaults(self):
        entry = DoctorSchedule(day_of_week="Tuesday", start_time="09:00", end_time="12:00")
        assert entry.id is None
        assert entry.is_available is True
        assert entry.max_appointments_per_slot == 1

    def test_token_status_values(self):
        token = Token(id=1, token_number="T1", status="In Progress")
        assert token.status == TokenStatus.IN_PROGRESS

    def test_token_rejects_unknown_status(self):
        with pytest.raises(ValidationError):
            Token(id=1, token_number="T1", status="Lost")
