"""Tests for the week calendar view model."""

from datetime import date, datetime

import pytest

from clinicdesk.views.week_view import WeekCalendar
from tests.conftest import NOW, make_slot


def _week(slots=None, current=date(2025, 1, 15), now=NOW, selected=None, loading=False):
    changes, picks = [], []
    week = WeekCalendar(
        current_date=current,
        slots=slots or [],
        selected_slot=selected,
        on_date_change=changes.append,
        on_slot_select=picks.append,
        loading=loading,
        now=now,
        start_hour=8,
        end_hour=21,
        hour_height=60,
    )
    return week, changes, picks


class TestGeometry:
    def test_week_starts_on_sunday(self):
        week, _, _ = _week()
        assert week.days[0] == date(2025, 1, 12)
        assert week.days[-1] == date(2025, 1, 18)

    def test_time_rows_cover_start_to_end_half_past(self):
        week, _, _ = _week()
        assert week.time_rows[0] == "08:00"
        assert week.time_rows[-1] == "21:30"
        assert len(week.time_rows) == 28

    def test_total_height(self):
        week, _, _ = _week()
        assert week.total_height == 840

    @pytest.mark.parametrize("day", ["2025-01-12", "2025-01-15", "2025-01-18"])
    def test_nine_thirty_is_ninety_pixels(self, day):
        week, _, _ = _week()
        assert week.slot_top(make_slot(day=day, time="09:30")) == 90

    def test_start_hour_is_zero(self):
        week, _, _ = _week()
        assert week.slot_top(make_slot(time="08:00")) == 0

    def test_slot_height_is_half_hour(self):
        week, _, _ = _week()
        assert week.slot_height == 30


class TestColumns:
    def test_unavailable_slots_are_not_drawn(self):
        slots = [
            make_slot(day="2025-01-16", time="09:00", available=2),
            make_slot(day="2025-01-16", time="09:30", available=0),
        ]
        week, _, _ = _week(slots)
        thursday = week.columns()[4]
        assert [b.slot.time for b in thursday.blocks] == ["09:00"]
        assert thursday.available_count == 1

    def test_slots_land_in_their_day_column(self):
        week, _, _ = _week([make_slot(day="2025-01-17", time="10:00")])
        counts = [c.available_count for c in week.columns()]
        assert counts == [0, 0, 0, 0, 0, 1, 0]

    def test_past_day_blocks_are_disabled(self):
        week, _, _ = _week([make_slot(day="2025-01-13", time="10:00")])
        monday = week.columns()[1]
        assert monday.is_past
        assert monday.blocks[0].disabled

    def test_empty_notice_only_for_today_and_future(self):
        week, _, _ = _week()
        columns = week.columns()
        assert not columns[0].show_empty_notice
        assert columns[3].show_empty_notice
        assert columns[6].show_empty_notice

    def test_loading_hides_blocks(self):
        week, _, _ = _week([make_slot(day="2025-01-16")], loading=True)
        assert all(not c.blocks for c in week.columns())

    def test_selected_block(self):
        slot = make_slot(day="2025-01-16", time="11:00")
        week, _, _ = _week([slot], selected=slot)
        assert week.columns()[4].blocks[0].is_selected

    def test_block_labels(self):
        week, _, _ = _week([make_slot(day="2025-01-16", time="13:30", available=1, total=3)])
        block = week.columns()[4].blocks[0]
        assert block.label == "1:30 PM"
        assert block.capacity_label == "1/3 available"
        assert block.color == "yellow"

    def test_header(self):
        week, _, _ = _week()
        assert week.columns()[0].header == "Sun 12"


class TestNowMarker:
    def test_marker_in_todays_column(self):
        week, _, _ = _week()
        assert week.now_marker() == (3, 150)

    def test_no_marker_outside_week(self):
        week, _, _ = _week(current=date(2025, 1, 22))
        assert week.now_marker() is None

    def test_no_marker_outside_hours(self):
        week, _, _ = _week(now=datetime(2025, 1, 15, 6, 0))
        assert week.now_marker() is None


class TestInteraction:
    def test_navigation(self):
        week, changes, _ = _week()
        week.next_week()
        week.previous_week()
        week.go_to_today()
        assert changes == [date(2025, 1, 19), date(2025, 1, 5), date(2025, 1, 15)]

    def test_select_available_future_slot(self):
        slot = make_slot(day="2025-01-16")
        week, _, picks = _week([slot])
        assert week.select_slot(slot) is True
        assert picks == [slot]

    def test_select_unavailable_slot_ignored(self):
        slot = make_slot(day="2025-01-16", available=0)
        week, _, picks = _week([slot])
        assert week.select_slot(slot) is False
        assert picks == []

    def test_select_past_slot_ignored(self):
        slot = make_slot(day="2025-01-13")
        week, _, picks = _week([slot])
        assert week.select_slot(slot) is False
        assert picks == []

    def test_title(self):
        week, _, _ = _week()
        assert week.title == "January 2025"
