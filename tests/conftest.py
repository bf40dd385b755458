"""Shared test fixtures and helpers."""

import json
from datetime import date, datetime
from typing import Callable, Optional

import httpx
import pytest

from clinicdesk.schemas.availability_schema import AvailableDate, AvailableSlot
from clinicdesk.schemas.schedule_schema import DayOfWeek, DoctorSchedule
from clinicdesk.schemas.token_schema import Token, TokenStatus
from clinicdesk.services.api_client import ApiClient
from clinicdesk.services.notifier import Notifier

# Wednesday
TODAY = date(2025, 1, 15)
NOW = datetime(2025, 1, 15, 10, 30)


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def notifier() -> Notifier:
    return Notifier()


def make_date(
    day: str,
    available: int = 5,
    total: int = 10,
    has_availability: Optional[bool] = None,
) -> AvailableDate:
    """Helper to create an AvailableDate aggregate."""
    if has_availability is None:
        has_availability = available > 0
    return AvailableDate(
        date=day,
        has_availability=has_availability,
        available_slots_count=available,
        total_slots=total,
    )


def make_slot(
    day: str = "2025-01-15",
    time: str = "09:00",
    available: int = 3,
    total: int = 3,
    is_available: Optional[bool] = None,
    slot_name: Optional[str] = None,
    status: Optional[str] = None,
) -> AvailableSlot:
    """Helper to create an AvailableSlot; status is derived unless given."""
    if is_available is None:
        is_available = available > 0
    payload = {
        "datetime": f"{day} {time}:00",
        "time": time,
        "slot_name": slot_name,
        "is_available": is_available,
        "available": available,
        "total": total,
        "current": total - available,
    }
    if status is not None:
        payload["status"] = status
    return AvailableSlot.model_validate(payload)


def slot_payload(day: str, time: str, available: int = 2, total: int = 3) -> dict:
    """Raw backend JSON for one slot."""
    return {
        "datetime": f"{day} {time}:00",
        "time": time,
        "is_available": available > 0,
        "available": available,
        "total": total,
        "current": total - available,
    }


def make_schedule_entry(
    day: DayOfWeek = DayOfWeek.MONDAY,
    start: str = "09:00",
    end: str = "13:00",
    entry_id: Optional[int] = None,
    slot_order: int = 0,
    **extra,
) -> DoctorSchedule:
    return DoctorSchedule(
        id=entry_id,
        doctor_id=7,
        day_of_week=day,
        start_time=start,
        end_time=end,
        slot_order=slot_order,
        **extra,
    )


def make_token(token_id: int, number: str, status: TokenStatus = TokenStatus.WAITING) -> Token:
    return Token(id=token_id, token_number=number, status=status)


def json_body(request: httpx.Request) -> dict:
    return json.loads(request.content)


def make_client(handler: Callable[[httpx.Request], httpx.Response], **kwargs) -> ApiClient:
    """ApiClient wired to an in-memory handler instead of the network."""
    return ApiClient(
        base_url="http://test.local/hms",
        base_url_with_index="http://test.local/hms/index.php",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )
