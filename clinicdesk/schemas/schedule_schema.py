"""Doctor weekly schedule data models."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class DayOfWeek(str, Enum):
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"


DAYS_OF_WEEK: list[DayOfWeek] = list(DayOfWeek)
WEEKDAYS: list[DayOfWeek] = DAYS_OF_WEEK[:5]


class DoctorSchedule(BaseModel):
    """One working time slot in a doctor's weekly schedule.

    ``id`` is only present once the entry has been persisted.
    """

    id: Optional[int] = None
    doctor_id: Optional[int] = None
    day_of_week: DayOfWeek
    start_time: str
    end_time: str
    is_available: bool = True
    slot_order: int = 0
    slot_name: Optional[str] = ""
    max_appointments_per_slot: int = 1
    appointment_duration: int = 30
    break_start: Optional[str] = None
    break_end: Optional[str] = None
    notes: Optional[str] = None


class DoctorScheduleUpdate(BaseModel):
    """Request body for replacing a doctor's schedule."""

    schedule: list[DoctorSchedule] = Field(default_factory=list)
