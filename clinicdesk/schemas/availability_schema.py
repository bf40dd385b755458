"""Appointment availability data models (month aggregates and time slots)."""

import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from clinicdesk.classifier import SlotStatus, resolve_tier
from clinicdesk.utils import datetime_date_part, parse_clock, parse_date

logger = logging.getLogger(__name__)


def _as_bool(value) -> bool:
    """Read a backend boolean that may arrive as 0/1 or "0"/"1"."""
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


class AvailableDate(BaseModel):
    """Per-calendar-day availability aggregate for a queried month."""

    model_config = ConfigDict(frozen=True)

    date: str
    has_availability: bool
    available_slots_count: int = Field(ge=0)
    total_slots: int = Field(ge=0)

    @field_validator("date")
    @classmethod
    def _check_date(cls, value: str) -> str:
        parse_date(value)
        return value.strip()

    @model_validator(mode="after")
    def _check_counts(self) -> "AvailableDate":
        if self.available_slots_count > self.total_slots:
            raise ValueError(
                f"available_slots_count ({self.available_slots_count}) exceeds "
                f"total_slots ({self.total_slots}) on {self.date}"
            )
        return self

    @property
    def tier(self) -> SlotStatus:
        return resolve_tier(self.available_slots_count, self.total_slots, self.has_availability)


class AvailableSlot(BaseModel):
    """One bookable time unit on a single date for a single doctor."""

    model_config = ConfigDict(frozen=True)

    datetime: str
    time: str
    slot_name: Optional[str] = None
    is_available: bool
    available: int = Field(ge=0)
    total: int = Field(ge=0)
    current: Optional[int] = None
    status: Optional[SlotStatus] = None

    @field_validator("time")
    @classmethod
    def _check_time(cls, value: str) -> str:
        hour, minute = parse_clock(value)
        if not (0 <= hour <= 23 and 0 <= minute <= 59):
            raise ValueError(f"Invalid slot time: {value!r}")
        return value.strip()

    @field_validator("datetime")
    @classmethod
    def _check_datetime(cls, value: str) -> str:
        parse_date(datetime_date_part(value))
        return value.strip()

    @model_validator(mode="before")
    @classmethod
    def _normalize_status(cls, data):
        if not isinstance(data, dict) or "is_available" not in data:
            return data
        data = dict(data)
        is_available = _as_bool(data["is_available"])
        status = data.get("status")
        known = [s.value for s in SlotStatus]
        consistent = status in known and (
            (status == SlotStatus.FULL.value) != is_available
        )
        if not consistent:
            recomputed = resolve_tier(
                int(data.get("available") or 0), int(data.get("total") or 0), is_available
            )
            if status is not None:
                logger.debug(
                    "Slot %s status '%s' contradicts is_available=%s, using '%s'",
                    data.get("datetime"), status, is_available, recomputed.value,
                )
            data["status"] = recomputed
        return data

    @model_validator(mode="after")
    def _check_capacity(self) -> "AvailableSlot":
        if self.available > self.total:
            raise ValueError(
                f"available ({self.available}) exceeds total ({self.total}) for {self.datetime}"
            )
        return self

    @property
    def date(self) -> str:
        """Date portion of the slot identifier."""
        return datetime_date_part(self.datetime)


class AvailableDatesResponse(BaseModel):
    """Month availability payload returned by the backend."""

    month: str = ""
    available_dates: list[AvailableDate] = Field(default_factory=list)
