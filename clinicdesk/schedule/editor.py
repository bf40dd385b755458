"""
Doctor weekly-schedule editor.

Holds a mutable list of DoctorSchedule entries, several per weekday, and
supports add / remove / update / copy operations before the whole list
is saved in one request.

Entries are addressed by a tagged key:
    Identified(id)            persisted entry with a server id
    Pending(day, slot_order)  unsaved entry, unique within its day

Usage:
    editor = ScheduleEditor(schedule)
    key = editor.add_slot(DayOfWeek.MONDAY)
    editor.update_slot(key, slot_name="Morning", end_time="12:00")
    editor.copy_slot(key, DayOfWeek.TUESDAY)
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Union

from pydantic import ValidationError

from clinicdesk.config import settings
from clinicdesk.schemas.schedule_schema import (
    DAYS_OF_WEEK,
    WEEKDAYS,
    DayOfWeek,
    DoctorSchedule,
)

logger = logging.getLogger(__name__)

IDENTITY_FIELDS = {"id", "slot_order"}


@dataclass(frozen=True)
class Identified:
    id: int


@dataclass(frozen=True)
class Pending:
    day: DayOfWeek
    slot_order: int


SlotKey = Union[Identified, Pending]


class UnknownSlotError(KeyError):
    """Raised when no schedule entry matches a slot key."""


def slot_key(entry: DoctorSchedule) -> SlotKey:
    """Resolve the identity of an entry: server id when present."""
    if entry.id:
        return Identified(entry.id)
    return Pending(entry.day_of_week, entry.slot_order or 0)


def _matches(entry: DoctorSchedule, key: SlotKey) -> bool:
    if isinstance(key, Identified):
        return entry.id == key.id
    return (
        not entry.id
        and entry.day_of_week == key.day
        and (entry.slot_order or 0) == key.slot_order
    )


def _minutes(value: str) -> int:
    parsed = datetime.strptime(value.strip()[:5], "%H:%M")
    return parsed.hour * 60 + parsed.minute


class ScheduleEditor:
    """Day-grouped, multi-slot-per-day schedule editing."""

    def __init__(
        self,
        schedule: Optional[list[DoctorSchedule]] = None,
        default_start_time: Optional[str] = None,
        default_end_time: Optional[str] = None,
    ) -> None:
        self.entries: list[DoctorSchedule] = list(schedule or [])
        self.default_start_time = default_start_time or settings.schedule.default_start_time
        self.default_end_time = default_end_time or settings.schedule.default_end_time
        self.copy_source: Optional[SlotKey] = None

    def grouped(self) -> dict[DayOfWeek, list[DoctorSchedule]]:
        """Entries per day, Monday first, ordered by (slot_order, start_time)."""
        return {
            day: sorted(
                (e for e in self.entries if e.day_of_week == day),
                key=lambda e: (e.slot_order or 0, e.start_time or ""),
            )
            for day in DAYS_OF_WEEK
        }

    def slots_for_day(self, day: DayOfWeek) -> list[DoctorSchedule]:
        return self.grouped()[day]

    def _next_order(self, day: DayOfWeek) -> int:
        orders = [e.slot_order or 0 for e in self.entries if e.day_of_week == day]
        return max(orders) + 1 if orders else 0

    def find(self, key: SlotKey) -> DoctorSchedule:
        for entry in self.entries:
            if _matches(entry, key):
                return entry
        raise UnknownSlotError(f"No schedule slot for {key}")

    def add_slot(self, day: DayOfWeek) -> SlotKey:
        entry = DoctorSchedule(
            day_of_week=day,
            start_time=self.default_start_time,
            end_time=self.default_end_time,
            is_available=True,
            slot_order=self._next_order(day),
            slot_name="",
            max_appointments_per_slot=1,
            appointment_duration=settings.schedule.default_duration_minutes,
        )
        self.entries.append(entry)
        logger.debug("Added %s slot #%d", day.value, entry.slot_order)
        return slot_key(entry)

    def add_to_all_weekdays(self) -> list[SlotKey]:
        """Add a default slot to every weekday that has none yet."""
        added = []
        for day in WEEKDAYS:
            if not any(e.day_of_week == day for e in self.entries):
                added.append(self.add_slot(day))
        return added

    def remove_slot(self, key: SlotKey) -> None:
        before = len(self.entries)
        self.entries = [e for e in self.entries if not _matches(e, key)]
        if len(self.entries) == before:
            raise UnknownSlotError(f"No schedule slot for {key}")
        if self.copy_source == key:
            self.copy_source = None
        logger.debug("Removed schedule slot %s", key)

    def update_slot(self, key: SlotKey, **changes: Any) -> DoctorSchedule:
        """Replace fields on the matching entry and return the new entry.

        ``id`` and ``slot_order`` are identity and cannot be edited. Moving
        an entry to another day puts it last in that day.

        Raises:
            ValueError: Unknown, identity or invalid field values.
            UnknownSlotError: No entry matches ``key``.
        """
        unknown = set(changes) - set(DoctorSchedule.model_fields)
        if unknown:
            raise ValueError(f"Unknown schedule fields: {sorted(unknown)}")
        locked = set(changes) & IDENTITY_FIELDS
        if locked:
            raise ValueError(f"Schedule identity fields cannot be edited: {sorted(locked)}")
        for index, entry in enumerate(self.entries):
            if not _matches(entry, key):
                continue
            data = {**entry.model_dump(), **changes}
            try:
                updated = DoctorSchedule.model_validate(data)
            except ValidationError as exc:
                raise ValueError(f"Invalid schedule values for {key}: {exc}") from exc
            if updated.day_of_week != entry.day_of_week:
                updated = updated.model_copy(
                    update={"slot_order": self._next_order(updated.day_of_week)}
                )
                logger.debug("Moved %s to %s slot #%d", key, updated.day_of_week.value, updated.slot_order)
                if self.copy_source == key and isinstance(key, Pending):
                    self.copy_source = slot_key(updated)
            self.entries[index] = updated
            return updated
        raise UnknownSlotError(f"No schedule slot for {key}")

    def begin_copy(self, key: SlotKey) -> None:
        self.find(key)
        self.copy_source = key

    def cancel_copy(self) -> None:
        self.copy_source = None

    def copy_slot(self, key: SlotKey, to_day: DayOfWeek) -> SlotKey:
        """Duplicate an entry into ``to_day`` as a new, unsaved entry."""
        source = self.find(key)
        copy = source.model_copy(update={
            "day_of_week": to_day,
            "slot_order": self._next_order(to_day),
            "id": None,
        })
        self.entries.append(copy)
        self.copy_source = None
        logger.debug("Copied %s to %s slot #%d", key, to_day.value, copy.slot_order)
        return slot_key(copy)

    def validate(self) -> list[str]:
        """Return human-readable problems with available entries."""
        problems = []
        for day, entries in self.grouped().items():
            for index, entry in enumerate(entries, start=1):
                if not entry.is_available:
                    continue
                label = f"{day.value} slot {index}"
                try:
                    start = _minutes(entry.start_time)
                    end = _minutes(entry.end_time)
                except ValueError:
                    problems.append(f"{label}: times must be HH:MM")
                    continue
                if end <= start:
                    problems.append(f"{label}: end time must be after start time")
                if entry.appointment_duration < 1:
                    problems.append(f"{label}: appointment duration must be positive")
                if entry.max_appointments_per_slot < 1:
                    problems.append(f"{label}: max appointments must be at least 1")
                if entry.break_start or entry.break_end:
                    if not (entry.break_start and entry.break_end):
                        problems.append(f"{label}: break needs both start and end")
                        continue
                    try:
                        b_start = _minutes(entry.break_start)
                        b_end = _minutes(entry.break_end)
                    except ValueError:
                        problems.append(f"{label}: break times must be HH:MM")
                        continue
                    if not start <= b_start < b_end <= end:
                        problems.append(f"{label}: break must fall inside the slot")
        return problems
