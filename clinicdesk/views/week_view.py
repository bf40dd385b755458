"""
Week calendar view model.

Lays out a Sunday-first, seven-column grid over a fixed range of
half-hour rows and positions each bookable slot as a block at the
vertical offset implied by its time of day. Unavailable slots are not
drawn at all.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Callable, Optional

from clinicdesk.classifier import SlotStatus, tier_color
from clinicdesk.config import settings
from clinicdesk.schemas.availability_schema import AvailableSlot
from clinicdesk.utils import format_12h, parse_clock, to_date_string, week_start
from clinicdesk.views.month_view import DAY_NAMES
from clinicdesk.views.selection import is_slot_selectable

logger = logging.getLogger(__name__)

SLOT_MINUTES = 30


@dataclass(frozen=True)
class SlotBlock:
    """A positioned, clickable slot inside a day column."""

    slot: AvailableSlot
    top: float
    height: float
    is_selected: bool
    disabled: bool

    @property
    def label(self) -> str:
        return format_12h(self.slot.time)

    @property
    def capacity_label(self) -> str:
        return f"{self.slot.available}/{self.slot.total} available"

    @property
    def color(self) -> str:
        return tier_color(self.slot.status or SlotStatus.FULL)


@dataclass(frozen=True)
class DayColumn:
    date: date
    is_today: bool
    is_past: bool
    blocks: list[SlotBlock] = field(default_factory=list)

    @property
    def date_string(self) -> str:
        return to_date_string(self.date)

    @property
    def header(self) -> str:
        return f"{DAY_NAMES[(self.date.weekday() + 1) % 7]} {self.date.day}"

    @property
    def available_count(self) -> int:
        return len(self.blocks)

    @property
    def show_empty_notice(self) -> bool:
        """'No available slots' is shown only for today and future days."""
        return not self.blocks and not self.is_past


class WeekCalendar:
    """Seven-day, time-of-day grid with geometric slot placement."""

    def __init__(
        self,
        current_date: date,
        slots: list[AvailableSlot],
        selected_slot: Optional[AvailableSlot],
        on_date_change: Callable[[date], None],
        on_slot_select: Callable[[AvailableSlot], None],
        loading: bool = False,
        now: Optional[datetime] = None,
        start_hour: Optional[int] = None,
        end_hour: Optional[int] = None,
        hour_height: Optional[int] = None,
    ) -> None:
        self.current_date = current_date
        self.slots = slots
        self.selected_slot = selected_slot
        self.on_date_change = on_date_change
        self.on_slot_select = on_slot_select
        self.loading = loading
        self._now = now
        cal = settings.calendar
        self.start_hour = cal.start_hour if start_hour is None else start_hour
        self.end_hour = cal.end_hour if end_hour is None else end_hour
        self.hour_height = cal.hour_height if hour_height is None else hour_height

    @property
    def now(self) -> datetime:
        return self._now or datetime.now()

    @property
    def today(self) -> date:
        return self.now.date()

    @property
    def week_start(self) -> date:
        return week_start(self.current_date)

    @property
    def days(self) -> list[date]:
        start = self.week_start
        return [start + timedelta(days=i) for i in range(7)]

    @property
    def title(self) -> str:
        return self.week_start.strftime("%B %Y")

    @property
    def half_hour_height(self) -> float:
        return self.hour_height / 2

    @property
    def time_rows(self) -> list[str]:
        """Row labels from start_hour:00 through end_hour:30."""
        rows = []
        for hour in range(self.start_hour, self.end_hour + 1):
            rows.append(f"{hour:02d}:00")
            rows.append(f"{hour:02d}:30")
        return rows

    @property
    def total_height(self) -> int:
        return (self.end_hour - self.start_hour + 1) * self.hour_height

    def slot_top(self, slot: AvailableSlot) -> float:
        hour, minute = parse_clock(slot.time)
        return (hour - self.start_hour) * self.hour_height + (minute / SLOT_MINUTES) * self.half_hour_height

    @property
    def slot_height(self) -> float:
        return self.half_hour_height

    def slots_for_day(self, day: date) -> list[AvailableSlot]:
        day_str = to_date_string(day)
        return [s for s in self.slots if s.date == day_str]

    def columns(self) -> list[DayColumn]:
        today = self.today
        columns = []
        for day in self.days:
            is_past = day < today
            blocks: list[SlotBlock] = []
            if not self.loading:
                for slot in self.slots_for_day(day):
                    if not slot.is_available:
                        continue
                    blocks.append(SlotBlock(
                        slot=slot,
                        top=self.slot_top(slot),
                        height=self.slot_height,
                        is_selected=(
                            self.selected_slot is not None
                            and self.selected_slot.datetime == slot.datetime
                        ),
                        disabled=is_past,
                    ))
            columns.append(DayColumn(date=day, is_today=day == today, is_past=is_past, blocks=blocks))
        return columns

    def now_marker(self) -> Optional[tuple[int, float]]:
        """(column index, top offset) of the current-time line, if visible."""
        now = self.now
        if now.date() not in self.days:
            return None
        if not self.start_hour <= now.hour <= self.end_hour:
            return None
        column = self.days.index(now.date())
        top = (now.hour - self.start_hour) * self.hour_height + (now.minute / 60) * self.hour_height
        return column, top

    def previous_week(self) -> date:
        target = self.week_start - timedelta(days=7)
        self.on_date_change(target)
        return target

    def next_week(self) -> date:
        target = self.week_start + timedelta(days=7)
        self.on_date_change(target)
        return target

    def go_to_today(self) -> date:
        target = self.today
        self.on_date_change(target)
        return target

    def select_slot(self, slot: AvailableSlot) -> bool:
        """Handle a click on ``slot``. Returns True if the callback fired."""
        if not is_slot_selectable(slot, self.today):
            logger.debug("Ignoring click on slot %s", slot.datetime)
            return False
        self.on_slot_select(slot)
        return True
