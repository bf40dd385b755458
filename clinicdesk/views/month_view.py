"""
Month calendar view model.

Builds a Sunday-first month grid, marks past and unavailable days as
disabled, and colors bookable days by availability tier. Navigation and
selection are reported through callbacks; fetching is the host's job.

Usage:
    cal = MonthCalendar(date(2025, 1, 1), dates, None, on_date_select, on_month_change)
    for week in cal.weeks():
        ...
    cal.select_day(15)  # fires on_date_select("2025-01-15") if selectable
"""

import calendar
import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional

from clinicdesk.classifier import LEGEND, SlotStatus, tier_color
from clinicdesk.schemas.availability_schema import AvailableDate
from clinicdesk.utils import add_months, sunday_first_weekday, to_date_string

logger = logging.getLogger(__name__)

DAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


@dataclass(frozen=True)
class DayCell:
    """One real day in the month grid."""

    day: int
    date: str
    column: int
    is_today: bool
    is_past: bool
    is_selected: bool
    info: Optional[AvailableDate] = None

    @property
    def has_availability(self) -> bool:
        return self.info is not None and self.info.has_availability

    @property
    def disabled(self) -> bool:
        return self.is_past or not self.has_availability

    @property
    def tier(self) -> Optional[SlotStatus]:
        """Indicator tier, or None for days that cannot be picked."""
        if self.disabled:
            return None
        return self.info.tier

    @property
    def indicator_color(self) -> Optional[str]:
        tier = self.tier
        return tier_color(tier) if tier is not None else None


class MonthCalendar:
    """Navigable month grid over a list of AvailableDate aggregates."""

    def __init__(
        self,
        current_month: date,
        available_dates: list[AvailableDate],
        selected_date: Optional[str],
        on_date_select: Callable[[str], None],
        on_month_change: Callable[[date], None],
        today: Optional[date] = None,
    ) -> None:
        self.year = current_month.year
        self.month = current_month.month
        self.selected_date = selected_date
        self.on_date_select = on_date_select
        self.on_month_change = on_month_change
        self.today = today or date.today()
        self._by_date: dict[str, AvailableDate] = {d.date: d for d in available_dates}

    @property
    def first_day(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def days_in_month(self) -> int:
        return calendar.monthrange(self.year, self.month)[1]

    @property
    def title(self) -> str:
        return f"{calendar.month_name[self.month]} {self.year}"

    @property
    def legend(self) -> list[tuple[str, str]]:
        return [(label, tier_color(tier)) for tier, label in LEGEND]

    def cells(self) -> list[Optional[DayCell]]:
        """Leading None padding followed by one DayCell per day."""
        leading = sunday_first_weekday(self.first_day)
        grid: list[Optional[DayCell]] = [None] * leading
        for day in range(1, self.days_in_month + 1):
            grid.append(self._make_cell(day))
        return grid

    def weeks(self) -> list[list[Optional[DayCell]]]:
        """Cells chunked into rows of seven; the last row is not padded."""
        grid = self.cells()
        return [grid[i:i + 7] for i in range(0, len(grid), 7)]

    def cell(self, day: int) -> DayCell:
        if not 1 <= day <= self.days_in_month:
            raise ValueError(f"Day {day} is outside {self.title}")
        return self._make_cell(day)

    def _make_cell(self, day: int) -> DayCell:
        current = date(self.year, self.month, day)
        date_str = to_date_string(current)
        return DayCell(
            day=day,
            date=date_str,
            column=sunday_first_weekday(current),
            is_today=current == self.today,
            is_past=current < self.today,
            is_selected=self.selected_date == date_str,
            info=self._by_date.get(date_str),
        )

    def previous_month(self) -> date:
        target = add_months(self.first_day, -1)
        self.on_month_change(target)
        return target

    def next_month(self) -> date:
        target = add_months(self.first_day, 1)
        self.on_month_change(target)
        return target

    def select_day(self, day: int) -> bool:
        """Handle a click on ``day``. Returns True if the callback fired."""
        cell = self.cell(day)
        if cell.is_past or not cell.has_availability:
            logger.debug("Ignoring click on disabled day %s", cell.date)
            return False
        self.on_date_select(cell.date)
        return True
