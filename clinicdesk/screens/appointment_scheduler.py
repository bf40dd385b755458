"""
Appointment scheduling host screen.

Owns everything the calendar views deliberately do not: the selected
doctor, the month/week being looked at, the fetched availability data
and the date/slot selection. Views are rebuilt from this state on every
render and report user actions back through the handle_* callbacks.

Every navigation-triggered fetch is tagged with a generation so that a
slow response for an earlier navigation can never overwrite the data of
a later one. A failed fetch keeps the previous data on screen and raises
an error notice instead.
"""

import asyncio
import logging
from datetime import date, datetime, timedelta
from typing import Awaitable, Callable, Optional

from clinicdesk.logging_context import set_request_id
from clinicdesk.schemas.availability_schema import AvailableDate, AvailableSlot
from clinicdesk.services.api_client import ApiClient, ApiError
from clinicdesk.services.fetch_guard import RequestGenerations
from clinicdesk.services.notifier import Notifier
from clinicdesk.utils import to_date_string, week_start
from clinicdesk.views.month_view import MonthCalendar
from clinicdesk.views.selection import SelectionState, is_slot_selectable
from clinicdesk.views.slot_grid import SlotGrid
from clinicdesk.views.week_view import WeekCalendar

logger = logging.getLogger(__name__)

DATES_CHANNEL = "dates"
SLOTS_CHANNEL = "slots"
WEEK_CHANNEL = "week"


class AppointmentScheduler:
    """Host screen for browsing a doctor's availability and picking a slot."""

    def __init__(
        self,
        api: ApiClient,
        doctor_id: Optional[int] = None,
        notifier: Optional[Notifier] = None,
        on_slot_chosen: Optional[Callable[[AvailableSlot], None]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.api = api
        self.doctor_id = doctor_id
        self.notifier = notifier or Notifier()
        self.on_slot_chosen = on_slot_chosen
        self._clock = clock or datetime.now

        today = self.today
        self.current_month: date = today.replace(day=1)
        self.current_date: date = today
        self.available_dates: list[AvailableDate] = []
        self.slots: list[AvailableSlot] = []
        self.week_slots: list[AvailableSlot] = []
        self.selection = SelectionState()
        self.loading_dates = False
        self.loading_slots = False
        self.loading_week = False

        self._generations = RequestGenerations()
        self._tasks: set[asyncio.Task] = set()

    @property
    def today(self) -> date:
        return self._clock().date()

    # ------------------------------------------------------------------ #
    # Views
    # ------------------------------------------------------------------ #

    def month_view(self) -> MonthCalendar:
        return MonthCalendar(
            current_month=self.current_month,
            available_dates=self.available_dates,
            selected_date=self.selection.selected_date,
            on_date_select=self.handle_date_select,
            on_month_change=self.handle_month_change,
            today=self.today,
        )

    def week_view(self) -> WeekCalendar:
        return WeekCalendar(
            current_date=self.current_date,
            slots=self.week_slots,
            selected_slot=self.selection.selected_slot,
            on_date_change=self.handle_week_change,
            on_slot_select=self.handle_slot_select,
            loading=self.loading_week,
            now=self._clock(),
        )

    def slot_grid(self, disabled: bool = False) -> SlotGrid:
        return SlotGrid(
            slots=self.slots,
            selected_slot=self.selection.selected_slot,
            on_slot_select=self.handle_slot_select,
            disabled=disabled or self.loading_slots,
            today=self.today,
        )

    # ------------------------------------------------------------------ #
    # View callbacks (synchronous; fetches run as background tasks)
    # ------------------------------------------------------------------ #

    def handle_month_change(self, month: date) -> None:
        self._spawn(self.change_month(month))

    def handle_week_change(self, day: date) -> None:
        self._spawn(self.change_week(day))

    def handle_date_select(self, date_str: str) -> None:
        self._spawn(self.select_date(date_str))

    def handle_slot_select(self, slot: AvailableSlot) -> None:
        if self.doctor_id is None or not is_slot_selectable(slot, self.today):
            logger.debug("Host rejected slot %s", slot.datetime)
            return
        self.selection.select_slot(slot)
        logger.info("Slot chosen: %s", slot.datetime)
        if self.on_slot_chosen is not None:
            self.on_slot_chosen(slot)

    def _spawn(self, coro: Awaitable[bool]) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def wait_idle(self) -> None:
        """Wait for every fetch started from a view callback."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    # ------------------------------------------------------------------ #
    # Navigation
    # ------------------------------------------------------------------ #

    async def select_doctor(self, doctor_id: int) -> None:
        self.doctor_id = doctor_id
        self.selection.clear()
        self.available_dates = []
        self.slots = []
        self.week_slots = []
        await asyncio.gather(self.load_available_dates(), self.load_week_slots())

    async def change_month(self, month: date) -> bool:
        self.current_month = month.replace(day=1)
        return await self.load_available_dates()

    async def change_week(self, day: date) -> bool:
        self.current_date = day
        return await self.load_week_slots()

    async def select_date(self, date_str: str) -> bool:
        self.selection.select_date(date_str)
        return await self.load_slots_for_date(date_str)

    # ------------------------------------------------------------------ #
    # Fetches
    # ------------------------------------------------------------------ #

    async def load_available_dates(self) -> bool:
        """Fetch month aggregates. Returns True if the result was applied."""
        if self.doctor_id is None:
            return False
        ticket = self._generations.begin(DATES_CHANNEL)
        set_request_id(ticket.request_id)
        month_str = self.current_month.strftime("%Y-%m")
        self.loading_dates = True
        try:
            result = await self.api.get_doctor_available_dates(self.doctor_id, month_str)
        except ApiError as exc:
            if self._generations.is_current(ticket):
                self.loading_dates = False
                self.notifier.error("Failed to load available dates", detail=str(exc))
            return False
        if not self._generations.is_current(ticket):
            return False
        self.available_dates = result.available_dates
        self.loading_dates = False
        logger.debug("Loaded %d available dates for %s", len(self.available_dates), month_str)
        return True

    async def load_slots_for_date(self, date_str: str) -> bool:
        if self.doctor_id is None:
            return False
        ticket = self._generations.begin(SLOTS_CHANNEL)
        set_request_id(ticket.request_id)
        self.loading_slots = True
        try:
            slots = await self.api.get_available_slots(self.doctor_id, date_str)
        except ApiError as exc:
            if self._generations.is_current(ticket):
                self.loading_slots = False
                self.notifier.error("Failed to load time slots", detail=str(exc))
            return False
        if not self._generations.is_current(ticket):
            return False
        self.slots = slots
        self.loading_slots = False
        return True

    async def load_week_slots(self) -> bool:
        """Fetch all seven days of the current week concurrently."""
        if self.doctor_id is None:
            return False
        ticket = self._generations.begin(WEEK_CHANNEL)
        set_request_id(ticket.request_id)
        start = week_start(self.current_date)
        days = [to_date_string(start + timedelta(days=i)) for i in range(7)]
        self.loading_week = True
        results = await asyncio.gather(
            *(self.api.get_available_slots(self.doctor_id, d) for d in days),
            return_exceptions=True,
        )
        failure = next((r for r in results if isinstance(r, BaseException)), None)
        if failure is not None:
            if not isinstance(failure, ApiError):
                raise failure
            if self._generations.is_current(ticket):
                self.loading_week = False
                self.notifier.error("Failed to load weekly schedule", detail=str(failure))
            return False
        if not self._generations.is_current(ticket):
            return False
        self.week_slots = [slot for day_slots in results for slot in day_slots]
        self.loading_week = False
        return True
