"""Tests for the appointment scheduling host screen."""

import asyncio
import logging
from datetime import date

import httpx
import pytest

from clinicdesk.screens.appointment_scheduler import AppointmentScheduler
from tests.conftest import NOW, make_client, make_slot, slot_payload


def _dates_payload(month: str, days: list[str]) -> dict:
    return {"success": True, "data": {"month": month, "available_dates": [
        {"date": d, "has_availability": True, "available_slots_count": 2, "total_slots": 4}
        for d in days
    ]}}


class FakeBackend:
    """Routes requests to canned responses; optionally holds some back."""

    def __init__(self):
        self.dates: dict[str, list[str]] = {}
        self.slots: dict[str, list[dict]] = {}
        self.failing = False
        self.gates: dict[str, asyncio.Event] = {}
        self.requests: list[httpx.Request] = []
        self.index_only = False

    async def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = request.url.params.get("month") or request.url.params.get("date")
        gate = self.gates.get(key)
        if gate is not None:
            await gate.wait()
        if self.index_only and "index.php" not in request.url.path:
            return httpx.Response(404, json={"message": "Not found"})
        if self.failing:
            return httpx.Response(500, json={"message": "backend down"})
        if request.url.path.endswith("/available-dates"):
            month = request.url.params["month"]
            return httpx.Response(200, json=_dates_payload(month, self.dates.get(month, [])))
        return httpx.Response(200, json={"data": self.slots.get(request.url.params["date"], [])})


def _scheduler(backend, **kwargs):
    api = make_client(backend.handle)
    return AppointmentScheduler(api, clock=lambda: NOW, **kwargs)


class TestInitialLoad:
    @pytest.mark.asyncio
    async def test_select_doctor_loads_month_and_week(self):
        backend = FakeBackend()
        backend.dates["2025-01"] = ["2025-01-20"]
        backend.slots["2025-01-16"] = [slot_payload("2025-01-16", "09:00")]
        scheduler = _scheduler(backend)
        await scheduler.select_doctor(7)
        assert [d.date for d in scheduler.available_dates] == ["2025-01-20"]
        assert [s.date for s in scheduler.week_slots] == ["2025-01-16"]
        assert not scheduler.loading_dates and not scheduler.loading_week

    @pytest.mark.asyncio
    async def test_week_fetches_seven_days(self):
        backend = FakeBackend()
        scheduler = _scheduler(backend, doctor_id=7)
        await scheduler.load_week_slots()
        days = sorted(r.url.params["date"] for r in backend.requests)
        assert days[0] == "2025-01-12" and days[-1] == "2025-01-18"
        assert len(days) == 7

    @pytest.mark.asyncio
    async def test_no_doctor_no_fetch(self):
        backend = FakeBackend()
        scheduler = _scheduler(backend)
        assert await scheduler.load_available_dates() is False
        assert backend.requests == []


class TestStaleResponses:
    @pytest.mark.asyncio
    async def test_later_month_wins_when_earlier_resolves_last(self):
        backend = FakeBackend()
        backend.dates["2025-02"] = ["2025-02-10"]
        backend.dates["2025-03"] = ["2025-03-10"]
        backend.gates["2025-02"] = asyncio.Event()
        scheduler = _scheduler(backend, doctor_id=7)

        slow = asyncio.create_task(scheduler.change_month(date(2025, 2, 1)))
        await asyncio.sleep(0)
        assert await scheduler.change_month(date(2025, 3, 1)) is True
        backend.gates["2025-02"].set()
        assert await slow is False

        assert scheduler.current_month == date(2025, 3, 1)
        assert [d.date for d in scheduler.available_dates] == ["2025-03-10"]

    @pytest.mark.asyncio
    async def test_later_date_wins_for_slots(self):
        backend = FakeBackend()
        backend.slots["2025-01-20"] = [slot_payload("2025-01-20", "09:00")]
        backend.slots["2025-01-21"] = [slot_payload("2025-01-21", "10:00")]
        backend.gates["2025-01-20"] = asyncio.Event()
        scheduler = _scheduler(backend, doctor_id=7)

        slow = asyncio.create_task(scheduler.select_date("2025-01-20"))
        await asyncio.sleep(0)
        await scheduler.select_date("2025-01-21")
        backend.gates["2025-01-20"].set()
        await slow

        assert [s.time for s in scheduler.slots] == ["10:00"]
        assert scheduler.selection.selected_date == "2025-01-21"

    @pytest.mark.asyncio
    async def test_later_week_wins_when_earlier_resolves_last(self):
        backend = FakeBackend()
        backend.slots["2025-01-20"] = [slot_payload("2025-01-20", "09:00")]
        backend.slots["2025-01-27"] = [slot_payload("2025-01-27", "10:00")]
        backend.gates["2025-01-19"] = asyncio.Event()
        scheduler = _scheduler(backend, doctor_id=7)

        slow = asyncio.create_task(scheduler.change_week(date(2025, 1, 20)))
        await asyncio.sleep(0)
        assert await scheduler.change_week(date(2025, 1, 27)) is True
        backend.gates["2025-01-19"].set()
        assert await slow is False

        assert scheduler.current_date == date(2025, 1, 27)
        assert [s.date for s in scheduler.week_slots] == ["2025-01-27"]
        assert scheduler.loading_week is False


class TestRequestTracing:
    @pytest.mark.asyncio
    async def test_client_log_carries_fetch_request_id(self, caplog):
        backend = FakeBackend()
        backend.index_only = True
        backend.dates["2025-01"] = ["2025-01-20"]
        scheduler = _scheduler(backend, doctor_id=7)
        caplog.set_level(logging.DEBUG, logger="clinicdesk.services.api_client")

        await scheduler.load_available_dates()
        await scheduler.load_available_dates()

        retries = [r for r in caplog.records if r.name == "clinicdesk.services.api_client"]
        assert [r.request_id for r in retries] == ["dates-1", "dates-2"]
        assert [d.date for d in scheduler.available_dates] == ["2025-01-20"]


class TestFailures:
    @pytest.mark.asyncio
    async def test_failed_month_fetch_keeps_previous_dates(self):
        backend = FakeBackend()
        backend.dates["2025-01"] = ["2025-01-20"]
        scheduler = _scheduler(backend, doctor_id=7)
        await scheduler.load_available_dates()

        backend.failing = True
        assert await scheduler.change_month(date(2025, 2, 1)) is False
        assert [d.date for d in scheduler.available_dates] == ["2025-01-20"]
        assert [n.message for n in scheduler.notifier.errors()] == ["Failed to load available dates"]
        assert scheduler.loading_dates is False

    @pytest.mark.asyncio
    async def test_failed_slot_fetch_keeps_previous_slots(self):
        backend = FakeBackend()
        backend.slots["2025-01-20"] = [slot_payload("2025-01-20", "09:00")]
        scheduler = _scheduler(backend, doctor_id=7)
        await scheduler.select_date("2025-01-20")

        backend.failing = True
        await scheduler.select_date("2025-01-21")
        assert [s.time for s in scheduler.slots] == ["09:00"]
        assert len(scheduler.notifier.errors()) == 1

    @pytest.mark.asyncio
    async def test_failed_week_fetch_notice(self):
        backend = FakeBackend()
        backend.failing = True
        scheduler = _scheduler(backend, doctor_id=7)
        assert await scheduler.load_week_slots() is False
        assert [n.message for n in scheduler.notifier.errors()] == ["Failed to load weekly schedule"]


class TestViewCallbacks:
    @pytest.mark.asyncio
    async def test_month_view_click_loads_slots(self):
        backend = FakeBackend()
        backend.dates["2025-01"] = ["2025-01-20"]
        backend.slots["2025-01-20"] = [slot_payload("2025-01-20", "11:00")]
        scheduler = _scheduler(backend, doctor_id=7)
        await scheduler.load_available_dates()

        assert scheduler.month_view().select_day(20) is True
        await scheduler.wait_idle()
        assert scheduler.selection.selected_date == "2025-01-20"
        assert [s.time for s in scheduler.slots] == ["11:00"]

    @pytest.mark.asyncio
    async def test_month_navigation_through_view(self):
        backend = FakeBackend()
        backend.dates["2025-02"] = ["2025-02-03"]
        scheduler = _scheduler(backend, doctor_id=7)
        scheduler.month_view().next_month()
        await scheduler.wait_idle()
        assert scheduler.current_month == date(2025, 2, 1)
        assert [d.date for d in scheduler.available_dates] == ["2025-02-03"]

    @pytest.mark.asyncio
    async def test_week_navigation_through_view(self):
        backend = FakeBackend()
        scheduler = _scheduler(backend, doctor_id=7)
        scheduler.week_view().next_week()
        await scheduler.wait_idle()
        assert scheduler.current_date == date(2025, 1, 19)

    @pytest.mark.asyncio
    async def test_slot_choice_reaches_callback(self):
        chosen = []
        scheduler = _scheduler(FakeBackend(), doctor_id=7, on_slot_chosen=chosen.append)
        slot = make_slot(day="2025-01-20")
        scheduler.handle_slot_select(slot)
        assert chosen == [slot]
        assert scheduler.selection.selected_date == "2025-01-20"

    @pytest.mark.asyncio
    async def test_host_rejects_unavailable_slot(self):
        chosen = []
        scheduler = _scheduler(FakeBackend(), doctor_id=7, on_slot_chosen=chosen.append)
        scheduler.handle_slot_select(make_slot(day="2025-01-20", available=0))
        assert chosen == []
        assert scheduler.selection.selected_slot is None

    @pytest.mark.asyncio
    async def test_loading_disables_slot_grid(self):
        scheduler = _scheduler(FakeBackend(), doctor_id=7)
        scheduler.loading_slots = True
        assert scheduler.slot_grid().disabled
