"""
Offline console demo: browse availability, pick a slot, edit a schedule
and watch a token queue without any backend.

Uses the real ApiClient, screens and view models against an in-memory
backend served through httpx.MockTransport. No network calls.

Usage:
    python console_demo.py
    python console_demo.py --scenario calendar
    python console_demo.py --scenario week
    python console_demo.py --scenario schedule
    python console_demo.py --scenario queue
"""

import argparse
import asyncio
import calendar
import json
import random
import re
from datetime import date, datetime
from typing import Optional

import httpx

from clinicdesk.config import settings
from clinicdesk.schemas.availability_schema import AvailableSlot
from clinicdesk.schemas.schedule_schema import DayOfWeek
from clinicdesk.screens.appointment_scheduler import AppointmentScheduler
from clinicdesk.screens.doctor_schedule import DoctorScheduleScreen
from clinicdesk.screens.token_queue import TokenQueueMonitor
from clinicdesk.services.api_client import ApiClient
from clinicdesk.services.notifier import NoticeLevel, Notifier
from clinicdesk.utils import to_date_string
from clinicdesk.views.month_view import DAY_NAMES, MonthCalendar
from clinicdesk.views.slot_grid import SlotGrid
from clinicdesk.views.week_view import WeekCalendar

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"
REVERSE = "\033[7m"

COLOR_CODES = {"green": GREEN, "yellow": YELLOW, "red": RED, "gray": DIM}

DEMO_SEED = 42
DEMO_DOCTOR_ID = 7
DEMO_RECEPTION_ID = 1
SLOT_TIMES = [f"{h:02d}:{m:02d}" for h in range(9, 17) for m in (0, 30)]
SLOT_CAPACITY = 3


# ---------------------------------------------------------------------- #
# In-memory backend
# ---------------------------------------------------------------------- #


class DemoBackend:
    """Deterministic fake of the hospital REST API."""

    def __init__(self, seed: int = DEMO_SEED) -> None:
        self._rng = random.Random(seed)
        self._booked: dict[str, int] = {}
        self.schedule: list[dict] = [
            {"id": 1, "doctor_id": DEMO_DOCTOR_ID, "day_of_week": "Monday",
             "start_time": "09:00", "end_time": "13:00", "is_available": True,
             "slot_order": 0, "slot_name": "Morning"},
            {"id": 2, "doctor_id": DEMO_DOCTOR_ID, "day_of_week": "Monday",
             "start_time": "14:00", "end_time": "17:00", "is_available": True,
             "slot_order": 1, "slot_name": "Afternoon"},
        ]
        self.tokens: list[dict] = [
            {"id": i, "token_number": f"T{i}", "status": status,
             "patient_name": name, "doctor_name": "Dr. Mehta", "room_number": "104"}
            for i, (status, name) in enumerate([
                ("Completed", "Asha Rao"),
                ("In Progress", "Vikram Shah"),
                ("Waiting", "Leela Nair"),
                ("Waiting", "Omar Siddiqui"),
                ("Waiting", "Priya Das"),
                ("Waiting", "Ravi Kumar"),
            ], start=9)
        ]

    def _booked_count(self, slot_datetime: str) -> int:
        if slot_datetime not in self._booked:
            self._booked[slot_datetime] = self._rng.randint(0, SLOT_CAPACITY)
        return self._booked[slot_datetime]

    def slots_for(self, day: date) -> list[dict]:
        if day.weekday() == 6:  # Sunday closed
            return []
        out = []
        for time in SLOT_TIMES:
            stamp = f"{to_date_string(day)} {time}:00"
            booked = self._booked_count(stamp)
            available = SLOT_CAPACITY - booked
            out.append({
                "time": time,
                "datetime": stamp,
                "available": available,
                "total": SLOT_CAPACITY,
                "current": booked,
                "is_available": available > 0,
                "slot_name": "Morning" if time < "13:00" else "Afternoon",
            })
        return out

    def dates_for(self, month: str) -> list[dict]:
        year, mon = (int(p) for p in month.split("-"))
        out = []
        for day in range(1, calendar.monthrange(year, mon)[1] + 1):
            slots = self.slots_for(date(year, mon, day))
            open_count = sum(1 for s in slots if s["is_available"])
            out.append({
                "date": f"{month}-{day:02d}",
                "has_availability": open_count > 0,
                "available_slots_count": open_count,
                "total_slots": len(slots),
            })
        return out

    def handle(self, request: httpx.Request) -> httpx.Response:
        path = re.sub(r"^/hms(/index\.php)?", "", request.url.path)
        params = request.url.params

        if re.fullmatch(r"/api/appointments/doctor/\d+/available-dates", path):
            month = params["month"]
            return httpx.Response(200, json={
                "success": True,
                "data": {"month": month, "available_dates": self.dates_for(month)},
            })
        if re.fullmatch(r"/api/appointments/doctor/\d+/slots", path):
            day = datetime.strptime(params["date"], "%Y-%m-%d").date()
            return httpx.Response(200, json={"success": True, "data": self.slots_for(day)})
        if re.fullmatch(r"/api/doctors/\d+/schedule", path):
            if request.method == "PUT":
                body = json.loads(request.content)
                next_id = max((e.get("id") or 0 for e in self.schedule), default=0) + 1
                saved = []
                for entry in body["schedule"]:
                    if not entry.get("id"):
                        entry["id"] = next_id
                        next_id += 1
                    saved.append(entry)
                self.schedule = saved
            return httpx.Response(200, json={"success": True, "data": self.schedule})
        if re.fullmatch(r"/api/tokens/queue/\d+", path):
            return httpx.Response(200, json=self.tokens)
        if m := re.fullmatch(r"/api/tokens/(\d+)/status", path):
            token_id = int(m.group(1))
            for token in self.tokens:
                if token["id"] == token_id:
                    token["status"] = json.loads(request.content)["status"]
                    return httpx.Response(200, json=token)
            return httpx.Response(404, json={"message": "Token not found"})
        return httpx.Response(404, json={"message": f"No route for {path}"})


def build_demo_client(backend: Optional[DemoBackend] = None) -> ApiClient:
    backend = backend or DemoBackend()
    return ApiClient(
        base_url="http://demo.local/hms",
        base_url_with_index="http://demo.local/hms/index.php",
        transport=httpx.MockTransport(backend.handle),
    )


# ---------------------------------------------------------------------- #
# Rendering
# ---------------------------------------------------------------------- #


def render_month(cal: MonthCalendar) -> str:
    lines = [f"{BOLD}  <  {cal.title:^22}  >{RESET}", " ".join(f"{d:>3}" for d in DAY_NAMES)]
    for week in cal.weeks():
        cells = []
        for cell in week:
            if cell is None:
                cells.append("   ")
                continue
            text = f"{cell.day:>2}"
            if cell.indicator_color:
                text += f"{COLOR_CODES[cell.indicator_color]}•{RESET}"
            else:
                text += " "
            if cell.is_selected:
                text = f"{REVERSE}{text}{RESET}"
            elif cell.disabled:
                text = f"{DIM}{text}{RESET}"
            if cell.is_today:
                text = f"{BOLD}{text}{RESET}"
            cells.append(text)
        lines.append(" ".join(cells))
    legend = "  ".join(f"{COLOR_CODES[color]}•{RESET} {label}" for label, color in cal.legend)
    lines.append(legend)
    return "\n".join(lines)


def render_week(week: WeekCalendar) -> str:
    columns = week.columns()
    marker = week.now_marker()
    header = "       " + " ".join(f"{c.header:^8}" for c in columns)
    lines = [f"{BOLD}{week.title}{RESET}", header]
    for row_index, row in enumerate(week.time_rows):
        row_top = row_index * week.half_hour_height
        cells = []
        for col_index, column in enumerate(columns):
            block = next((b for b in column.blocks if b.top == row_top), None)
            if block is not None:
                text = f"{block.slot.available}/{block.slot.total}"
                color = DIM if block.disabled else COLOR_CODES[block.color]
                cells.append(f"{color}{text:^8}{RESET}")
            elif marker and marker[0] == col_index and row_top <= marker[1] < row_top + week.half_hour_height:
                cells.append(f"{RED}{'--now--':^8}{RESET}")
            else:
                cells.append(" " * 8)
        lines.append(f"{row:>6} " + " ".join(cells))
    lines.append("       " + " ".join(f"{str(c.available_count) + ' slots':^8}" for c in columns))
    return "\n".join(lines)


def render_slot_grid(grid: SlotGrid) -> str:
    if grid.is_empty:
        return f"{DIM}  {grid.placeholder}{RESET}"
    lines = [f"{BOLD}{grid.title}{RESET}"]
    for index, cell in enumerate(grid.cells(), start=1):
        color = DIM if cell.disabled else COLOR_CODES[cell.border_color]
        badge = f" [{cell.badge}]" if cell.badge else ""
        mark = f"{REVERSE}*{RESET}" if cell.is_selected else " "
        lines.append(
            f" {mark}{index:>2}. {color}{cell.time_label:>8}{badge:<12} {cell.capacity_label}{RESET}"
        )
    return "\n".join(lines)


def render_queue(monitor: TokenQueueMonitor) -> str:
    lines = [f"{BOLD}Token queue: reception {monitor.reception_id} on {monitor.date}{RESET}"]
    for title, tokens, color in [
        ("Waiting", monitor.waiting, YELLOW),
        ("In Progress", monitor.in_progress, BLUE),
        ("Completed", monitor.completed, GREEN),
    ]:
        lines.append(f"{color}{title} ({len(tokens)}){RESET}")
        if not tokens:
            lines.append(f"{DIM}  No tokens {title.lower()}{RESET}")
        for token in tokens:
            lines.append(f"  {token.token_number:<5} {token.patient_name or ''}")
    return "\n".join(lines)


def render_schedule(screen: DoctorScheduleScreen) -> str:
    lines = [f"{BOLD}Weekly schedule: doctor {screen.doctor_id}{RESET}"]
    for day, entries in screen.editor.grouped().items():
        if not entries:
            lines.append(f"{DIM}{day.value:<10} no slots{RESET}")
            continue
        for index, entry in enumerate(entries, start=1):
            name = f" - {entry.slot_name}" if entry.slot_name else ""
            saved = "" if entry.id else f" {YELLOW}(unsaved){RESET}"
            label = day.value if index == 1 else ""
            lines.append(
                f"{label:<10} Slot {index}{name}: {entry.start_time}-{entry.end_time}{saved}"
            )
    return "\n".join(lines)


def render_notices(notifier: Notifier) -> str:
    colors = {NoticeLevel.SUCCESS: GREEN, NoticeLevel.INFO: BLUE, NoticeLevel.ERROR: RED}
    lines = [f"{colors[n.level]}  ! {n.message}{RESET}" for n in notifier.active()]
    notifier.dismiss_all()
    return "\n".join(lines)


# ---------------------------------------------------------------------- #
# Session
# ---------------------------------------------------------------------- #


class ConsoleSession:
    """Drives the real screens from typed commands or a scripted scenario."""

    HELP = (
        "Commands: n/p next/prev month, d <day> pick date, s <n> pick slot, "
        "w week view, nw/pw next/prev week, q queue, c <id> call token, quit"
    )

    SCENARIOS: dict[str, list[str]] = {
        "calendar": ["n", "d 10", "s 3", "p"],
        "week": ["w", "nw", "nw", "pw"],
        "schedule": ["sched"],
        "queue": ["q", "c 11", "q"],
    }

    def __init__(self, backend: Optional[DemoBackend] = None) -> None:
        self.backend = backend or DemoBackend()
        self.api = build_demo_client(self.backend)
        self.notifier = Notifier()
        self.scheduler = AppointmentScheduler(
            self.api, notifier=self.notifier, on_slot_chosen=self._on_slot_chosen
        )
        self.queue = TokenQueueMonitor(self.api, DEMO_RECEPTION_ID, notifier=self.notifier)
        self.schedule = DoctorScheduleScreen(self.api, DEMO_DOCTOR_ID, notifier=self.notifier)

    def say(self, text: str) -> None:
        if text:
            print(text)

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    def _on_slot_chosen(self, slot: AvailableSlot) -> None:
        self.system_log(f"Confirm appointment for {slot.datetime} ({slot.slot_name or 'slot'})")

    async def start(self) -> None:
        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  CLINIC DESK - Console Demo{RESET}")
        print(f"{BOLD}  Clinic: {settings.clinic_name}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")
        await self.scheduler.select_doctor(DEMO_DOCTOR_ID)
        self.say(render_month(self.scheduler.month_view()))

    async def run_scenario(self, scenario: str) -> None:
        steps = self.SCENARIOS.get(scenario)
        if not steps:
            print(f"{RED}Unknown scenario: {scenario}{RESET}")
            return
        await self.start()
        for step in steps:
            print(f"\n{BLUE}[Desk] {RESET}{step}")
            await self.process(step)
        await self.api.aclose()

    async def run(self) -> None:
        await self.start()
        self.system_log(self.HELP)
        while True:
            command = (await asyncio.to_thread(input, f"\n{BLUE}[Desk] {RESET}")).strip()
            if not command:
                continue
            if command.lower() in ("quit", "exit"):
                print(f"\n{DIM}Session ended.{RESET}")
                break
            await self.process(command)
        await self.api.aclose()

    async def process(self, command: str) -> None:
        parts = command.split()
        verb, arg = parts[0].lower(), (parts[1] if len(parts) > 1 else None)
        month = self.scheduler.month_view()

        if verb in ("n", "p"):
            if verb == "n":
                month.next_month()
            else:
                month.previous_month()
            await self.scheduler.wait_idle()
            self.say(render_month(self.scheduler.month_view()))
        elif verb == "d" and arg and arg.isdigit():
            try:
                fired = month.select_day(int(arg))
            except ValueError as exc:
                self.system_log(str(exc))
                return
            if not fired:
                self.system_log(f"Day {arg} is not selectable")
                return
            await self.scheduler.wait_idle()
            self.say(render_slot_grid(self.scheduler.slot_grid()))
        elif verb == "s" and arg and arg.isdigit():
            grid = self.scheduler.slot_grid()
            index = int(arg) - 1
            if not 0 <= index < len(grid.slots):
                self.system_log(f"No slot #{arg}")
                return
            if not grid.select_slot(grid.slots[index]):
                self.system_log(f"Slot #{arg} is full or in the past")
            self.say(render_slot_grid(self.scheduler.slot_grid()))
        elif verb in ("w", "nw", "pw"):
            week = self.scheduler.week_view()
            if verb == "nw":
                week.next_week()
            elif verb == "pw":
                week.previous_week()
            await self.scheduler.wait_idle()
            self.say(render_week(self.scheduler.week_view()))
        elif verb == "sched":
            await self.schedule.load()
            editor = self.schedule.editor
            key = editor.add_slot(DayOfWeek.TUESDAY)
            editor.update_slot(key, slot_name="Clinic", start_time="10:00", end_time="12:00")
            editor.copy_slot(key, DayOfWeek.THURSDAY)
            editor.add_to_all_weekdays()
            self.say(render_schedule(self.schedule))
            await self.schedule.save()
            self.say(render_schedule(self.schedule))
        elif verb == "q":
            await self.queue.refresh()
            self.say(render_queue(self.queue))
        elif verb == "c" and arg and arg.isdigit():
            await self.queue.call_token(int(arg))
            self.say(render_queue(self.queue))
        else:
            self.system_log(self.HELP)
        self.say(render_notices(self.notifier))


def main() -> None:
    parser = argparse.ArgumentParser(description="Offline console demo")
    parser.add_argument(
        "--scenario",
        choices=sorted(ConsoleSession.SCENARIOS),
        default=None,
        help="Auto-play a pre-scripted scenario instead of interactive mode",
    )
    args = parser.parse_args()

    session = ConsoleSession()
    if args.scenario:
        asyncio.run(session.run_scenario(args.scenario))
    else:
        asyncio.run(session.run())


if __name__ == "__main__":
    main()
