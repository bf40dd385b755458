"""Host screen that loads, edits and saves one doctor's weekly schedule."""

import logging
from typing import Optional

from clinicdesk.schedule.editor import ScheduleEditor
from clinicdesk.services.api_client import ApiClient, ApiError
from clinicdesk.services.notifier import Notifier

logger = logging.getLogger(__name__)


class DoctorScheduleScreen:
    def __init__(
        self,
        api: ApiClient,
        doctor_id: int,
        notifier: Optional[Notifier] = None,
    ) -> None:
        self.api = api
        self.doctor_id = doctor_id
        self.notifier = notifier or Notifier()
        self.editor = ScheduleEditor()
        self.loading = False
        self.saving = False

    async def load(self) -> bool:
        self.loading = True
        try:
            schedule = await self.api.get_doctor_schedule(self.doctor_id)
        except ApiError as exc:
            self.notifier.error("Failed to load doctor schedule", detail=str(exc))
            return False
        finally:
            self.loading = False
        self.editor = ScheduleEditor(schedule)
        logger.debug("Loaded %d schedule slots for doctor %s", len(schedule), self.doctor_id)
        return True

    async def save(self) -> bool:
        """Validate and persist the edited schedule.

        Saved entries come back with server ids, so the editor is rebuilt
        from the response and pending keys no longer apply afterwards.
        """
        problems = self.editor.validate()
        if problems:
            for problem in problems:
                logger.debug("Schedule problem: %s", problem)
            self.notifier.error(problems[0])
            return False

        self.saving = True
        try:
            saved = await self.api.update_doctor_schedule(self.doctor_id, self.editor.entries)
        except ApiError as exc:
            self.notifier.error("Failed to update schedule", detail=str(exc))
            return False
        finally:
            self.saving = False
        if saved:
            self.editor = ScheduleEditor(saved)
        self.notifier.success("Schedule updated successfully")
        return True
