from clinicdesk.schedule.editor import (
    Identified,
    Pending,
    ScheduleEditor,
    SlotKey,
    UnknownSlotError,
    slot_key,
)

__all__ = [
    "ScheduleEditor",
    "Identified",
    "Pending",
    "SlotKey",
    "UnknownSlotError",
    "slot_key",
]
