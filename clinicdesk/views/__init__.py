from clinicdesk.views.month_view import DayCell, MonthCalendar
from clinicdesk.views.selection import SelectionState, is_slot_selectable
from clinicdesk.views.slot_grid import SlotCell, SlotGrid
from clinicdesk.views.week_view import DayColumn, SlotBlock, WeekCalendar

__all__ = [
    "MonthCalendar",
    "DayCell",
    "WeekCalendar",
    "DayColumn",
    "SlotBlock",
    "SlotGrid",
    "SlotCell",
    "SelectionState",
    "is_slot_selectable",
]
