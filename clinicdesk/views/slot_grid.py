"""Flat slot grid for a single, already-selected date."""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional

from clinicdesk.classifier import SlotStatus, tier_color
from clinicdesk.schemas.availability_schema import AvailableSlot
from clinicdesk.utils import format_12h
from clinicdesk.views.selection import is_slot_selectable

logger = logging.getLogger(__name__)

EMPTY_MESSAGE = "No available slots for this date"


@dataclass(frozen=True)
class SlotCell:
    slot: AvailableSlot
    disabled: bool
    is_selected: bool

    @property
    def time_label(self) -> str:
        return format_12h(self.slot.time)

    @property
    def badge(self) -> Optional[str]:
        return self.slot.slot_name or None

    @property
    def capacity_label(self) -> str:
        if self.slot.is_available:
            return f"{self.slot.available} / {self.slot.total} available"
        return "Full"

    @property
    def status(self) -> SlotStatus:
        return self.slot.status or SlotStatus.FULL

    @property
    def border_color(self) -> str:
        if self.status == SlotStatus.FULL:
            return "gray"
        return tier_color(self.status)


class SlotGrid:
    """Clickable button grid over every slot of one date."""

    title = "Available Time Slots"

    def __init__(
        self,
        slots: list[AvailableSlot],
        selected_slot: Optional[AvailableSlot],
        on_slot_select: Callable[[AvailableSlot], None],
        disabled: bool = False,
        today: Optional[date] = None,
    ) -> None:
        self.slots = slots
        self.selected_slot = selected_slot
        self.on_slot_select = on_slot_select
        self.disabled = disabled
        self.today = today or date.today()

    @property
    def is_empty(self) -> bool:
        """True only when there are no slots at all (not when all are full)."""
        return len(self.slots) == 0

    @property
    def all_full(self) -> bool:
        return not self.is_empty and not any(s.is_available for s in self.slots)

    @property
    def placeholder(self) -> Optional[str]:
        return EMPTY_MESSAGE if self.is_empty else None

    def cells(self) -> list[SlotCell]:
        return [
            SlotCell(
                slot=slot,
                disabled=self.disabled or not slot.is_available,
                is_selected=(
                    self.selected_slot is not None
                    and self.selected_slot.datetime == slot.datetime
                ),
            )
            for slot in self.slots
        ]

    def select_slot(self, slot: AvailableSlot) -> bool:
        """Handle a click on ``slot``. Returns True if the callback fired."""
        if self.disabled or not is_slot_selectable(slot, self.today):
            logger.debug("Ignoring click on slot %s", slot.datetime)
            return False
        self.on_slot_select(slot)
        return True
