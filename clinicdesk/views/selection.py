"""
Selection state owned by a host screen, plus the shared selectability rule.

The views never store selection themselves; they only report clicks.
The host keeps date and slot correlated:
    - choosing a slot also chooses the slot's date
    - choosing a date drops a slot that belongs to another date
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from clinicdesk.schemas.availability_schema import AvailableSlot
from clinicdesk.utils import parse_date

logger = logging.getLogger(__name__)


def is_slot_selectable(slot: AvailableSlot, today: date) -> bool:
    """A slot can be picked only if bookable and not on a past date."""
    if not slot.is_available:
        return False
    return parse_date(slot.date) >= today


@dataclass
class SelectionState:
    """Currently selected date and slot of a scheduling screen."""

    selected_date: Optional[str] = None
    selected_slot: Optional[AvailableSlot] = None

    def select_date(self, value: Optional[str]) -> None:
        self.selected_date = value
        if self.selected_slot is not None and self.selected_slot.date != value:
            logger.debug("Dropping slot %s after date change to %s", self.selected_slot.datetime, value)
            self.selected_slot = None

    def select_slot(self, slot: Optional[AvailableSlot]) -> None:
        self.selected_slot = slot
        if slot is not None:
            self.selected_date = slot.date

    def clear(self) -> None:
        self.selected_date = None
        self.selected_slot = None

    def is_slot_selected(self, slot: AvailableSlot) -> bool:
        return self.selected_slot is not None and self.selected_slot.datetime == slot.datetime
