"""
Availability tier classification shared by the month, week and slot views.

Two layers:
1. classify_capacity: raw ratio tiers over (available, total)
2. resolve_tier: the display policy. FULL always means "cannot be
   booked", so a bookable entry never renders as FULL

Both are pure and total over their integer domain.
"""

from enum import Enum
from typing import Optional

from clinicdesk.config import settings


class SlotStatus(str, Enum):
    """Display tier of a date or slot."""

    AVAILABLE = "available"
    LIMITED = "limited"
    FULL = "full"


TIER_COLORS: dict[SlotStatus, str] = {
    SlotStatus.AVAILABLE: "green",
    SlotStatus.LIMITED: "yellow",
    SlotStatus.FULL: "red",
}

LEGEND: list[tuple[SlotStatus, str]] = [
    (SlotStatus.AVAILABLE, "Available"),
    (SlotStatus.LIMITED, "Limited"),
    (SlotStatus.FULL, "Full"),
]


def classify_capacity(
    available: int,
    total: int,
    available_threshold: Optional[float] = None,
    limited_threshold: Optional[float] = None,
) -> SlotStatus:
    """Map remaining/total capacity onto one of three tiers.

    Zero (or negative) capacity on either side is FULL. Otherwise the
    remaining ratio is compared against the configured thresholds.
    """
    if available_threshold is None:
        available_threshold = settings.calendar.available_threshold
    if limited_threshold is None:
        limited_threshold = settings.calendar.limited_threshold

    if total <= 0 or available <= 0:
        return SlotStatus.FULL
    ratio = available / total
    if ratio >= available_threshold:
        return SlotStatus.AVAILABLE
    if ratio >= limited_threshold:
        return SlotStatus.LIMITED
    return SlotStatus.FULL


def resolve_tier(available: int, total: int, bookable: bool) -> SlotStatus:
    """Tier to display for an entry whose bookability is already known.

    The bookability flag is authoritative: non-bookable entries are FULL
    regardless of counts, and bookable ones are at least LIMITED.
    """
    if not bookable:
        return SlotStatus.FULL
    tier = classify_capacity(available, total)
    if tier == SlotStatus.FULL:
        return SlotStatus.LIMITED
    return tier


def tier_color(tier: SlotStatus) -> str:
    return TIER_COLORS[tier]
