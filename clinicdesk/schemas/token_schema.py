"""Reception token queue data models."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel


class TokenStatus(str, Enum):
    WAITING = "Waiting"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"
    NO_SHOW = "No Show"


class Token(BaseModel):
    """A patient's queue ticket at a reception desk."""

    id: int
    token_number: str
    status: TokenStatus
    appointment_id: Optional[int] = None
    reception_id: Optional[int] = None
    floor_id: Optional[int] = None
    room_id: Optional[int] = None
    doctor_id: Optional[int] = None
    patient_id: Optional[int] = None
    token_date: Optional[str] = None
    called_at: Optional[str] = None
    completed_at: Optional[str] = None
    appointment_date: Optional[str] = None
    appointment_type: Optional[str] = None
    patient_name: Optional[str] = None
    doctor_name: Optional[str] = None
    specialty: Optional[str] = None
    room_number: Optional[str] = None
    room_name: Optional[str] = None
    floor_number: Optional[int] = None
    floor_name: Optional[str] = None
    reception_name: Optional[str] = None
