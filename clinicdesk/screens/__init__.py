from clinicdesk.screens.appointment_scheduler import AppointmentScheduler
from clinicdesk.screens.doctor_schedule import DoctorScheduleScreen
from clinicdesk.screens.token_queue import TokenQueueMonitor

__all__ = ["AppointmentScheduler", "DoctorScheduleScreen", "TokenQueueMonitor"]
