# Appointments domain module
from clinic_scheduler.domain.appointments.models import (
    ACTIVE_STATUSES,
    Appointment,
    AppointmentStatus,
    DoctorSchedule,
)

__all__ = [
    "ACTIVE_STATUSES",
    "Appointment",
    "AppointmentStatus",
    "DoctorSchedule",
]
