# Users domain module
from clinic_scheduler.domain.users.models import Patient, Specialty, User, UserRole

__all__ = [
    "Patient",
    "Specialty",
    "User",
    "UserRole",
]
