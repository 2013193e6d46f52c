"""
Users Repository Layer

Read access to staff users, patients and specialty configuration.
"""

from typing import Optional

from clinic_scheduler.domain.users.models import User, UserRole, Patient, Specialty


class UserRepository:
    """Repository for staff user lookups"""

    def __init__(self, db):
        self.db = db

    def get_active(self, user_id: int) -> Optional[User]:
        """Get user by ID only if the account is active"""
        return self.db.query(User).filter(
            User.id == user_id,
            User.is_active == True
        ).first()

    def get_active_doctor(self, doctor_id: int) -> Optional[User]:
        """Get an active user holding the DOCTOR role"""
        return self.db.query(User).filter(
            User.id == doctor_id,
            User.role == UserRole.DOCTOR,
            User.is_active == True
        ).first()

    def get_specialty_duration(self, doctor_id: int) -> Optional[int]:
        """Default consultation length of the doctor's specialty, if configured"""
        return self.db.query(Specialty.consultation_minutes).join(
            User, User.specialty_id == Specialty.id
        ).filter(User.id == doctor_id).scalar()


class PatientRepository:
    """Repository for patient lookups"""

    def __init__(self, db):
        self.db = db

    def get_active(self, patient_id: int) -> Optional[Patient]:
        """Get patient by ID only if the record is active"""
        return self.db.query(Patient).filter(
            Patient.id == patient_id,
            Patient.is_active == True
        ).first()
