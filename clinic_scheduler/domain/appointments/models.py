"""
Appointments Domain Models

Implements the database models for:
- Appointment booking and its lifecycle state
- Doctor weekly working hours
"""

from sqlalchemy import (
    Column, Boolean, DateTime, ForeignKey, Index,
    Integer, Time, Text, Enum, CheckConstraint, text
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from clinic_scheduler.core.clock import Weekday
from clinic_scheduler.domain.users.models import User, Patient
from clinic_scheduler.infrastructure.database import Base
import enum


class AppointmentStatus(str, enum.Enum):
    """Appointment status enumeration"""
    SCHEDULED = "SCHEDULED"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    RESCHEDULED = "RESCHEDULED"
    COMPLETED = "COMPLETED"


# Statuses that hold a doctor's slot
ACTIVE_STATUSES = (AppointmentStatus.SCHEDULED, AppointmentStatus.CONFIRMED)


class DoctorSchedule(Base):
    """Weekly working hours of a doctor"""
    __tablename__ = "doctor_schedules"

    id = Column(Integer, primary_key=True, autoincrement=True)
    doctor_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    day_of_week = Column(Enum(Weekday), nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    doctor = relationship(User, foreign_keys=[doctor_id])

    __table_args__ = (
        CheckConstraint('start_time < end_time', name='check_time_order'),
        Index('ix_doctor_schedules_doctor_day', 'doctor_id', 'day_of_week'),
    )


class Appointment(Base):
    """Appointment model for patient-doctor appointments.

    Rows are never deleted; cancellation and rescheduling only mutate the
    status and audit columns.
    """
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, autoincrement=True)

    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False)
    doctor_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    # Scheduling
    scheduled_at = Column(DateTime, nullable=False, index=True)
    duration_minutes = Column(Integer, nullable=False, default=30)
    status = Column(Enum(AppointmentStatus), nullable=False, default=AppointmentStatus.SCHEDULED)

    # Visit details
    reason = Column(Text)
    notes = Column(Text)

    # Cancellation
    cancelled_at = Column(DateTime)
    cancelled_by = Column(Integer, ForeignKey("users.id"))
    cancellation_reason = Column(Text)

    # Rescheduling (audit back-reference, not ownership)
    rescheduled_from = Column(Integer, ForeignKey("appointments.id"))

    # Audit
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    # Relationships
    patient = relationship(Patient, foreign_keys=[patient_id])
    doctor = relationship(User, foreign_keys=[doctor_id])
    creator = relationship(User, foreign_keys=[created_by])
    cancelled_user = relationship(User, foreign_keys=[cancelled_by])

    __table_args__ = (
        CheckConstraint('duration_minutes > 0', name='check_duration_positive'),
        # One active appointment per doctor and exact start time
        Index(
            'uq_appointments_active_doctor_slot',
            'doctor_id', 'scheduled_at',
            unique=True,
            postgresql_where=text("status IN ('SCHEDULED', 'CONFIRMED')"),
            sqlite_where=text("status IN ('SCHEDULED', 'CONFIRMED')"),
        ),
    )

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES
