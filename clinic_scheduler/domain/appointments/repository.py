"""
Appointments Repository Layer

Provides data access operations for appointments and doctor schedules.
Repositories flush but never commit; the calling service owns the
transaction boundary.
"""

from typing import Optional, List
from datetime import datetime
import logging

from sqlalchemy.exc import IntegrityError

from clinic_scheduler.core.clock import Weekday
from clinic_scheduler.core.exceptions import ConflictError
from clinic_scheduler.domain.appointments.models import (
    Appointment, AppointmentStatus, ACTIVE_STATUSES, DoctorSchedule
)

logger = logging.getLogger(__name__)

SLOT_INDEX_NAME = "uq_appointments_active_doctor_slot"


def _is_slot_violation(error: IntegrityError) -> bool:
    message = str(error.orig)
    return (
        SLOT_INDEX_NAME in message
        or "appointments.doctor_id, appointments.scheduled_at" in message
    )


class DoctorScheduleRepository:
    """Repository for doctor schedule data access operations"""

    def __init__(self, db):
        self.db = db

    def create(self, schedule_data: dict) -> DoctorSchedule:
        """Create a new doctor schedule"""
        schedule = DoctorSchedule(**schedule_data)
        self.db.add(schedule)
        self.db.flush()
        return schedule

    def get_for_day(self, doctor_id: int, day_of_week: Weekday) -> List[DoctorSchedule]:
        """Get active schedule rows for a doctor on a given weekday"""
        return self.db.query(DoctorSchedule).filter(
            DoctorSchedule.doctor_id == doctor_id,
            DoctorSchedule.day_of_week == day_of_week,
            DoctorSchedule.is_active == True
        ).order_by(DoctorSchedule.start_time).all()


class AppointmentRepository:
    """Repository for appointment data access operations"""

    def __init__(self, db):
        self.db = db

    def create(self, appointment_data: dict) -> Appointment:
        """Create a new appointment"""
        appointment = Appointment(**appointment_data)
        self.db.add(appointment)
        self._flush(appointment_data.get("doctor_id"), appointment_data.get("scheduled_at"))
        return appointment

    def get_by_id(self, appointment_id: int, for_update: bool = False) -> Optional[Appointment]:
        """Get appointment by ID, optionally taking a row lock"""
        query = self.db.query(Appointment).filter(Appointment.id == appointment_id)
        if for_update:
            query = query.with_for_update()
        return query.first()

    def count_conflicts(
        self,
        doctor_id: int,
        scheduled_at: datetime,
        exclude_id: Optional[int] = None
    ) -> int:
        """Count active appointments holding the exact doctor slot"""
        query = self.db.query(Appointment).filter(
            Appointment.doctor_id == doctor_id,
            Appointment.scheduled_at == scheduled_at,
            Appointment.status.in_(ACTIVE_STATUSES)
        )
        if exclude_id is not None:
            query = query.filter(Appointment.id != exclude_id)
        return query.count()

    def update_fields(self, appointment: Appointment, update_data: dict) -> Appointment:
        """Update appointment columns in place"""
        for key, value in update_data.items():
            if hasattr(appointment, key):
                setattr(appointment, key, value)
        self._flush(appointment.doctor_id, appointment.scheduled_at)
        return appointment

    def mark_cancelled(
        self,
        appointment: Appointment,
        cancelled_by: int,
        reason: str,
        cancelled_at: datetime
    ) -> Appointment:
        """Cancel an appointment"""
        appointment.status = AppointmentStatus.CANCELLED
        appointment.cancelled_by = cancelled_by
        appointment.cancellation_reason = reason
        appointment.cancelled_at = cancelled_at
        self.db.flush()
        return appointment

    def _flush(self, doctor_id, scheduled_at):
        try:
            self.db.flush()
        except IntegrityError as e:
            if _is_slot_violation(e):
                logger.info(f"Concurrent booking rejected for doctor {doctor_id} at {scheduled_at}")
                raise ConflictError(
                    "The doctor is not available at that date and time",
                    details={"doctor_id": doctor_id, "scheduled_at": str(scheduled_at)}
                ) from e
            raise
