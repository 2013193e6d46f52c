"""
Appointments Service Layer

Business logic for the appointment lifecycle: booking, cancellation and
rescheduling, with working-hours validation, double-booking prevention and
the reminder cascade. Every public operation validates first and then
mutates inside a single transaction, so a failure never leaves a partial
write behind.
"""

from typing import Optional, Union
from datetime import datetime, timedelta
import logging

from clinic_scheduler.core.clock import (
    Clock, system_clock, parse_datetime, is_future, within_clinic_hours
)
from clinic_scheduler.core.config import settings
from clinic_scheduler.core.exceptions import (
    ValidationError, NotFoundError, InvalidStateError, ConflictError
)
from clinic_scheduler.domain.appointments.models import Appointment, AppointmentStatus
from clinic_scheduler.domain.appointments.repository import (
    AppointmentRepository, DoctorScheduleRepository
)
from clinic_scheduler.domain.appointments.validators import ScheduleValidator, ConflictChecker
from clinic_scheduler.domain.reminders.models import ReminderChannel, ReminderStatus
from clinic_scheduler.domain.reminders.repository import ReminderRepository
from clinic_scheduler.domain.reminders.service import build_delivery_context, render_message
from clinic_scheduler.domain.users.models import User, UserRole, Patient
from clinic_scheduler.domain.users.repository import UserRepository, PatientRepository
from clinic_scheduler.infrastructure.database import transaction

logger = logging.getLogger(__name__)

BOOKING_ROLES = (UserRole.RECEPTIONIST, UserRole.DOCTOR)

DateTimeInput = Union[str, datetime]


class AppointmentService:
    """Service layer for appointment management"""

    def __init__(self, db, clock: Clock = system_clock, config=settings):
        self.db = db
        self.clock = clock
        self.config = config
        self.appointment_repo = AppointmentRepository(db)
        self.schedule_repo = DoctorScheduleRepository(db)
        self.reminder_repo = ReminderRepository(db)
        self.user_repo = UserRepository(db)
        self.patient_repo = PatientRepository(db)
        self.schedule_validator = ScheduleValidator(self.schedule_repo)
        self.conflict_checker = ConflictChecker(self.appointment_repo)

    # ==================== Queries ====================

    def get_appointment(self, appointment_id: int) -> Appointment:
        """Get appointment by ID"""
        appointment = self.appointment_repo.get_by_id(appointment_id)
        if not appointment:
            raise NotFoundError(
                "Appointment not found",
                details={"appointment_id": appointment_id}
            )
        return appointment

    def check_availability(self, doctor_id: int, when: DateTimeInput) -> bool:
        """True when the doctor has no active appointment at exactly `when`"""
        if doctor_id is None or doctor_id <= 0:
            raise ValidationError(
                "Doctor ID must be greater than 0",
                details={"field": "doctor_id", "value": doctor_id}
            )
        scheduled_at = parse_datetime(when)
        return not self.conflict_checker.has_conflict(doctor_id, scheduled_at)

    # ==================== Lifecycle ====================

    def book(
        self,
        patient_id: int,
        doctor_id: int,
        when: DateTimeInput,
        created_by: int,
        duration_minutes: Optional[int] = None,
        reason: Optional[str] = None,
        notes: Optional[str] = None
    ) -> Appointment:
        """Book a new appointment in SCHEDULED state"""
        self._validate_ids(patient_id=patient_id, doctor_id=doctor_id, created_by=created_by)

        with transaction(self.db, "book appointment"):
            self._validate_creator(created_by)
            patient = self._validate_patient(patient_id)
            doctor = self._validate_doctor(doctor_id)
            scheduled_at = self._validate_booking_time(when)
            self._validate_working_hours(doctor.id, scheduled_at)

            if self.conflict_checker.has_conflict(doctor.id, scheduled_at):
                raise ConflictError(
                    "The doctor is not available at that date and time",
                    details={"doctor_id": doctor.id, "scheduled_at": str(scheduled_at)}
                )

            if duration_minutes is None or duration_minutes <= 0:
                duration_minutes = self._default_duration(doctor.id)

            appointment = self.appointment_repo.create({
                "patient_id": patient.id,
                "doctor_id": doctor.id,
                "scheduled_at": scheduled_at,
                "duration_minutes": duration_minutes,
                "status": AppointmentStatus.SCHEDULED,
                "reason": reason,
                "notes": notes,
                "created_by": created_by,
            })
            self._schedule_reminders(appointment, patient, doctor)

        logger.info(
            f"Appointment {appointment.id} booked for patient {patient.id} "
            f"with doctor {doctor.id} at {scheduled_at}"
        )
        return appointment

    def cancel(self, appointment_id: int, user_id: int, reason: str) -> Appointment:
        """Cancel a scheduled or confirmed appointment and fail its pending reminders"""
        with transaction(self.db, "cancel appointment"):
            appointment = self._get_for_update(appointment_id)
            self._ensure_active(appointment, "cancelled")
            self._validate_actor(user_id)
            reason = self._validate_reason(reason)

            self.appointment_repo.mark_cancelled(appointment, user_id, reason, self.clock())
            failed = self.reminder_repo.fail_pending_for_appointment(appointment.id)

        logger.info(
            f"Appointment {appointment.id} cancelled by user {user_id}; "
            f"{failed} pending reminder(s) closed"
        )
        return appointment

    def reschedule(
        self,
        appointment_id: int,
        new_doctor_id: int,
        new_when: DateTimeInput,
        user_id: int,
        reason: str
    ) -> Appointment:
        """Move an appointment to a new doctor/time, keeping the same row.

        The status is left as it was; `rescheduled_from` records the move.
        """
        with transaction(self.db, "reschedule appointment"):
            appointment = self._get_for_update(appointment_id)
            self._ensure_active(appointment, "rescheduled")
            self._validate_actor(user_id)
            doctor = self._validate_doctor(new_doctor_id)
            scheduled_at = self._validate_future(new_when)

            if self.conflict_checker.has_conflict(
                doctor.id, scheduled_at, exclude_appointment_id=appointment.id
            ):
                raise ConflictError(
                    "The doctor is not available at that date and time",
                    details={"doctor_id": doctor.id, "scheduled_at": str(scheduled_at)}
                )

            self._validate_working_hours(doctor.id, scheduled_at)
            reason = self._validate_reason(reason)

            previous = (appointment.doctor_id, appointment.scheduled_at)
            self.appointment_repo.update_fields(appointment, {
                "doctor_id": doctor.id,
                "doctor": doctor,
                "scheduled_at": scheduled_at,
                "rescheduled_from": appointment.id,
            })
            self._reset_reminders(appointment, appointment.patient, doctor)

        logger.info(
            f"Appointment {appointment.id} rescheduled by user {user_id} from "
            f"doctor {previous[0]} at {previous[1]} to doctor {doctor.id} at "
            f"{scheduled_at}: {reason}"
        )
        return appointment

    # ==================== Validation ====================

    def _validate_ids(self, **ids) -> None:
        for field, value in ids.items():
            if value is None or value <= 0:
                raise ValidationError(
                    f"Invalid {field.replace('_', ' ')}",
                    details={"field": field, "value": value}
                )

    def _validate_creator(self, user_id: int) -> User:
        user = self.user_repo.get_active(user_id)
        if not user or user.role not in BOOKING_ROLES:
            raise ValidationError(
                "Creating user is not an active receptionist or doctor",
                details={"field": "created_by", "value": user_id}
            )
        return user

    def _validate_patient(self, patient_id: int) -> Patient:
        patient = self.patient_repo.get_active(patient_id)
        if not patient:
            raise ValidationError(
                "Patient does not exist or is inactive",
                details={"field": "patient_id", "value": patient_id}
            )
        return patient

    def _validate_doctor(self, doctor_id: int) -> User:
        doctor = self.user_repo.get_active_doctor(doctor_id) if doctor_id and doctor_id > 0 else None
        if not doctor:
            raise ValidationError(
                "Doctor does not exist or is inactive",
                details={"field": "doctor_id", "value": doctor_id}
            )
        return doctor

    def _validate_actor(self, user_id: int) -> User:
        user = self.user_repo.get_active(user_id) if user_id and user_id > 0 else None
        if not user:
            raise ValidationError(
                "User does not exist or is inactive",
                details={"field": "user_id", "value": user_id}
            )
        return user

    def _validate_future(self, when: DateTimeInput) -> datetime:
        scheduled_at = parse_datetime(when)
        if not is_future(scheduled_at, self.clock()):
            raise ValidationError(
                "Appointments cannot be scheduled in the past",
                details={"field": "scheduled_at", "value": str(scheduled_at)}
            )
        return scheduled_at

    def _validate_booking_time(self, when: DateTimeInput) -> datetime:
        scheduled_at = self._validate_future(when)
        open_hour, close_hour = self.config.CLINIC_OPEN_HOUR, self.config.CLINIC_CLOSE_HOUR
        if not within_clinic_hours(scheduled_at, open_hour, close_hour):
            raise ValidationError(
                f"Time is outside clinic hours ({open_hour:02d}:00 - {close_hour:02d}:00)",
                details={"field": "scheduled_at", "value": str(scheduled_at)}
            )
        return scheduled_at

    def _validate_working_hours(self, doctor_id: int, scheduled_at: datetime) -> None:
        if not self.schedule_validator.is_within_working_hours(doctor_id, scheduled_at):
            raise ValidationError(
                "Requested time is outside the doctor's working hours",
                details={"doctor_id": doctor_id, "scheduled_at": str(scheduled_at)}
            )

    def _validate_reason(self, reason: Optional[str]) -> str:
        if reason is None or not reason.strip():
            raise ValidationError("A reason is required", details={"field": "reason"})
        if len(reason) > self.config.REASON_MAX_LENGTH:
            raise ValidationError(
                f"Reason must be at most {self.config.REASON_MAX_LENGTH} characters",
                details={"field": "reason", "length": len(reason)}
            )
        return reason

    def _get_for_update(self, appointment_id: int) -> Appointment:
        appointment = self.appointment_repo.get_by_id(appointment_id, for_update=True)
        if not appointment:
            raise NotFoundError(
                "Appointment not found",
                details={"appointment_id": appointment_id}
            )
        return appointment

    def _ensure_active(self, appointment: Appointment, action: str) -> None:
        if not appointment.is_active:
            raise InvalidStateError(
                f"Appointment cannot be {action} in its current state",
                details={"appointment_id": appointment.id, "status": appointment.status.value}
            )

    # ==================== Reminders ====================

    def _default_duration(self, doctor_id: int) -> int:
        minutes = self.user_repo.get_specialty_duration(doctor_id)
        return minutes if minutes and minutes > 0 else self.config.DEFAULT_APPOINTMENT_DURATION

    def _send_time(self, scheduled_at: datetime) -> datetime:
        return scheduled_at - timedelta(hours=self.config.REMINDER_LEAD_HOURS)

    def _schedule_reminders(self, appointment: Appointment, patient: Patient, doctor: User) -> None:
        context = build_delivery_context(appointment, patient, doctor, self.config.CLINIC_NAME)
        for channel_name in self.config.REMINDER_CHANNELS:
            channel = ReminderChannel(channel_name)
            self.reminder_repo.create({
                "appointment_id": appointment.id,
                "channel": channel,
                "message": render_message(channel, context),
                "scheduled_send_at": self._send_time(appointment.scheduled_at),
                "status": ReminderStatus.PENDING,
                "attempt_count": 0,
            })

    def _reset_reminders(self, appointment: Appointment, patient: Patient, doctor: User) -> None:
        context = build_delivery_context(appointment, patient, doctor, self.config.CLINIC_NAME)
        send_at = self._send_time(appointment.scheduled_at)
        reminders = self.reminder_repo.list_by_appointment(appointment.id, for_update=True)

        for reminder in reminders:
            if reminder.status not in (ReminderStatus.PENDING, ReminderStatus.FAILED):
                continue
            reminder.status = ReminderStatus.PENDING
            reminder.attempt_count = 0
            reminder.scheduled_send_at = send_at
            reminder.last_error = None
            reminder.last_attempt_at = None
            reminder.message = render_message(reminder.channel, context)
            self.reminder_repo.save(reminder)

        existing = {reminder.channel for reminder in reminders}
        for channel_name in self.config.REMINDER_CHANNELS:
            channel = ReminderChannel(channel_name)
            if channel in existing:
                continue
            self.reminder_repo.create({
                "appointment_id": appointment.id,
                "channel": channel,
                "message": render_message(channel, context),
                "scheduled_send_at": send_at,
                "status": ReminderStatus.PENDING,
                "attempt_count": 0,
            })
