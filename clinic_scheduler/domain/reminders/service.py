"""
Reminders Service Layer

Selects due reminders, delivers them through a Notifier and records the
outcome. Delivery failures never escape dispatch(); they end up in the
reminder's FAILED status and last_error column. Each dispatch is one
transaction holding the reminder row lock, so concurrent calls for the same
reminder serialize while different reminders proceed independently.
"""

from typing import Optional, Dict, Any, Iterator, Tuple
from datetime import datetime, timedelta
import logging

from clinic_scheduler.core.clock import Clock, system_clock, format_for_humans
from clinic_scheduler.core.config import settings
from clinic_scheduler.core.exceptions import (
    ValidationError, NotFoundError, InvalidStateError, RetryExhaustedError
)
from clinic_scheduler.domain.appointments.models import Appointment
from clinic_scheduler.domain.reminders.models import Reminder, ReminderChannel, ReminderStatus
from clinic_scheduler.domain.reminders.repository import ReminderRepository
from clinic_scheduler.domain.users.models import Patient, User
from clinic_scheduler.infrastructure.database import transaction
from clinic_scheduler.infrastructure.notifications import Notifier

logger = logging.getLogger(__name__)

EMAIL_SUBJECT = "Appointment reminder"

EMAIL_TEMPLATE = (
    "Dear {patient_name},\n\n"
    "This is a reminder of your medical appointment on {appointment_time} "
    "with Dr. {doctor_name}.\n\n"
    "{clinic_name}"
)

SMS_TEMPLATE = (
    "Hi {patient_name}, reminder: medical appointment {appointment_time} "
    "with Dr. {doctor_name}. {clinic_name}"
)


def build_delivery_context(
    appointment: Appointment,
    patient: Patient,
    doctor: User,
    clinic_name: Optional[str] = None
) -> Dict[str, Any]:
    """Denormalized data a notifier needs to render and address a reminder"""
    return {
        "appointment_id": appointment.id,
        "patient_name": patient.full_name,
        "patient_email": (patient.email or "").strip(),
        "patient_phone": (patient.phone or "").strip(),
        "doctor_name": doctor.full_name,
        "appointment_time": format_for_humans(appointment.scheduled_at),
        "clinic_name": clinic_name or settings.CLINIC_NAME,
    }


def render_message(channel: ReminderChannel, context: Dict[str, Any]) -> str:
    template = EMAIL_TEMPLATE if channel == ReminderChannel.EMAIL else SMS_TEMPLATE
    return template.format(**context)


class ReminderDispatcher:
    """Service layer for reminder delivery"""

    def __init__(self, db, notifier: Notifier, clock: Clock = system_clock, config=settings):
        self.db = db
        self.notifier = notifier
        self.clock = clock
        self.config = config
        self.reminder_repo = ReminderRepository(db)

    def list_due(self, now: Optional[datetime] = None) -> Iterator[Reminder]:
        """Pending reminders whose send time has come, earliest first.

        Each call runs a fresh query, so iterating again yields a new snapshot.
        """
        return self.reminder_repo.iter_due(ReminderStatus.PENDING, now or self.clock())

    def list_retryable(self, now: Optional[datetime] = None) -> Iterator[Reminder]:
        """Failed reminders with attempts left whose backoff has elapsed"""
        now = now or self.clock()
        for reminder in self.reminder_repo.iter_due(ReminderStatus.FAILED, now):
            if reminder.attempt_count >= self.config.MAX_REMINDER_ATTEMPTS:
                continue
            if reminder.last_attempt_at and reminder.last_attempt_at + self._backoff(reminder) > now:
                continue
            yield reminder

    def dispatch(self, reminder_id: int) -> Reminder:
        """Attempt delivery of one reminder and persist the outcome"""
        with transaction(self.db, "dispatch reminder"):
            reminder = self.reminder_repo.get_by_id(reminder_id, for_update=True)
            if not reminder:
                raise NotFoundError(
                    "Reminder not found",
                    details={"reminder_id": reminder_id}
                )
            self._ensure_dispatchable(reminder)

            appointment = reminder.appointment
            context = build_delivery_context(
                appointment, appointment.patient, appointment.doctor, self.config.CLINIC_NAME
            )
            context["message"] = render_message(reminder.channel, context)
            context["subject"] = EMAIL_SUBJECT

            delivered, error = self._deliver(reminder, context)

            now = self.clock()
            reminder.attempt_count += 1
            reminder.last_attempt_at = now
            if delivered:
                reminder.status = ReminderStatus.SENT
                reminder.sent_at = now
                reminder.last_error = None
            else:
                reminder.status = ReminderStatus.FAILED
                reminder.last_error = error[:500]
            self.reminder_repo.save(reminder)

        if delivered:
            logger.info(f"Reminder {reminder.id} sent via {reminder.channel.value}")
        else:
            logger.warning(
                f"Reminder {reminder.id} failed (attempt {reminder.attempt_count}"
                f"/{self.config.MAX_REMINDER_ATTEMPTS}): {reminder.last_error}"
            )
        return reminder

    def dispatch_due(self, now: Optional[datetime] = None) -> Dict[str, int]:
        """Dispatch every due and retryable reminder, one transaction each"""
        now = now or self.clock()
        reminder_ids = [r.id for r in self.list_due(now)]
        reminder_ids += [r.id for r in self.list_retryable(now)]

        summary = {"processed": 0, "sent": 0, "failed": 0, "skipped": 0}
        for reminder_id in reminder_ids:
            try:
                reminder = self.dispatch(reminder_id)
            except (NotFoundError, InvalidStateError, RetryExhaustedError) as e:
                # Another worker or a cancellation got there first
                logger.info(f"Skipping reminder {reminder_id}: {e.message}")
                summary["skipped"] += 1
                continue
            summary["processed"] += 1
            if reminder.status == ReminderStatus.SENT:
                summary["sent"] += 1
            else:
                summary["failed"] += 1

        logger.info(f"Reminder scan finished: {summary}")
        return summary

    def _ensure_dispatchable(self, reminder: Reminder) -> None:
        if reminder.status == ReminderStatus.SENT:
            raise InvalidStateError(
                "Reminder was already sent",
                details={"reminder_id": reminder.id, "status": reminder.status.value}
            )
        if not reminder.appointment.is_active:
            raise InvalidStateError(
                "Reminder belongs to an appointment that is no longer active",
                details={
                    "reminder_id": reminder.id,
                    "appointment_status": reminder.appointment.status.value
                }
            )
        if reminder.attempt_count >= self.config.MAX_REMINDER_ATTEMPTS:
            raise RetryExhaustedError(
                "Maximum number of delivery attempts reached",
                details={"reminder_id": reminder.id, "attempt_count": reminder.attempt_count}
            )

    def _deliver(self, reminder: Reminder, context: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
        try:
            if reminder.channel == ReminderChannel.EMAIL:
                address = context["patient_email"]
                if not address:
                    raise ValidationError("Patient email is missing")
                if "@" not in address:
                    raise ValidationError("Patient email has an invalid format")
                delivered = self.notifier.send_email(address, context)
            else:
                phone = context["patient_phone"]
                if not phone:
                    raise ValidationError("Patient phone number is missing")
                delivered = self.notifier.send_sms(phone, context)
        except Exception as e:
            # Transport errors are recorded on the reminder, not raised
            return False, str(e) or e.__class__.__name__

        if not delivered:
            return False, f"{reminder.channel.value} provider rejected the message"
        return True, None

    def _backoff(self, reminder: Reminder) -> timedelta:
        minutes = self.config.REMINDER_RETRY_BACKOFF_MINUTES * 2 ** max(reminder.attempt_count - 1, 0)
        return timedelta(minutes=minutes)
