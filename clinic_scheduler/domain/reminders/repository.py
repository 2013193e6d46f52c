"""
Reminders Repository Layer

Data access for reminder rows. Reminders for an appointment are always
touched inside the same transaction as the appointment itself.
"""

from typing import Optional, List, Iterable, Iterator
from datetime import datetime

from clinic_scheduler.domain.appointments.models import Appointment, ACTIVE_STATUSES
from clinic_scheduler.domain.reminders.models import Reminder, ReminderStatus


class ReminderRepository:
    """Repository for reminder data access operations"""

    def __init__(self, db):
        self.db = db

    def create(self, reminder_data: dict) -> Reminder:
        """Create a new reminder"""
        reminder = Reminder(**reminder_data)
        self.db.add(reminder)
        self.db.flush()
        return reminder

    def get_by_id(self, reminder_id: int, for_update: bool = False) -> Optional[Reminder]:
        """Get reminder by ID, optionally taking a row lock"""
        query = self.db.query(Reminder).filter(Reminder.id == reminder_id)
        if for_update:
            query = query.with_for_update()
        return query.first()

    def list_by_appointment(
        self,
        appointment_id: int,
        statuses: Optional[Iterable[ReminderStatus]] = None,
        for_update: bool = False
    ) -> List[Reminder]:
        """Get reminders for an appointment"""
        query = self.db.query(Reminder).filter(Reminder.appointment_id == appointment_id)
        if statuses is not None:
            query = query.filter(Reminder.status.in_(list(statuses)))
        if for_update:
            query = query.with_for_update()
        return query.order_by(Reminder.id).all()

    def iter_due(self, status: ReminderStatus, now: datetime) -> Iterator[Reminder]:
        """Stream reminders in a status whose send time has passed, earliest first.

        Only reminders of appointments that still hold their slot are returned.
        """
        query = self.db.query(Reminder).join(
            Appointment, Reminder.appointment_id == Appointment.id
        ).filter(
            Reminder.status == status,
            Reminder.scheduled_send_at <= now,
            Appointment.status.in_(ACTIVE_STATUSES)
        ).order_by(Reminder.scheduled_send_at, Reminder.id)
        yield from query.yield_per(100)

    def fail_pending_for_appointment(self, appointment_id: int) -> int:
        """Move every pending reminder of an appointment to FAILED"""
        return self.db.query(Reminder).filter(
            Reminder.appointment_id == appointment_id,
            Reminder.status == ReminderStatus.PENDING
        ).update(
            {Reminder.status: ReminderStatus.FAILED},
            synchronize_session="fetch"
        )

    def save(self, reminder: Reminder) -> Reminder:
        """Flush pending changes on a reminder"""
        self.db.add(reminder)
        self.db.flush()
        return reminder
