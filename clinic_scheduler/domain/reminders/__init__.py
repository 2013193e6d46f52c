# Reminders domain module
from clinic_scheduler.domain.reminders.models import Reminder, ReminderChannel, ReminderStatus

__all__ = [
    "Reminder",
    "ReminderChannel",
    "ReminderStatus",
]
