from typing import Dict, Any
import logging

from clinic_scheduler.workers.celery_app import celery_app
from clinic_scheduler.infrastructure.database import SessionLocal
from clinic_scheduler.infrastructure.notifications import get_notifier
from clinic_scheduler.domain.reminders.service import ReminderDispatcher

logger = logging.getLogger(__name__)


@celery_app.task(name="clinic_scheduler.workers.tasks.dispatch_due_reminders")
def dispatch_due_reminders() -> Dict[str, Any]:
    """Periodic scan: deliver every reminder whose send time has come.

    Failed deliveries are retried on later scans, never inside this task.
    """
    db = SessionLocal()
    try:
        dispatcher = ReminderDispatcher(db, get_notifier())
        summary = dispatcher.dispatch_due()
        return {"status": "success", **summary}
    except Exception as e:
        logger.error(f"Reminder scan failed: {e}")
        return {"status": "error", "message": str(e)}
    finally:
        db.close()


@celery_app.task(name="clinic_scheduler.workers.tasks.dispatch_reminder")
def dispatch_reminder(reminder_id: int) -> Dict[str, Any]:
    """Deliver a single reminder on demand"""
    db = SessionLocal()
    try:
        reminder = ReminderDispatcher(db, get_notifier()).dispatch(reminder_id)
        return {
            "status": reminder.status.value,
            "reminder_id": reminder.id,
            "attempt_count": reminder.attempt_count,
            "last_error": reminder.last_error,
        }
    finally:
        db.close()
