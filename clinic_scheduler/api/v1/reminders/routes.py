"""
Reminders API Routes

Endpoints for listing due reminders and triggering delivery.
"""

from typing import List
from fastapi import APIRouter, Depends

from clinic_scheduler.infrastructure.database import get_db
from clinic_scheduler.infrastructure.notifications import get_notifier
from clinic_scheduler.domain.reminders.service import ReminderDispatcher
from clinic_scheduler.api.v1.reminders.schemas import ReminderResponse, DispatchSummary

router = APIRouter()


@router.get("/due", response_model=List[ReminderResponse])
def list_due_reminders(
    db = Depends(get_db),
    notifier = Depends(get_notifier)
):
    """List pending reminders whose send time has come"""
    dispatcher = ReminderDispatcher(db, notifier)
    return list(dispatcher.list_due())


@router.post("/dispatch-due", response_model=DispatchSummary)
def dispatch_due_reminders(
    db = Depends(get_db),
    notifier = Depends(get_notifier)
):
    """Attempt delivery of every due reminder"""
    dispatcher = ReminderDispatcher(db, notifier)
    return dispatcher.dispatch_due()


@router.post("/{reminder_id}/dispatch", response_model=ReminderResponse)
def dispatch_reminder(
    reminder_id: int,
    db = Depends(get_db),
    notifier = Depends(get_notifier)
):
    """Attempt delivery of one reminder"""
    dispatcher = ReminderDispatcher(db, notifier)
    return dispatcher.dispatch(reminder_id)
