from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from clinic_scheduler.domain.reminders.models import ReminderChannel, ReminderStatus


class ReminderResponse(BaseModel):
    """Schema for reminder response"""
    id: int
    appointment_id: int
    channel: ReminderChannel
    message: Optional[str] = None
    scheduled_send_at: datetime
    status: ReminderStatus
    attempt_count: int
    last_error: Optional[str] = None
    sent_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DispatchSummary(BaseModel):
    """Result of a reminder scan"""
    processed: int
    sent: int
    failed: int
    skipped: int
