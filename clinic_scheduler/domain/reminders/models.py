"""
Reminder Domain Models

One reminder row per notification channel per upcoming appointment.
"""

from sqlalchemy import Column, String, DateTime, ForeignKey, Integer, Text, Enum, CheckConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from clinic_scheduler.domain.appointments.models import Appointment
from clinic_scheduler.infrastructure.database import Base
import enum


class ReminderChannel(str, enum.Enum):
    """Delivery channel"""
    EMAIL = "EMAIL"
    SMS = "SMS"


class ReminderStatus(str, enum.Enum):
    """Reminder delivery status"""
    PENDING = "PENDING"
    SENT = "SENT"
    FAILED = "FAILED"


class Reminder(Base):
    """Scheduled notification for an appointment"""
    __tablename__ = "reminders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    appointment_id = Column(Integer, ForeignKey("appointments.id"), nullable=False, index=True)

    channel = Column(Enum(ReminderChannel), nullable=False)
    message = Column(Text)
    scheduled_send_at = Column(DateTime, nullable=False, index=True)

    status = Column(Enum(ReminderStatus), nullable=False, default=ReminderStatus.PENDING)
    attempt_count = Column(Integer, nullable=False, default=0)
    last_error = Column(String(500))
    last_attempt_at = Column(DateTime)
    sent_at = Column(DateTime)

    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    appointment = relationship(Appointment)

    __table_args__ = (
        CheckConstraint('attempt_count >= 0 AND attempt_count <= 3', name='check_attempt_count'),
    )
