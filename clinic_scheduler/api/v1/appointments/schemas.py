"""
Appointments API Schemas

Pydantic models for appointment-related API requests and responses.
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from clinic_scheduler.domain.appointments.models import AppointmentStatus


class AppointmentCreate(BaseModel):
    """Schema for booking an appointment"""
    patient_id: int
    doctor_id: int
    scheduled_at: str = Field(..., description="Format: YYYY-MM-DD HH:MM", examples=["2099-06-15 14:30"])
    duration_minutes: int = Field(0, description="0 uses the specialty default")
    reason: Optional[str] = None
    notes: Optional[str] = None
    created_by: int


class AppointmentCancel(BaseModel):
    """Schema for cancelling appointment"""
    user_id: int
    reason: str


class AppointmentReschedule(BaseModel):
    """Schema for rescheduling appointment"""
    doctor_id: int
    scheduled_at: str = Field(..., description="Format: YYYY-MM-DD HH:MM")
    user_id: int
    reason: str


class AppointmentResponse(BaseModel):
    """Schema for appointment response"""
    id: int
    patient_id: int
    doctor_id: int
    scheduled_at: datetime
    duration_minutes: int
    status: AppointmentStatus
    reason: Optional[str] = None
    notes: Optional[str] = None
    created_by: int
    cancelled_by: Optional[int] = None
    cancellation_reason: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    rescheduled_from: Optional[int] = None

    class Config:
        from_attributes = True


class AvailabilityResponse(BaseModel):
    """Schema for doctor availability check"""
    doctor_id: int
    scheduled_at: str
    available: bool
