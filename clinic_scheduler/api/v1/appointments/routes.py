"""
Appointments API Routes

API endpoints for booking, cancelling and rescheduling appointments.
"""

from fastapi import APIRouter, Depends, Query, status

from clinic_scheduler.infrastructure.database import get_db
from clinic_scheduler.domain.appointments.service import AppointmentService
from clinic_scheduler.api.v1.appointments.schemas import (
    AppointmentCreate, AppointmentCancel, AppointmentReschedule,
    AppointmentResponse, AvailabilityResponse
)

router = APIRouter()


@router.post("", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def book_appointment(
    appointment_data: AppointmentCreate,
    db = Depends(get_db)
):
    """Book a new appointment"""
    service = AppointmentService(db)
    return service.book(
        patient_id=appointment_data.patient_id,
        doctor_id=appointment_data.doctor_id,
        when=appointment_data.scheduled_at,
        created_by=appointment_data.created_by,
        duration_minutes=appointment_data.duration_minutes,
        reason=appointment_data.reason,
        notes=appointment_data.notes
    )


@router.get("/availability", response_model=AvailabilityResponse)
def check_availability(
    doctor_id: int = Query(...),
    when: str = Query(..., description="Format: YYYY-MM-DD HH:MM"),
    db = Depends(get_db)
):
    """Check whether a doctor's exact slot is free"""
    service = AppointmentService(db)
    return {
        "doctor_id": doctor_id,
        "scheduled_at": when,
        "available": service.check_availability(doctor_id, when)
    }


@router.get("/{appointment_id}", response_model=AppointmentResponse)
def get_appointment(
    appointment_id: int,
    db = Depends(get_db)
):
    """Get appointment by ID"""
    service = AppointmentService(db)
    return service.get_appointment(appointment_id)


@router.post("/{appointment_id}/cancel", response_model=AppointmentResponse)
def cancel_appointment(
    appointment_id: int,
    cancel_data: AppointmentCancel,
    db = Depends(get_db)
):
    """Cancel an appointment"""
    service = AppointmentService(db)
    return service.cancel(appointment_id, cancel_data.user_id, cancel_data.reason)


@router.post("/{appointment_id}/reschedule", response_model=AppointmentResponse)
def reschedule_appointment(
    appointment_id: int,
    reschedule_data: AppointmentReschedule,
    db = Depends(get_db)
):
    """Reschedule an appointment"""
    service = AppointmentService(db)
    return service.reschedule(
        appointment_id,
        reschedule_data.doctor_id,
        reschedule_data.scheduled_at,
        reschedule_data.user_id,
        reschedule_data.reason
    )
