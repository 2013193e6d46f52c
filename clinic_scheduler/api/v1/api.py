from fastapi import APIRouter
from clinic_scheduler.api.v1.appointments import routes as appointments
from clinic_scheduler.api.v1.reminders import routes as reminders

api_router = APIRouter()
api_router.include_router(appointments.router, prefix="/appointments", tags=["appointments"])
api_router.include_router(reminders.router, prefix="/reminders", tags=["reminders"])
