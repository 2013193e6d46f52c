"""
Appointments Validators

Slot checks composed by the appointment service: a doctor's weekly working
hours and double booking on the exact (doctor, start time) pair.
"""

from typing import Optional
from datetime import datetime

from clinic_scheduler.core.clock import Weekday, within_interval
from clinic_scheduler.domain.appointments.repository import (
    AppointmentRepository, DoctorScheduleRepository
)


class ScheduleValidator:
    """Checks a requested slot against a doctor's weekly working hours"""

    def __init__(self, schedule_repo: DoctorScheduleRepository):
        self.schedule_repo = schedule_repo

    def is_within_working_hours(self, doctor_id: int, when: datetime) -> bool:
        """True when an active schedule row for that weekday covers the time.

        A doctor without a row for the day simply does not work then.
        """
        day = Weekday.from_date(when.date())
        requested = when.time()
        return any(
            within_interval(requested, row.start_time, row.end_time)
            for row in self.schedule_repo.get_for_day(doctor_id, day)
        )


class ConflictChecker:
    """Detects double booking on the exact (doctor, start time) slot"""

    def __init__(self, appointment_repo: AppointmentRepository):
        self.appointment_repo = appointment_repo

    def has_conflict(
        self,
        doctor_id: int,
        when: datetime,
        exclude_appointment_id: Optional[int] = None
    ) -> bool:
        # Exact-timestamp match only; overlapping durations do not collide
        return self.appointment_repo.count_conflicts(
            doctor_id, when, exclude_id=exclude_appointment_id
        ) > 0
