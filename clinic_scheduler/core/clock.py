"""
Clock and time-window utilities

Pure helpers used by the appointment lifecycle and the reminder dispatcher:
- parsing requested appointment timestamps
- weekday mapping independent of any locale setting
- "is in the future" and operating-hours checks
"""

from typing import Callable, Union
from datetime import datetime, date, time
import enum

from clinic_scheduler.core.exceptions import ValidationError

Clock = Callable[[], datetime]

DATETIME_FORMATS = (
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M",
    "%Y-%m-%dT%H:%M:%S",
)

DISPLAY_FORMAT = "%d/%m/%Y %H:%M"


class Weekday(str, enum.Enum):
    """Day of week as stored on doctor schedules"""
    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"
    SUNDAY = "SUNDAY"

    @classmethod
    def from_date(cls, value: date) -> "Weekday":
        return _BY_INDEX[value.weekday()]

    @classmethod
    def parse(cls, name: str) -> "Weekday":
        """Accept canonical names or the clinic's Spanish day names"""
        key = name.strip().upper()
        if key in cls.__members__:
            return cls[key]
        for weekday, local_name in SPANISH_NAMES.items():
            if local_name == key:
                return weekday
        raise ValidationError(
            f"Unknown day of week: {name}",
            details={"field": "day_of_week", "value": name}
        )

    @property
    def spanish_name(self) -> str:
        return SPANISH_NAMES[self]


_BY_INDEX = (
    Weekday.MONDAY,
    Weekday.TUESDAY,
    Weekday.WEDNESDAY,
    Weekday.THURSDAY,
    Weekday.FRIDAY,
    Weekday.SATURDAY,
    Weekday.SUNDAY,
)

SPANISH_NAMES = {
    Weekday.MONDAY: "LUNES",
    Weekday.TUESDAY: "MARTES",
    Weekday.WEDNESDAY: "MIERCOLES",
    Weekday.THURSDAY: "JUEVES",
    Weekday.FRIDAY: "VIERNES",
    Weekday.SATURDAY: "SABADO",
    Weekday.SUNDAY: "DOMINGO",
}


def system_clock() -> datetime:
    """Naive local time, matching how appointment timestamps are stored"""
    return datetime.now()


def parse_datetime(value: Union[str, datetime, None], field: str = "scheduled_at") -> datetime:
    """Parse a requested appointment timestamp ("YYYY-MM-DD HH:MM")"""
    if isinstance(value, datetime):
        # Aware values are converted to local wall-clock time before dropping tzinfo
        return value.astimezone().replace(tzinfo=None) if value.tzinfo else value

    if value is None or not str(value).strip():
        raise ValidationError(
            "Date and time are required",
            details={"field": field}
        )

    text = str(value).strip()
    for fmt in DATETIME_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue

    raise ValidationError(
        "Invalid date/time format. Use: YYYY-MM-DD HH:MM",
        details={"field": field, "value": text}
    )


def is_future(when: datetime, now: datetime) -> bool:
    return when > now


def within_clinic_hours(when: datetime, open_hour: int, close_hour: int) -> bool:
    """Clinic-wide window [open_hour, close_hour)"""
    return open_hour <= when.hour < close_hour


def within_interval(value: time, start: time, end: time) -> bool:
    # Half-open: an appointment at the closing time is outside the shift
    return start <= value < end


def format_for_humans(when: datetime) -> str:
    return when.strftime(DISPLAY_FORMAT)
