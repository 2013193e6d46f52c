import pytest
from datetime import datetime, time
from typing import Generator
from unittest.mock import Mock

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from clinic_scheduler.core.clock import Weekday
from clinic_scheduler.infrastructure.database import Base, get_db
from clinic_scheduler.infrastructure.notifications import Notifier, get_notifier
from clinic_scheduler.domain.users.models import User, UserRole, Patient, Specialty
from clinic_scheduler.domain.appointments.models import DoctorSchedule
from clinic_scheduler.domain.appointments.repository import DoctorScheduleRepository
from clinic_scheduler.domain.appointments.service import AppointmentService
from clinic_scheduler.domain.reminders import models as reminder_models  # noqa: F401
from clinic_scheduler.domain.reminders.service import ReminderDispatcher
from clinic_scheduler.main import app


# In-memory database shared by every connection of a test
test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestSessionLocal = sessionmaker(
    bind=test_engine, autoflush=False, expire_on_commit=False
)

FROZEN_NOW = datetime(2099, 6, 1, 9, 0)


class FrozenClock:
    """Clock that only moves when a test moves it"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Create a fresh database schema and session for each test."""
    Base.metadata.create_all(bind=test_engine)
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture(scope="function")
def session_factory(db_session: Session) -> sessionmaker:
    """Factory for code that opens its own sessions, bound to the test schema"""
    return TestSessionLocal


@pytest.fixture(scope="function")
def clock() -> FrozenClock:
    return FrozenClock(FROZEN_NOW)


@pytest.fixture(scope="function")
def notifier() -> Mock:
    """Notifier double that accepts every message"""
    mock = Mock(spec=Notifier)
    mock.send_email.return_value = True
    mock.send_sms.return_value = True
    return mock


@pytest.fixture(scope="function")
def specialty(db_session: Session) -> Specialty:
    specialty = Specialty(name="General Medicine", consultation_minutes=30)
    db_session.add(specialty)
    db_session.commit()
    return specialty


def _add_user(db_session: Session, **fields) -> User:
    user = User(**fields)
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture(scope="function")
def doctor(db_session: Session, specialty: Specialty) -> User:
    """Doctor working Monday and Tuesday 08:00-18:00"""
    doctor = _add_user(
        db_session,
        first_name="Gregory",
        last_name="House",
        email="house@clinic.test",
        role=UserRole.DOCTOR,
        specialty_id=specialty.id,
    )
    schedules = DoctorScheduleRepository(db_session)
    for day in (Weekday.MONDAY, Weekday.TUESDAY):
        schedules.create({
            "doctor_id": doctor.id,
            "day_of_week": day,
            "start_time": time(8, 0),
            "end_time": time(18, 0),
        })
    db_session.commit()
    return doctor


@pytest.fixture(scope="function")
def other_doctor(db_session: Session, specialty: Specialty) -> User:
    """Doctor working Tuesday 09:00-13:00 only"""
    doctor = _add_user(
        db_session,
        first_name="Lisa",
        last_name="Cuddy",
        email="cuddy@clinic.test",
        role=UserRole.DOCTOR,
        specialty_id=specialty.id,
    )
    db_session.add(DoctorSchedule(
        doctor_id=doctor.id,
        day_of_week=Weekday.TUESDAY,
        start_time=time(9, 0),
        end_time=time(13, 0),
    ))
    db_session.commit()
    return doctor


@pytest.fixture(scope="function")
def receptionist(db_session: Session) -> User:
    return _add_user(
        db_session,
        first_name="Pam",
        last_name="Beesly",
        email="frontdesk@clinic.test",
        role=UserRole.RECEPTIONIST,
    )


@pytest.fixture(scope="function")
def nurse(db_session: Session) -> User:
    return _add_user(
        db_session,
        first_name="Carla",
        last_name="Espinosa",
        email="nurse@clinic.test",
        role=UserRole.NURSE,
    )


@pytest.fixture(scope="function")
def patient(db_session: Session) -> Patient:
    patient = Patient(
        first_name="John",
        last_name="Doe",
        email="john.doe@example.com",
        phone="+1234567890",
    )
    db_session.add(patient)
    db_session.commit()
    return patient


@pytest.fixture(scope="function")
def appointment_service(db_session: Session, clock: FrozenClock) -> AppointmentService:
    return AppointmentService(db_session, clock=clock)


@pytest.fixture(scope="function")
def dispatcher(db_session: Session, notifier: Mock, clock: FrozenClock) -> ReminderDispatcher:
    return ReminderDispatcher(db_session, notifier, clock=clock)


@pytest.fixture(scope="function")
def booked(appointment_service: AppointmentService, patient, doctor, receptionist):
    """Monday 2099-06-15 14:30 appointment with the default reminders"""
    return appointment_service.book(
        patient_id=patient.id,
        doctor_id=doctor.id,
        when="2099-06-15 14:30",
        created_by=receptionist.id,
        reason="Annual checkup",
    )


@pytest.fixture(scope="function")
def client(db_session: Session, notifier: Mock) -> Generator[TestClient, None, None]:
    """Create a test client with database and notifier overrides."""

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "appointments: mark test as appointment lifecycle related"
    )
    config.addinivalue_line(
        "markers", "reminders: mark test as reminder dispatch related"
    )
