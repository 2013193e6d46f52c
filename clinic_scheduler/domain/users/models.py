"""
People referenced by the scheduling core

Staff users (doctors, receptionists, ...), patients and the medical
specialties that carry a default consultation length. These records are
owned by other features; the scheduling core only reads them.
"""

from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Integer, Enum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from clinic_scheduler.infrastructure.database import Base
import enum


class UserRole(str, enum.Enum):
    """Staff roles"""
    ADMIN = "ADMIN"
    DOCTOR = "DOCTOR"
    RECEPTIONIST = "RECEPTIONIST"
    NURSE = "NURSE"
    PATIENT = "PATIENT"


class Specialty(Base):
    """Medical specialty with its default consultation length"""
    __tablename__ = "specialties"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), unique=True, nullable=False)
    consultation_minutes = Column(Integer, nullable=False, default=30)


class User(Base):
    """Clinic staff account"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True)
    phone = Column(String(20))

    role = Column(Enum(UserRole), nullable=False, default=UserRole.RECEPTIONIST)
    specialty_id = Column(Integer, ForeignKey("specialties.id"))
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    specialty = relationship("Specialty")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class Patient(Base):
    """Patient contact record"""
    __tablename__ = "patients"

    id = Column(Integer, primary_key=True, autoincrement=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255))
    phone = Column(String(20))
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
