from typing import Annotated, List, Optional
import json
from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

SUPPORTED_REMINDER_CHANNELS = ("EMAIL", "SMS")


class Settings(BaseSettings):
    PROJECT_NAME: str = "Clinic Scheduler"
    API_V1_STR: str = "/api/v1"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    POSTGRES_SERVER: Optional[str] = None
    POSTGRES_USER: Optional[str] = None
    POSTGRES_PASSWORD: Optional[str] = None
    POSTGRES_DB: Optional[str] = None
    POSTGRES_PORT: str = "5432"
    DATABASE_URL: Optional[str] = None
    DATABASE_POOL_SIZE: int = 10
    DATABASE_MAX_OVERFLOW: int = 20

    @model_validator(mode='after')
    def assemble_db_connection(self) -> 'Settings':
        if not self.DATABASE_URL:
            if all([self.POSTGRES_USER, self.POSTGRES_PASSWORD, self.POSTGRES_SERVER, self.POSTGRES_DB]):
                self.DATABASE_URL = (
                    f"postgresql+psycopg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@"
                    f"{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
                )
            else:
                self.DATABASE_URL = "sqlite:///./clinic.db"
        return self

    # Clinic rules
    CLINIC_NAME: str = "Clinica Salud y Vida"
    CLINIC_OPEN_HOUR: int = 7
    CLINIC_CLOSE_HOUR: int = 19
    DEFAULT_APPOINTMENT_DURATION: int = 30
    REASON_MAX_LENGTH: int = 255

    # Reminders
    REMINDER_LEAD_HOURS: int = 24
    MAX_REMINDER_ATTEMPTS: int = 3
    # Raw env value goes to the validator, so "EMAIL,SMS" works as well as JSON
    REMINDER_CHANNELS: Annotated[List[str], NoDecode] = list(SUPPORTED_REMINDER_CHANNELS)
    REMINDER_SCAN_SECONDS: int = 300
    REMINDER_RETRY_BACKOFF_MINUTES: int = 15

    @field_validator("REMINDER_CHANNELS", mode="before")
    @classmethod
    def assemble_reminder_channels(cls, v):
        if isinstance(v, str) and v.strip().startswith("["):
            v = json.loads(v)
        elif isinstance(v, str):
            v = [i.strip() for i in v.split(",") if i.strip()]
        if isinstance(v, list):
            channels = [str(c).upper() for c in v]
            unknown = [c for c in channels if c not in SUPPORTED_REMINDER_CHANNELS]
            if unknown:
                raise ValueError(f"Unsupported reminder channels: {unknown}")
            if not channels:
                raise ValueError("At least one reminder channel is required")
            return channels
        return v

    @model_validator(mode='after')
    def check_clinic_hours(self) -> 'Settings':
        if not 0 <= self.CLINIC_OPEN_HOUR < self.CLINIC_CLOSE_HOUR <= 24:
            raise ValueError("CLINIC_OPEN_HOUR must be before CLINIC_CLOSE_HOUR")
        if not 1 <= self.MAX_REMINDER_ATTEMPTS <= 3:
            raise ValueError("MAX_REMINDER_ATTEMPTS must be between 1 and 3")
        return self

    # Celery
    REDIS_URL: str = "redis://localhost:6379/0"

    model_config = SettingsConfigDict(case_sensitive=True, env_file=".env", extra='ignore')

settings = Settings()
