import pytest
from pydantic import ValidationError

from clinic_scheduler.core.config import Settings


@pytest.mark.unit
class TestSettings:

    def test_defaults(self) -> None:
        config = Settings(_env_file=None)
        assert config.CLINIC_OPEN_HOUR == 7
        assert config.CLINIC_CLOSE_HOUR == 19
        assert config.MAX_REMINDER_ATTEMPTS == 3
        assert config.REMINDER_CHANNELS == ["EMAIL", "SMS"]

    def test_database_url_is_assembled_from_parts(self) -> None:
        config = Settings(
            _env_file=None,
            DATABASE_URL=None,
            POSTGRES_USER="clinic",
            POSTGRES_PASSWORD="secret",
            POSTGRES_SERVER="db",
            POSTGRES_DB="clinic",
        )
        assert config.DATABASE_URL == "postgresql+psycopg://clinic:secret@db:5432/clinic"

    def test_channels_from_comma_string(self) -> None:
        config = Settings(_env_file=None, REMINDER_CHANNELS="email, sms")
        assert config.REMINDER_CHANNELS == ["EMAIL", "SMS"]

    @pytest.mark.parametrize("raw, expected", [
        ("email, sms", ["EMAIL", "SMS"]),
        ("sms", ["SMS"]),
        ('["EMAIL"]', ["EMAIL"]),
    ])
    def test_channels_from_environment(self, monkeypatch, raw, expected) -> None:
        monkeypatch.setenv("REMINDER_CHANNELS", raw)
        config = Settings(_env_file=None)
        assert config.REMINDER_CHANNELS == expected

    def test_unknown_channel_from_environment(self, monkeypatch) -> None:
        monkeypatch.setenv("REMINDER_CHANNELS", "EMAIL,FAX")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_single_channel(self) -> None:
        config = Settings(_env_file=None, REMINDER_CHANNELS=["sms"])
        assert config.REMINDER_CHANNELS == ["SMS"]

    def test_unknown_channel(self) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, REMINDER_CHANNELS="EMAIL,PIGEON")

    def test_empty_channels(self) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, REMINDER_CHANNELS="")

    def test_hours_must_be_ordered(self) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, CLINIC_OPEN_HOUR=19, CLINIC_CLOSE_HOUR=7)

    @pytest.mark.parametrize("attempts", [0, 4])
    def test_attempt_limit_range(self, attempts) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, MAX_REMINDER_ATTEMPTS=attempts)
