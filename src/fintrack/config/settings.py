"""Settings for the finance tracker, read from FINTRACK_* environment variables."""

from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class Settings(BaseSettings):
    """
    Runtime configuration.

    Every field can be set as FINTRACK_<FIELD> in the environment or in a
    `.env` file next to the process.
    """

    model_config = SettingsConfigDict(
        env_prefix="FINTRACK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Personal Finance Tracker"

    # Storage: the SQLite file lives in data_dir unless database_url says otherwise
    data_dir: Optional[Path] = None
    database_url: Optional[str] = None

    log_level: str = "INFO"

    broker_base_url: str = "https://api.invertironline.com"
    rate_provider_url: str = "https://dolarapi.com/v1/dolares/bolsa"
    http_timeout_seconds: float = Field(default=10.0, gt=0)

    # Without a secret, broker tokens are kept in memory only
    token_encryption_secret: Optional[str] = None

    exchange_rate_refresh_each_pass: bool = True
    exchange_rate_max_age_seconds: Optional[int] = Field(default=None, ge=0)

    oversell_policy: Literal["clamp", "reject"] = "clamp"

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(_LOG_LEVELS)}")
        return level

    def get_data_dir(self) -> Path:
        """Data directory (default ~/.fintrack), created on first use."""
        data_dir = self.data_dir or Path.home() / ".fintrack"
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    @property
    def database_path(self) -> Path:
        return self.get_data_dir() / "fintrack.db"

    def get_database_url(self) -> str:
        return self.database_url or f"sqlite:///{self.database_path}"


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Process-wide settings, loaded lazily from the environment."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def set_settings(settings: Settings) -> None:
    """Install settings built elsewhere (tests, AppContext)."""
    global _settings
    _settings = settings


def reset_settings() -> None:
    """Forget the installed settings; the next read reloads the environment."""
    global _settings
    _settings = None
