"""Application Settings - Pydantic Settings for environment configuration."""

from functools import lru_cache
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Loaded from the environment or a .env file. `timezone` is the single
    fixed local timezone of the salon; every appointment date and time is
    interpreted in it.
    """

    # Database (Supabase)
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_key: str = ""

    # Scheduling
    timezone: str = "America/Sao_Paulo"
    availability_fail_closed: bool = False
    default_recurrence_months: int = 3
    default_professional_color: str = "#3788d8"

    # Observability
    otlp_endpoint: str = "http://localhost:4318/v1/traces"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Application
    app_env: Literal["development", "staging", "production"] = "development"
    api_port: int = 8000
    api_host: str = "0.0.0.0"

    # Feature Flags
    enable_tracing: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Fuso fixo do salão; precisa existir na base IANA."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Fuso horário desconhecido: {v}") from e
        return v

    @field_validator("default_recurrence_months")
    @classmethod
    def validate_recurrence_months(cls, v: int) -> int:
        if v < 1:
            raise ValueError("default_recurrence_months deve ser >= 1")
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.app_env == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache for performance - settings are loaded once.
    """
    return Settings()
