"""Application Configuration - environment-driven settings via pydantic-settings.

Invariants:
    - get_settings() is cached (lru_cache) - single instance per process
    - Tracing defaults depend on environment: on, console, 100% sampling in
      development; off, otlp, 10% sampling elsewhere. Explicit values always win.
    - An unparsable TRACING_SAMPLING_RATE falls back to 1.0
"""

from functools import lru_cache
from typing import Annotated

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DEVELOPMENT = "development"


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Service
    service_name: str = "user-api"
    service_version: str = "1.0.0"
    environment: str = Field(
        DEVELOPMENT, pattern=r"^(development|staging|production|test)$",
    )
    host: str = "0.0.0.0"
    port: int = 8080

    # API
    cors_origins: Annotated[list[str], NoDecode] = ["*"]

    # Observability
    log_level: str = "INFO"
    log_format: str = Field("json", pattern=r"^(json|text)$")

    # Tracing - None means "derive from environment"
    tracing_enabled: bool | None = None
    tracing_exporter: str | None = None
    tracing_otlp_endpoint: str = "http://localhost:4318/v1/traces"
    tracing_sampling_rate: float | None = None

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_origins(cls, v: str | list[str]) -> list[str]:
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("tracing_enabled", mode="before")
    @classmethod
    def blank_flag_is_unset(cls, v: object) -> object:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("tracing_exporter", mode="before")
    @classmethod
    def blank_exporter_is_unset(cls, v: str | None) -> str | None:
        if isinstance(v, str):
            return v.strip().lower() or None
        return v

    @field_validator("tracing_sampling_rate", mode="before")
    @classmethod
    def parse_sampling_rate(cls, v: object) -> float | None:
        if v is None or v == "":
            return None
        try:
            return float(v)
        except (TypeError, ValueError):
            return 1.0

    @model_validator(mode="after")
    def apply_environment_defaults(self) -> "Settings":
        is_dev = self.environment == DEVELOPMENT
        if self.tracing_enabled is None:
            self.tracing_enabled = is_dev
        if self.tracing_exporter is None:
            self.tracing_exporter = "console" if is_dev else "otlp"
        if self.tracing_sampling_rate is None:
            self.tracing_sampling_rate = 1.0 if is_dev else 0.1
        return self


@lru_cache
def get_settings() -> Settings:
    return Settings()
