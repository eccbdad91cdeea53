"""
Divelog API configuration.

Every knob the API reads from the environment lives on Settings: where
PocketBase is and how to log in to it, which browser origins may call the
API, the default page size and the deadlines applied to data access. Values
come from the process environment or a .env file in the working directory.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from divelog.pagination import MAX_PAGE_SIZE

logger = logging.getLogger(__name__)

INSECURE_PASSWORDS = frozenset({"", "admin", "password", "123456", "divelog"})


class Settings(BaseSettings):
    """Environment-backed settings. Defaults target a local PocketBase."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # PocketBase
    pocketbase_url: str = Field(default="http://127.0.0.1:8090", description="PocketBase base URL")
    pocketbase_admin_email: str = Field(default="admin@divelog.local", description="Superuser login")
    pocketbase_admin_password: str = Field(default="", description="Superuser password")
    skip_pb_auth: bool = Field(default=False, description="Do not log in to PocketBase at startup")

    # Browser origins, comma separated; read through allowed_origins
    allowed_origins_str: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        alias="ALLOWED_ORIGINS",
    )

    default_page_size: int = Field(default=20, description="Dives per page when page_size is missing or out of range")

    # Deadlines, in seconds
    read_timeout_seconds: float = Field(default=1.0, description="Per PocketBase read")
    write_timeout_seconds: float = Field(default=2.0, description="Per PocketBase write")
    stats_timeout_seconds: float = Field(default=2.0, description="Per stats rollup query")

    @property
    def allowed_origins(self) -> list[str]:
        return [origin.strip() for origin in self.allowed_origins_str.split(",") if origin.strip()]

    @field_validator("pocketbase_admin_password", mode="after")
    @classmethod
    def warn_on_insecure_password(cls, v: str) -> str:
        if v in INSECURE_PASSWORDS:
            logger.warning("POCKETBASE_ADMIN_PASSWORD is unset or trivially guessable; set a strong one in .env")
        return v

    @field_validator("default_page_size", mode="after")
    @classmethod
    def validate_default_page_size(cls, v: int) -> int:
        if not 1 <= v <= MAX_PAGE_SIZE:
            raise ValueError(f"Invalid DEFAULT_PAGE_SIZE: {v}. Must be between 1 and {MAX_PAGE_SIZE}")
        return v

    @field_validator("read_timeout_seconds", "write_timeout_seconds", "stats_timeout_seconds", mode="after")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"Timeouts must be positive, got {v}")
        return v


@lru_cache
def get_settings() -> Settings:
    """Process-wide Settings, read from the environment on first use."""
    return Settings()
