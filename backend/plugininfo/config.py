"""
Plugin Info Service Configuration
Environment driven settings for storage backends, validation and logging
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

VALID_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class Settings(BaseSettings):
    """Application settings"""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="PLUGININFO_", extra="allow")

    # Application
    app_name: str = "plugininfo"
    app_version: str = "0.1.0"
    debug: bool = False

    # Metadata repository
    database_url: str = Field(
        default="sqlite:///./plugininfo.db",
        description="SQLAlchemy URL of the plugin metadata database",
    )
    database_echo: bool = False

    # Release binaries; no binary store is configured when unset
    binary_storage_path: Optional[str] = Field(
        default=None, description="Root directory for release artifacts"
    )

    # Audit stamping
    anonymous_user: str = "anonymous"

    # Built-in validators
    enforce_canonical_ids: bool = True
    enforce_requires_format: bool = True
    enforce_unique_versions: bool = True

    # Logging
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @field_validator("log_level")
    @classmethod
    def log_level_must_be_known(cls, v: str) -> str:
        level = v.upper()
        if level not in VALID_LOG_LEVELS:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("database_url")
    @classmethod
    def database_url_must_have_scheme(cls, v: str) -> str:
        if "://" not in v:
            raise ValueError("Database URL must be a SQLAlchemy URL (e.g. sqlite:///plugins.db)")
        return v

    @field_validator("anonymous_user")
    @classmethod
    def anonymous_user_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Anonymous user name cannot be blank")
        return v.strip()


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings"""
    return Settings()
