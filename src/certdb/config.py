"""
Configuration — typed, validated settings loaded from environment/.env.

Uses pydantic-settings to:
  - Load from environment variables prefixed with CERTDB_
  - Fall back to a .env file at the project root
  - Validate types and constraints at startup

Examples:
  CERTDB_DATABASE_PATH=/data/certs.db
  CERTDB_REQUIRED_CERTIFICATES='["CA00000003", "XS0000000c"]'
  CERTDB_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from certdb.domain.models import CIA_CERT_NAMES, NAME_LENGTH

# Resolve the .env file relative to the project root (two levels above this file),
# so settings load correctly regardless of the working directory at runtime.
_ENV_FILE = Path(__file__).parent.parent.parent / ".env"


class AppSettings(BaseSettings):
    """
    Root application settings.

    Load order (highest priority first):
      1. Environment variables
      2. .env file
      3. Default values
    """

    model_config = SettingsConfigDict(
        env_prefix="CERTDB_",
        env_file=_ENV_FILE,
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    database_path: Path | None = Field(
        default=None,
        description="Extracted certs.db to load at startup",
    )
    required_certificates: list[str] = Field(
        default_factory=lambda: list(CIA_CERT_NAMES),
        description="Certificate names a database must contain to be accepted",
    )
    log_level: str = Field(default="INFO")

    @field_validator("required_certificates")
    @classmethod
    def validate_certificate_names(cls, value: list[str]) -> list[str]:
        """Names must fit the 0x40-byte ASCII name field of a certificate body."""
        for name in value:
            if not name:
                raise ValueError("Required certificate names must not be empty")
            if not name.isascii():
                raise ValueError(f"Certificate name {name!r} is not ASCII")
            if len(name) > NAME_LENGTH:
                raise ValueError(
                    f"Certificate name {name!r} is longer than {NAME_LENGTH} characters"
                )
        return value
