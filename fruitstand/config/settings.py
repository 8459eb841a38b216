"""
================================================================================
FILE: fruitstand/config/settings.py
================================================================================

PURPOSE:
    Application settings and configuration loaded from environment variables.
    Uses Pydantic BaseSettings for automatic validation and type hints.
    Single source of truth for all application configuration.

WORKFLOW:
    1. At startup, load from environment variables (.env file or system env)
    2. Validate all settings (type checking, range validation)
    3. Fail fast if settings are invalid
    4. Access throughout app via: settings.database_url, settings.request_timeout

INPUTS:
    - Environment variables (from .env file or system env)
    - Examples:
        DB_HOST=localhost
        DB_PORT=5432
        DB_USER=postgres
        DB_NAME=postgres
        SERVER_PORT=8443
        SSL_CERTFILE=cert.pem
        SSL_KEYFILE=key.pem
        REQUEST_TIMEOUT=5

CONFIGURATION CATEGORIES:
    1. Database
       - db_host / db_port / db_user / db_password / db_name
       - DATABASE_URL overrides the individual parts when provided
    2. Request lifecycle
       - request_timeout: deadline of every storage call, from request start
       - sleep_default_seconds: default duration of the diagnostic sleep
       - disconnect_poll_interval: how often the client connection is checked
    3. Server / TLS
       - server_host, server_port, ssl_certfile, ssl_keyfile
    4. Logging
       - log_level: DEBUG/INFO/WARNING/ERROR
       - log_format: json/text

KEY FACTS:
    - All settings loaded at startup (zero runtime I/O)
    - Changes require a restart
    - Environment variables override defaults

TESTING ENVIRONMENT:
    - Override settings in tests: Settings(request_timeout=0.5)
"""

from __future__ import annotations

import os

from pathlib import Path
from typing import Any, Dict, Literal, Optional

from dotenv import load_dotenv
from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL, make_url

# .env next to the working directory wins over the one at the repo root
_CWD_ENV = Path(os.getcwd()) / ".env"
_REPO_ROOT_ENV = Path(__file__).resolve().parents[2] / ".env"
_ENV_PATH = _CWD_ENV if _CWD_ENV.exists() else _REPO_ROOT_ENV

load_dotenv(dotenv_path=_ENV_PATH, override=False)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables + .env.

    All fields have aliases to match .env variable names; field names are
    accepted too so tests can build Settings(request_timeout=1.0).
    """

    # ========================================================================
    # Pydantic v2 config
    # ========================================================================

    model_config = SettingsConfigDict(
        env_file=str(_ENV_PATH),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # ========================================================================
    # DATABASE
    # ========================================================================

    db_host: str = Field(
        default="localhost",
        alias="DB_HOST",
        description="PostgreSQL host",
    )

    db_port: int = Field(
        default=5432,
        ge=1,
        le=65535,
        alias="DB_PORT",
        description="PostgreSQL port",
    )

    db_user: str = Field(
        default="postgres",
        alias="DB_USER",
        description="PostgreSQL user",
    )

    db_password: str = Field(
        default="",
        alias="DB_PASSWORD",
        description="PostgreSQL password (empty for trust auth)",
    )

    db_name: str = Field(
        default="postgres",
        alias="DB_NAME",
        description="PostgreSQL database name",
    )

    database_url_override: Optional[str] = Field(
        default=None,
        alias="DATABASE_URL",
        description="Full SQLAlchemy URL; takes precedence over DB_* parts",
    )

    # ========================================================================
    # REQUEST LIFECYCLE
    # ========================================================================

    request_timeout: float = Field(
        default=5.0,
        gt=0.0,
        le=300.0,
        alias="REQUEST_TIMEOUT",
        description="Deadline of storage calls, measured from request start (seconds)",
    )

    sleep_default_seconds: int = Field(
        default=5,
        alias="SLEEP_DEFAULT_SECONDS",
        description="Duration of /api/v1/sleep when d is not given (seconds)",
    )

    disconnect_poll_interval: float = Field(
        default=0.1,
        gt=0.0,
        le=5.0,
        alias="DISCONNECT_POLL_INTERVAL",
        description="How often a pending request checks for client disconnect (seconds)",
    )

    # ========================================================================
    # SERVER / TLS
    # ========================================================================

    server_host: str = Field(
        default="0.0.0.0",
        alias="SERVER_HOST",
        description="Server bind host",
    )

    server_port: int = Field(
        default=8443,
        ge=1,
        le=65535,
        alias="SERVER_PORT",
        description="Server HTTPS port",
    )

    ssl_certfile: str = Field(
        default="cert.pem",
        alias="SSL_CERTFILE",
        description="TLS certificate (PEM)",
    )

    ssl_keyfile: str = Field(
        default="key.pem",
        alias="SSL_KEYFILE",
        description="TLS private key (PEM)",
    )

    # ========================================================================
    # LOGGING / ENVIRONMENT
    # ========================================================================

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        alias="LOG_LEVEL",
        description="Logging level",
    )

    log_format: Literal["json", "text"] = Field(
        default="text",
        alias="LOG_FORMAT",
        description="Logging format: json or text",
    )

    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        alias="ENVIRONMENT",
        description="Environment: development, staging, production",
    )

    # ========================================================================
    # COMPUTED: Resolve database URL from components if not provided
    # ========================================================================

    @computed_field  # type: ignore[misc]
    @property
    def database_url(self) -> str:
        """
        Resolve the SQLAlchemy database URL.

        Priority:
        1. If DATABASE_URL provided → use it directly
        2. Else → postgresql+asyncpg://DB_USER:DB_PASSWORD@DB_HOST:DB_PORT/DB_NAME
        """
        if self.database_url_override:
            return self.database_url_override

        url = URL.create(
            "postgresql+asyncpg",
            username=self.db_user,
            password=self.db_password or None,
            host=self.db_host,
            port=self.db_port,
            database=self.db_name,
        )
        return url.render_as_string(hide_password=False)

    # ========================================================================
    # HELPER METHODS
    # ========================================================================

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert settings to dictionary with secrets redacted.

        Returns:
            Settings dictionary with the password masked
        """
        d = self.model_dump()

        if d.get("db_password"):
            d["db_password"] = "***REDACTED***"
        if d.get("database_url_override"):
            d["database_url_override"] = _redact_url(d["database_url_override"])
        d["database_url"] = _redact_url(self.database_url)

        return d


def _redact_url(url: str) -> str:
    """Mask the password part of a database URL."""
    return make_url(url).render_as_string(hide_password=True)
