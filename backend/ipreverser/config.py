"""
IP Reverser: Application Configuration
========================================

What:  Centralized configuration using Pydantic Settings.
How:   Pydantic Settings reads environment variables (or a .env file),
       validates types and ranges, and exposes a typed `Settings` object.
Who:   Built once by the entry point and passed explicitly to `create_app()`
       and `SqlRecordStore.from_settings()`. Nothing reads the environment
       on its own.

Environment variables (all optional):
    HOST, PORT                      server bind address
    DB_HOST, DB_PORT, DB_NAME,
    DB_USER, DB_PASSWORD            PostgreSQL connection parts
    DATABASE_URL                    full SQLAlchemy URL, overrides the parts
    DB_POOL_SIZE, DB_POOL_TIMEOUT,
    DB_POOL_RECYCLE                 connection pool bounds
    DB_INIT_RETRY_ATTEMPTS,
    DB_INIT_RETRY_MAX_WAIT          schema initialization retry policy
    LOG_LEVEL, LOG_FILE             logging
    CORS_ORIGINS                    comma-separated allowed origins
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Defaults target a local PostgreSQL started with the stock `postgres`
    image. Production deployments override the DB_* values.
    """

    # ── Server ────────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000, ge=1, le=65535)

    # ── Database ──────────────────────────────────────────────────────────
    db_host: str = Field(default="localhost")
    db_port: int = Field(default=5432, ge=1, le=65535)
    db_name: str = Field(default="ipreverser")
    db_user: str = Field(default="postgres")
    db_password: str = Field(default="password")

    # Full URL override, e.g. postgresql+asyncpg://user:pw@host:5432/db
    database_url: Optional[str] = Field(default=None)

    # What: Hard ceiling on concurrent connections (no overflow is allowed)
    db_pool_size: int = Field(default=20, ge=1, le=100)

    # What: Seconds a request waits for a free connection before failing
    db_pool_timeout: float = Field(default=2.0, gt=0, le=60)

    # What: Connections idle longer than this are recycled on next checkout
    db_pool_recycle: int = Field(default=30, ge=1, le=3600)

    # ── Startup Retry ─────────────────────────────────────────────────────
    # Schema creation is retried with exponential backoff while the
    # database comes up (e.g. both containers starting together).
    db_init_retry_attempts: int = Field(default=5, ge=1, le=20)
    db_init_retry_max_wait: float = Field(default=10.0, ge=0, le=120)

    # ── Logging ───────────────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_file: Optional[str] = Field(default=None)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── CORS ──────────────────────────────────────────────────────────────
    cors_origins: str = Field(default="*")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def sqlalchemy_url(self) -> str:
        """
        What:  The async SQLAlchemy URL for the record store.
        How:   DATABASE_URL wins when set; otherwise the DB_* parts are
               assembled with URL.create(), which escapes the password.
        """
        if self.database_url:
            return self.database_url
        return URL.create(
            drivername="postgresql+asyncpg",
            username=self.db_user,
            password=self.db_password,
            host=self.db_host,
            port=self.db_port,
            database=self.db_name,
        ).render_as_string(hide_password=False)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,  # DB_HOST and db_host both work
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Settings for the process entry point, read from the environment once."""
    return Settings()
