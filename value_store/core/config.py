"""
Value Store Configuration

Configuration management with environment variable support.
Implements secure defaults and validation for all settings.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from typing import List
from functools import lru_cache
from dotenv import load_dotenv

from ..constants import DEFAULT_NAMESPACE, DEFAULT_ADMIN_PATH_PREFIX

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Application settings with validation and secure defaults."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

    # Environment settings
    ENVIRONMENT: str = Field(
        default="development", description="Application environment"
    )

    # Database configuration (durable tier)
    DATABASE_URL: str = Field(
        ...,
        description="Database connection URL with asyncpg or aiosqlite driver",
    )
    DATABASE_POOL_SIZE: int = Field(
        default=10, ge=1, le=100, description="Database connection pool size"
    )
    DATABASE_MAX_OVERFLOW: int = Field(
        default=20, ge=0, le=100, description="Maximum overflow connections"
    )
    DATABASE_POOL_TIMEOUT: int = Field(
        default=30, ge=1, le=300, description="Connection pool timeout in seconds"
    )

    # Redis configuration (distributed tier)
    REDIS_URL: str = Field(
        default="redis://localhost:6379", description="Redis connection URL"
    )
    REDIS_MAX_CONNECTIONS: int = Field(
        default=10, ge=1, le=50, description="Redis connection pool size"
    )
    REDIS_CONNECTION_TIMEOUT: float = Field(
        default=5.0, gt=0, le=60, description="Redis socket connect timeout in seconds"
    )
    REDIS_OPERATION_TIMEOUT: float = Field(
        default=2.0, gt=0, le=60, description="Redis socket timeout in seconds"
    )

    # Value storage layout
    VALUE_NAMESPACE: str = Field(
        default=DEFAULT_NAMESPACE,
        min_length=1,
        max_length=100,
        description="Durable store namespace holding one record per key",
    )
    CACHE_KEY_PREFIX: str = Field(
        default="", description="Prefix prepended to keys in the distributed cache"
    )

    # Admin surface
    ADMIN_PATH_PREFIX: str = Field(
        default=DEFAULT_ADMIN_PATH_PREFIX, description="Mount point for admin routes"
    )
    ADMIN_API_TOKENS: str = Field(
        default="",
        description="Bearer tokens accepted as administrators (comma-separated)",
    )

    # Service identity
    SERVICE_NAME: str = Field(default="value-store", description="Service name")
    SERVICE_VERSION: str = Field(default="0.1.0", description="Service version")

    # Development and debugging
    DEBUG: bool = Field(default=False, description="Enable debug mode")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_JSON: bool = Field(default=True, description="Render logs as JSON")

    @field_validator("DATABASE_URL")
    @classmethod
    def validate_database_url(cls, v):
        """Validate database URL format."""
        if not v.startswith(
            ("postgresql://", "postgresql+asyncpg://", "sqlite+aiosqlite://")
        ):
            raise ValueError(
                "DATABASE_URL must be a PostgreSQL or aiosqlite connection URL"
            )
        if v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    @field_validator("REDIS_URL")
    @classmethod
    def validate_redis_url(cls, v):
        """Validate Redis URL format."""
        if not v.startswith(("redis://", "rediss://", "unix://")):
            raise ValueError("REDIS_URL must be a redis:// or rediss:// URL")
        return v

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v):
        """Validate environment value."""
        allowed = ["development", "staging", "production", "test"]
        if v not in allowed:
            raise ValueError(f"ENVIRONMENT must be one of: {allowed}")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed:
            raise ValueError(f"LOG_LEVEL must be one of: {allowed}")
        return v.upper()

    @field_validator("ADMIN_PATH_PREFIX")
    @classmethod
    def validate_admin_path_prefix(cls, v):
        """Admin prefix must be an absolute path without trailing slash."""
        if not v.startswith("/"):
            raise ValueError("ADMIN_PATH_PREFIX must start with '/'")
        return v.rstrip("/")

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    @property
    def admin_tokens_list(self) -> List[str]:
        """Get admin tokens as list."""
        return [
            token.strip() for token in self.ADMIN_API_TOKENS.split(",") if token.strip()
        ]


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
