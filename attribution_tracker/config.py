"""
Application configuration using pydantic-settings.

All configuration is loaded from environment variables (or a local .env file).
"""
import logging

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Flask settings
    flask_env: str = Field(default="production", description="Flask environment")
    secret_key: str = Field(default="dev-secret-key-change-in-production", description="Flask secret key")
    debug: bool = Field(default=False, description="Debug mode")

    # Server settings
    host: str = Field(default="0.0.0.0", description="Listen address")
    port: int = Field(default=3000, description="Listen port")

    # Database settings
    database_url: str = Field(..., description="PostgreSQL connection URL")
    database_sslmode: str = Field(
        default="require",
        description="libpq sslmode; 'require' encrypts without verifying the server certificate"
    )
    db_pool_size: int = Field(default=10, description="Persistent connections kept in the pool")
    db_max_overflow: int = Field(default=20, description="Extra connections allowed above pool size")

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")

    @field_validator("flask_env")
    @classmethod
    def validate_flask_env(cls, v: str) -> str:
        """Validate Flask environment."""
        if v not in ["development", "production", "testing"]:
            raise ValueError("flask_env must be development, production, or testing")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log level name."""
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.flask_env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.flask_env == "production"

    def get_database_url(self) -> str:
        """
        Get the database URL for SQLAlchemy.

        Hosted providers often hand out ``postgres://`` URLs, which
        SQLAlchemy no longer accepts; those are rewritten to ``postgresql://``.
        """
        if self.database_url.startswith("postgres://"):
            return "postgresql://" + self.database_url[len("postgres://"):]
        return self.database_url


# Global settings instance
settings = Settings()
