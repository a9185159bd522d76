"""Configuration management for the fee/commission calculator.

This module provides centralized configuration using pydantic-settings.
All configuration options can be set via environment variables with the
FCC_ prefix, or via a .env file in the project root.

Environment Variables:
    FCC_MAX_FILE_SIZE_MB: Maximum upload size in MB (default: 10)
    FCC_ALLOWED_EXTENSIONS: Comma-separated accepted upload suffixes (default: .xlsx)
    FCC_TIMEZONE: Time zone for calculation timestamps (default: Asia/Dhaka)
    FCC_LOG_LEVEL: Logging level (default: INFO)
    FCC_DEBUG: Enable debug mode (default: false)
    FCC_CORS_ORIGINS: Comma-separated CORS origins (default: *)
    FCC_SERVER_HOST: Server bind host (default: 0.0.0.0)
    FCC_SERVER_PORT: Server bind port (default: 8000)
"""

import logging
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Example .env file:
        FCC_LOG_LEVEL=DEBUG
        FCC_MAX_FILE_SIZE_MB=5
    """

    model_config = SettingsConfigDict(
        env_prefix="FCC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # =========================================================================
    # Upload Settings
    # =========================================================================

    max_file_size_mb: int = 10
    """Maximum schedule upload size in megabytes."""

    allowed_extensions: str = ".xlsx"
    """Comma-separated list of accepted upload file extensions."""

    # =========================================================================
    # Calculation Settings
    # =========================================================================

    timezone: str = "Asia/Dhaka"
    """IANA time zone used for the calculation timestamp in result summaries."""

    # =========================================================================
    # Logging Settings
    # =========================================================================

    log_level: str = "INFO"
    """Logging level: DEBUG, INFO, WARNING, ERROR, or CRITICAL."""

    debug: bool = False
    """Enable debug mode with additional error details."""

    # =========================================================================
    # Server Settings
    # =========================================================================

    cors_origins: str = "*"
    """Comma-separated list of allowed CORS origins, or * for all."""

    server_host: str = "0.0.0.0"
    """Host address for the server to bind to."""

    server_port: int = 8000
    """Port for the server to listen on."""

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid Python logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(
                f"Invalid log level: {v}. Must be one of: {', '.join(valid_levels)}"
            )
        return upper_v

    @field_validator("max_file_size_mb")
    @classmethod
    def validate_file_size(cls, v: int) -> int:
        """Validate file size is positive and reasonable."""
        if not 1 <= v <= 100:
            raise ValueError(f"max_file_size_mb must be between 1 and 100, got {v}")
        return v

    @field_validator("allowed_extensions")
    @classmethod
    def validate_allowed_extensions(cls, v: str) -> str:
        """Validate every extension is non-empty and starts with a dot."""
        extensions = [ext.strip().lower() for ext in v.split(",") if ext.strip()]
        if not extensions:
            raise ValueError("allowed_extensions must list at least one extension")
        for ext in extensions:
            if not ext.startswith("."):
                raise ValueError(f"Extension must start with '.', got {ext}")
        return ",".join(extensions)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Validate the time zone name is known."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {v}") from e
        return v

    @field_validator("server_port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate port is in valid range."""
        if not 1 <= v <= 65535:
            raise ValueError(f"server_port must be between 1 and 65535, got {v}")
        return v

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def max_file_size_bytes(self) -> int:
        """Get max file size in bytes."""
        return self.max_file_size_mb * 1024 * 1024

    @property
    def allowed_extensions_list(self) -> list[str]:
        """Get accepted upload extensions as a list."""
        return self.allowed_extensions.split(",")

    @property
    def tzinfo(self) -> ZoneInfo:
        """Get the configured time zone."""
        return ZoneInfo(self.timezone)

    @property
    def cors_origins_list(self) -> list[str]:
        """Get CORS origins as a list."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def log_level_int(self) -> int:
        """Get log level as integer for logging module."""
        level: int = getattr(logging, self.log_level)
        return level

    def to_safe_dict(self) -> dict[str, Any]:
        """Convert settings to a dictionary suitable for logging."""
        return {
            "max_file_size_mb": self.max_file_size_mb,
            "allowed_extensions": self.allowed_extensions,
            "timezone": self.timezone,
            "log_level": self.log_level,
            "debug": self.debug,
            "cors_origins": self.cors_origins,
            "server_host": self.server_host,
            "server_port": self.server_port,
        }


def validate_settings_on_startup(s: Settings) -> None:
    """Validate settings on application startup.

    Args:
        s: Settings instance to validate.
    """
    logger = logging.getLogger(__name__)

    if s.cors_origins == "*" and not s.debug:
        logger.warning(
            "CORS is configured to allow all origins (*). "
            "Consider restricting this in production."
        )

    logger.info(
        f"Configuration loaded: log_level={s.log_level}, debug={s.debug}, "
        f"max_file_size_mb={s.max_file_size_mb}, timezone={s.timezone}"
    )


# Create the global settings instance
settings = Settings()
