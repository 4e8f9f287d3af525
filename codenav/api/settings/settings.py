"""
Pydantic settings for call graph construction and navigation.

This module provides centralized configuration management with:
- Type-safe access to traversal and normalization limits
- Validation of limits at startup (fail-fast)
- Sensible defaults for every setting
- Singleton pattern for consistent access
"""

import logging
from typing import Optional

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """
    Engine settings loaded from CODENAV_* environment variables.
    """

    model_config = SettingsConfigDict(
        env_prefix="CODENAV_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================
    # Traversal Configuration
    # ==========================================
    default_depth: int = 1
    max_depth_limit: int = 10
    max_paths: Optional[int] = None
    traversal_timeout_seconds: Optional[float] = None

    # ==========================================
    # Normalization Configuration
    # ==========================================
    normalization_max_hops: int = 64

    # ==========================================
    # Logging Configuration
    # ==========================================
    log_level: str = "INFO"

    # ==========================================
    # Validators
    # ==========================================
    @field_validator("default_depth", "max_depth_limit", "normalization_max_hops")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Limits must be at least 1."""
        if v < 1:
            raise ValueError("must be at least 1")
        return v

    @field_validator("max_paths")
    @classmethod
    def validate_max_paths(cls, v: Optional[int]) -> Optional[int]:
        """Path cap, when set, must be at least 1."""
        if v is not None and v < 1:
            raise ValueError("max_paths must be at least 1")
        return v

    @field_validator("traversal_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: Optional[float]) -> Optional[float]:
        """Timeout, when set, must be positive."""
        if v is not None and v <= 0:
            raise ValueError("traversal_timeout_seconds must be positive")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Log level must be a standard level name."""
        level = v.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}")
        return level

    @model_validator(mode="after")
    def validate_depths(self) -> "Settings":
        """Default depth cannot exceed the depth limit."""
        if self.default_depth > self.max_depth_limit:
            raise ValueError("default_depth cannot exceed max_depth_limit")
        return self


# ==========================================
# Singleton Access
# ==========================================
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get the singleton Settings instance.

    Returns:
        Settings: The engine settings

    Raises:
        ValidationError: If settings are invalid
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """
    Reset the settings singleton (for testing purposes).
    """
    global _settings
    _settings = None


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Apply the configured log level to the codenav logger."""
    settings = settings or get_settings()
    logging.getLogger("codenav").setLevel(settings.log_level)
