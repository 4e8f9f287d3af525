"""Settings module for the call graph engine."""

from .settings import Settings, configure_logging, get_settings, reset_settings

__all__ = ["Settings", "configure_logging", "get_settings", "reset_settings"]
