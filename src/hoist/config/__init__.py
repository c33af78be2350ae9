"""Configuration - settings and environment handling."""

from .settings import (
    Environment,
    LogLevel,
    Settings,
    VerificationPolicy,
    build_settings,
    settings_from_env,
)

__all__ = [
    "Environment",
    "LogLevel",
    "Settings",
    "VerificationPolicy",
    "build_settings",
    "settings_from_env",
]
