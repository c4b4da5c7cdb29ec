"""Configuration package."""

from finova.config.settings import (
    AppSettings,
    InferenceSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "InferenceSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
