"""Configuration package."""

from src.config.settings import (
    AppSettings,
    FirebaseSettings,
    FirestoreSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "FirebaseSettings",
    "FirestoreSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
