"""
Configuration Management for Budget Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see what external dependencies exist and
ensures all required configuration is validated at startup.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class FirebaseSettings(BaseSettings):
    """Firebase project configuration (Authentication + Firestore)."""

    model_config = SettingsConfigDict(
        env_prefix="FIREBASE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    api_key: str = Field(
        ...,
        description="Web API key used by the Authentication REST API"
    )
    project_id: str = Field(
        ...,
        description="Firebase / Google Cloud project ID"
    )
    credentials_path: str = Field(
        ...,
        description="Path to the service account credentials JSON (Firestore access)"
    )
    auth_base_url: str = Field(
        default="https://identitytoolkit.googleapis.com/v1",
        description="Base URL of the Identity Toolkit REST API"
    )
    request_timeout_seconds: float = Field(
        default=15.0,
        gt=0,
        le=120,
        description="Timeout for authentication requests"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Firebase credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v


class FirestoreSettings(BaseSettings):
    """Firestore collection layout."""

    model_config = SettingsConfigDict(
        env_prefix="FIRESTORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    users_collection: str = Field(default="users")
    expenses_collection: str = Field(default="expenses")
    income_collection: str = Field(default="income")
    budgets_collection: str = Field(default="budgets")
    audit_collection: str = Field(
        default="audit_log",
        description="Collection for persisted audit events"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    use_in_memory_backend: bool = Field(
        default=False,
        description="Run against in-memory auth and storage instead of Firebase"
    )

    # Display
    currency_symbol: str = Field(
        default="$",
        max_length=3,
        description="Symbol shown in front of amounts"
    )
    month_history_count: int = Field(
        default=12,
        ge=1,
        le=60,
        description="How many months the month selector offers"
    )
    budget_warning_percentage: float = Field(
        default=80.0,
        ge=0.0,
        le=100.0,
        description="Usage percentage at which a budget is shown as a warning"
    )

    # Form rules
    min_password_length: int = Field(
        default=6,
        ge=6,
        le=128,
        description="Minimum password length accepted on sign-up"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Sub-settings are loaded lazily so the app can start with partial
    # configuration (e.g. in-memory backend without Firebase keys)

    @property
    def firebase(self) -> FirebaseSettings:
        return FirebaseSettings()

    @property
    def firestore(self) -> FirestoreSettings:
        return FirestoreSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus
    {setting_name}_error entries for the sections that failed.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("firebase", "firestore", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
