"""
Configuration Management for FINOVA

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see what external dependencies exist and
ensures all required configuration is validated at startup.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class InferenceSettings(BaseSettings):
    """Hosted text-generation endpoint configuration."""

    model_config = SettingsConfigDict(
        env_prefix="HF_",
        extra="ignore"
    )

    api_base: str = Field(
        default="https://api-inference.huggingface.co/models",
        description="Base URL of the hosted inference API"
    )
    primary_model: str = Field(
        default="ibm-granite/granite-3.3-8b-instruct",
        description="Model tried first"
    )
    fallback_model: str = Field(
        default="microsoft/Phi-3-mini-4k-instruct",
        description="Smaller model tried once when the primary is still loading"
    )
    token: Optional[str] = Field(
        default=None,
        description="Optional bearer token (public models work without one)"
    )

    # Generation parameters
    max_new_tokens: int = Field(
        default=500,
        ge=1,
        le=4096,
        description="Maximum new tokens for the primary model"
    )
    fallback_max_new_tokens: int = Field(
        default=400,
        ge=1,
        le=4096,
        description="Maximum new tokens for the fallback model"
    )
    temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Sampling temperature"
    )
    top_p: float = Field(
        default=0.9,
        gt=0.0,
        le=1.0,
        description="Nucleus sampling probability mass"
    )
    do_sample: bool = Field(default=True)
    return_full_text: bool = Field(default=False)

    # Failure handling
    model_loading_status: int = Field(
        default=503,
        description="HTTP status the endpoint uses while a model is loading"
    )
    timeout_seconds: Optional[float] = Field(
        default=None,
        gt=0,
        description="Request timeout; None keeps the HTTP client default"
    )
    min_response_length: int = Field(
        default=10,
        ge=0,
        description="Cleaned replies shorter than this trigger the fallback"
    )

    def model_url(self, model_name: str) -> str:
        """Build the endpoint URL for a model."""
        return f"{self.api_base.rstrip('/')}/{model_name}"


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="FINOVA_",
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

    # Persistence
    storage_path: Optional[str] = Field(
        default=None,
        description="JSON file backing the store; in-memory when unset"
    )
    key_prefix: str = Field(
        default="finova",
        min_length=1,
        description="Prefix of every persisted key"
    )

    # Presentation
    default_currency: str = Field(
        default="USD",
        min_length=3,
        max_length=3,
        description="ISO currency code used when the user has no preference"
    )

    # Assistant
    thinking_delay_seconds: float = Field(
        default=0.8,
        ge=0.0,
        le=10.0,
        description="Artificial delay before a rule-based reply"
    )
    history_window: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Prior chat turns passed to the assistant"
    )
    remote_assistant_enabled: bool = Field(
        default=True,
        description="Ask the hosted model before the rule-based engine"
    )

    @field_validator('default_currency')
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        return v.upper()

    @field_validator('storage_path')
    @classmethod
    def validate_storage_path(cls, v: Optional[str]) -> Optional[str]:
        """Warn if the storage directory doesn't exist (it is created on first write)."""
        if v and not Path(v).parent.exists():
            import warnings
            warnings.warn(
                f"Storage directory for {v} does not exist yet. "
                "It will be created on first write."
            )
        return v


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

    @property
    def inference(self) -> InferenceSettings:
        return InferenceSettings()

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

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.inference
        results["inference"] = True
    except Exception as e:
        results["inference"] = False
        results["inference_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
