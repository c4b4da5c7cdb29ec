"""Tests for environment-driven configuration."""

import pytest
from pydantic import ValidationError

from finova.config.settings import (
    AppSettings,
    InferenceSettings,
    get_settings,
    validate_all_settings,
)


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestInferenceSettings:
    """HF_ prefixed settings."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("HF_TOKEN", raising=False)
        settings = InferenceSettings()
        assert settings.max_new_tokens == 500
        assert settings.fallback_max_new_tokens == 400
        assert settings.model_loading_status == 503
        assert settings.timeout_seconds is None

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("HF_PRIMARY_MODEL", "org/other")
        monkeypatch.setenv("HF_TOKEN", "hf_abc")
        settings = InferenceSettings()
        assert settings.primary_model == "org/other"
        assert settings.token == "hf_abc"

    def test_model_url_strips_slash(self):
        settings = InferenceSettings(api_base="https://host/models/")
        assert settings.model_url("a/b") == "https://host/models/a/b"


class TestAppSettings:
    """FINOVA_ prefixed settings."""

    def test_currency_is_upper_cased(self, monkeypatch):
        monkeypatch.setenv("FINOVA_DEFAULT_CURRENCY", "eur")
        assert AppSettings().default_currency == "EUR"

    def test_rejects_bad_history_window(self):
        with pytest.raises(ValidationError):
            AppSettings(history_window=0)

    def test_missing_storage_directory_warns(self, tmp_path):
        path = tmp_path / "missing" / "store.json"
        with pytest.warns(UserWarning):
            settings = AppSettings(storage_path=str(path))
        assert settings.storage_path == str(path)


class TestValidateAllSettings:
    """Startup check helper."""

    def test_all_valid(self):
        assert validate_all_settings() == {"inference": True, "app": True}

    def test_reports_invalid_section(self, monkeypatch):
        monkeypatch.setenv("FINOVA_HISTORY_WINDOW", "999")
        results = validate_all_settings()
        assert results["inference"] is True
        assert results["app"] is False
        assert "app_error" in results

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()
