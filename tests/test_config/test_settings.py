"""Tests for environment-driven settings."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from gctalk.config.settings import Settings, get_settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("SUPABASE_ANON_KEY", raising=False)
        monkeypatch.delenv("SUPABASE_URL", raising=False)
        monkeypatch.delenv("ENVIRONMENT", raising=False)
        settings = Settings(_env_file=None)

        assert settings.environment == "development"
        assert settings.max_http_retries == 0
        assert settings.rest_base_url == "http://localhost:54321"
        assert not settings.backend_configured
        assert settings.session_file == Path.home() / ".gctalk" / "session.json"

    def test_reads_backend_names_from_environment(self, monkeypatch):
        monkeypatch.setenv("SUPABASE_URL", "https://abc.supabase.co/")
        monkeypatch.setenv("SUPABASE_ANON_KEY", "anon")
        monkeypatch.setenv("ENVIRONMENT", "production")

        settings = Settings(_env_file=None)

        assert settings.rest_base_url == "https://abc.supabase.co"
        assert settings.backend_configured
        assert settings.is_production

    def test_rejects_bad_values(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, max_http_retries=-1)
        with pytest.raises(ValidationError):
            Settings(_env_file=None, log_level="CHATTY")

    def test_get_settings_is_cached(self):
        get_settings.cache_clear()
        assert get_settings() is get_settings()
        get_settings.cache_clear()
