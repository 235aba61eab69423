"""Unit tests for environment-driven settings."""

import pytest
from pydantic import ValidationError

from app.config import DEFAULT_CORS_ORIGINS, Settings


class TestSettings:
    """Tests for defaults and environment overrides."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("CACHE_TTL_SECONDS", raising=False)
        monkeypatch.delenv("CORS_ORIGINS", raising=False)
        settings = Settings(_env_file=None)
        assert settings.cache_ttl_seconds == 3600
        assert settings.coalesce_requests is True
        assert settings.cors_origins == DEFAULT_CORS_ORIGINS

    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CACHE_TTL_SECONDS", "60")
        monkeypatch.setenv("COALESCE_REQUESTS", "false")
        monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = Settings(_env_file=None)

        assert settings.cache_ttl_seconds == 60
        assert settings.coalesce_requests is False
        assert settings.cors_origins == ["http://a.test", "http://b.test"]
        assert settings.log_level == "DEBUG"

    def test_non_positive_ttl_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CACHE_TTL_SECONDS", "0")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)
