# =============================================================================
# tests/unit/test_settings.py
# Unit Tests for Settings
# =============================================================================

import logging
from pathlib import Path

import pytest

from osca_core.config import Settings, load_settings
from osca_core.errors import ConfigurationError

ENV_KEYS = (
    "SUPABASE_URL",
    "SUPABASE_KEY",
    "SUPABASE_SERVICE_ROLE_KEY",
    "OSCA_LOCAL_DB",
    "OSCA_LOG_LEVEL",
)


@pytest.fixture
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


class TestLoadSettings:
    """Test secrets and environment resolution"""

    def test_from_secrets(self, clean_env):
        settings = load_settings({
            "supabase": {"url": "https://x.supabase.co", "key": "anon", "service_role_key": "service"},
            "app": {"local_db_path": "data/test.db", "check_interval": 10, "log_level": "DEBUG"},
        })

        assert settings.supabase_url == "https://x.supabase.co"
        assert settings.api_key == "service"
        assert settings.local_db_path == Path("data/test.db")
        assert settings.check_interval == 10.0
        assert settings.logging_level == logging.DEBUG

    def test_environment_fallback(self, clean_env):
        clean_env.setenv("SUPABASE_URL", "https://env.supabase.co")
        clean_env.setenv("SUPABASE_KEY", "env-key")
        clean_env.setenv("OSCA_LOCAL_DB", "/tmp/env.db")

        settings = load_settings({})

        assert settings.supabase_url == "https://env.supabase.co"
        assert settings.api_key == "env-key"
        assert settings.local_db_path == Path("/tmp/env.db")
        assert settings.has_remote

    def test_defaults(self, clean_env):
        settings = load_settings({})

        assert not settings.has_remote
        assert settings.placeholder_password == "temp123"
        assert settings.local_db_path == Path("local_data") / "osca.db"

    def test_unknown_log_level_falls_back(self):
        assert Settings(log_level="chatty").logging_level == logging.INFO


class TestRequireRemote:

    def test_missing_url(self):
        with pytest.raises(ConfigurationError) as exc:
            Settings(supabase_key="k").require_remote()

        assert exc.value.details["config_key"] == "supabase.url"

    def test_missing_key(self):
        with pytest.raises(ConfigurationError) as exc:
            Settings(supabase_url="https://x.supabase.co").require_remote()

        assert exc.value.details["config_key"] == "supabase.key"

    def test_configured(self, settings):
        settings.require_remote()
