"""
Tests for environment driven settings.
"""

import pytest
from pydantic import ValidationError

from plugininfo.config import Settings, get_settings


@pytest.fixture(autouse=True)
def _clean_settings_env(monkeypatch):
    for name in [
        "PLUGININFO_DATABASE_URL",
        "PLUGININFO_LOG_LEVEL",
        "PLUGININFO_BINARY_STORAGE_PATH",
        "PLUGININFO_ANONYMOUS_USER",
        "PLUGININFO_ENFORCE_CANONICAL_IDS",
    ]:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.mark.unit
class TestSettings:
    """Test Settings defaults and validation"""

    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.database_url == "sqlite:///./plugininfo.db"
        assert settings.binary_storage_path is None
        assert settings.anonymous_user == "anonymous"
        assert settings.enforce_canonical_ids is True
        assert settings.enforce_requires_format is True
        assert settings.enforce_unique_versions is True
        assert settings.log_level == "INFO"

    def test_reads_prefixed_environment(self, monkeypatch):
        monkeypatch.setenv("PLUGININFO_DATABASE_URL", "postgresql://db/plugins")
        monkeypatch.setenv("PLUGININFO_ENFORCE_CANONICAL_IDS", "false")
        monkeypatch.setenv("PLUGININFO_BINARY_STORAGE_PATH", "/srv/binaries")

        settings = Settings(_env_file=None)

        assert settings.database_url == "postgresql://db/plugins"
        assert settings.enforce_canonical_ids is False
        assert settings.binary_storage_path == "/srv/binaries"

    def test_log_level_normalized(self):
        assert Settings(_env_file=None, log_level="debug").log_level == "DEBUG"

    def test_unknown_log_level_rejected(self):
        with pytest.raises(ValidationError, match="Unknown log level"):
            Settings(_env_file=None, log_level="chatty")

    def test_database_url_requires_scheme(self):
        with pytest.raises(ValidationError, match="SQLAlchemy URL"):
            Settings(_env_file=None, database_url="plugins.db")

    def test_anonymous_user_stripped_and_not_blank(self):
        assert Settings(_env_file=None, anonymous_user=" system ").anonymous_user == "system"
        with pytest.raises(ValidationError):
            Settings(_env_file=None, anonymous_user="   ")

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()
