"""Unit tests for settings parsing."""

from collection_box.core import Settings


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self, monkeypatch):
        for name in ("LOG_LEVEL", "LOG_FORMAT", "DB_LOG_LEVEL", "SLOW_QUERY_MS", "PORT"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings(_env_file=None)
        assert settings.log_level == "info"
        assert settings.log_format == "json"
        assert settings.db_log_level == "warn"
        assert settings.slow_query_ms == 200
        assert settings.port == 8080
        assert settings.read_timeout_seconds == 10
        assert settings.write_timeout_seconds == 10

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("LOG_FORMAT", "text")
        monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
        settings = Settings(_env_file=None)
        assert settings.log_level == "debug"
        assert settings.log_format == "text"
        assert settings.database_url == "sqlite+aiosqlite:///:memory:"

    def test_unknown_values_fall_back(self):
        settings = Settings(
            _env_file=None, log_level="verbose", log_format="xml", db_log_level="loud"
        )
        assert settings.log_level == "info"
        assert settings.log_format == "json"
        assert settings.db_log_level == "warn"

    def test_warning_alias(self):
        assert Settings(_env_file=None, log_level="warning").log_level == "warn"

    def test_numeric_db_log_levels(self):
        assert Settings(_env_file=None, db_log_level="1").db_log_level == "silent"
        assert Settings(_env_file=None, db_log_level=4).db_log_level == "info"

    def test_slow_query_ms_must_be_positive(self, monkeypatch):
        monkeypatch.setenv("SLOW_QUERY_MS", "-5")
        assert Settings(_env_file=None).slow_query_ms == 200
        monkeypatch.setenv("SLOW_QUERY_MS", "not-a-number")
        assert Settings(_env_file=None).slow_query_ms == 200
        monkeypatch.setenv("SLOW_QUERY_MS", "50")
        assert Settings(_env_file=None).slow_query_ms == 50
