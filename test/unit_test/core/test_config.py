"""Unit tests for environment-driven settings."""

from rentacar_ops.core.config import ImportConfig, Settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("RENTACAR_LOG_LEVEL", "DATABASE_URL", "IMPORT_BATCH_SIZE", "RENTACAR_ENABLE_FILE_LOGGING"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings(_env_file=None)

        assert settings.log_level == "INFO"
        assert settings.log_format == "detailed"
        assert settings.enable_file_logging is False
        assert settings.database_url.startswith("sqlite+aiosqlite://")

    def test_values_are_read_from_environment_aliases(self, monkeypatch):
        monkeypatch.setenv("RENTACAR_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("RENTACAR_ENABLE_FILE_LOGGING", "true")
        monkeypatch.setenv("DATABASE_URL", "postgresql://user:secret@db/rentacar")

        settings = Settings(_env_file=None)

        assert settings.log_level == "DEBUG"
        assert settings.enable_file_logging is True
        assert settings.database_url == "postgresql://user:secret@db/rentacar"


class TestImportConfig:
    def test_grouped_import_config(self, monkeypatch):
        monkeypatch.setenv("IMPORT_BATCH_SIZE", "200")
        monkeypatch.setenv("IMPORT_PREVIEW_ROWS", "5")

        config = Settings(_env_file=None).import_

        assert isinstance(config, ImportConfig)
        assert config.batch_size == 200
        assert config.preview_rows == 5
        assert config.max_reported_errors == 20
        assert config.max_logged_errors == 100

    def test_populate_by_field_name(self):
        config = ImportConfig(batch_size=3)

        assert config.batch_size == 3
