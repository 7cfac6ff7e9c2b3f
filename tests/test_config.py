"""Tests for pipeline_models.config — environment-driven configuration."""

import pytest

from pipeline_models.config import (
    Config,
    DatabaseConfig,
    TokenConfig,
    get_config,
    reset_config,
)


@pytest.fixture(autouse=True)
def _clean(clean_env):
    """Reset config singleton and env between tests."""
    yield


class TestDatabaseConfig:
    def test_defaults(self):
        db = DatabaseConfig()
        assert db.host == ""
        assert db.port == 5432
        assert db.name == "pipeline_models"

    def test_dict(self):
        db = DatabaseConfig(host="localhost", port=5432, name="test", user="u", password="p")
        d = db.dict
        assert d == {"dbname": "test", "port": 5432, "host": "localhost", "user": "u", "password": "p"}

    def test_dict_omits_empty_host(self):
        assert "host" not in DatabaseConfig(host="").dict

    def test_frozen(self):
        db = DatabaseConfig()
        with pytest.raises(AttributeError):
            db.host = "other"  # type: ignore[misc]


class TestConfig:
    def test_defaults(self):
        cfg = Config()
        assert cfg.datastore == "memory"
        assert cfg.tokens == TokenConfig(num_bytes=32, hash_algorithm="sha256")
        assert cfg.log_level == "INFO"


class TestGetConfig:
    def test_singleton(self):
        assert get_config() is get_config()

    def test_reset(self):
        first = get_config()
        reset_config()
        assert get_config() is not first

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("PIPELINE_MODELS_DATASTORE", "Postgres")
        monkeypatch.setenv("PIPELINE_MODELS_DB_HOST", "10.0.0.5")
        monkeypatch.setenv("PIPELINE_MODELS_DB_PORT", "6543")
        monkeypatch.setenv("PIPELINE_MODELS_TOKEN_BYTES", "48")
        monkeypatch.setenv("PIPELINE_MODELS_TOKEN_HASH", "sha512")
        monkeypatch.setenv("PIPELINE_MODELS_LOG_LEVEL", "debug")

        cfg = get_config()
        assert cfg.datastore == "postgres"
        assert cfg.db.host == "10.0.0.5"
        assert cfg.db.port == 6543
        assert cfg.tokens.num_bytes == 48
        assert cfg.tokens.hash_algorithm == "sha512"
        assert cfg.log_level == "DEBUG"

    def test_db_user_falls_back_to_user(self, monkeypatch):
        monkeypatch.setenv("USER", "alice")
        assert get_config().db.user == "alice"
