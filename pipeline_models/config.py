"""
Centralized configuration for pipeline-models.

All configuration is loaded from environment variables with sensible defaults.

Usage:
    from pipeline_models.config import get_config
    cfg = get_config()
    print(cfg.datastore)          # "memory" or "postgres"
    print(cfg.tokens.num_bytes)   # 32
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

DATASTORE_BACKENDS = ("memory", "postgres")


@dataclass(frozen=True)
class DatabaseConfig:
    """PostgreSQL connection parameters."""

    host: str = ""  # empty = Unix socket (peer auth); set to 127.0.0.1 for TCP
    port: int = 5432
    name: str = "pipeline_models"
    user: str = "pipeline_models"
    password: str = ""

    @property
    def dict(self) -> dict[str, str | int]:
        """Return a psycopg2.connect() kwargs dict."""
        d: dict[str, str | int] = {
            "dbname": self.name,
            "port": self.port,
        }
        if self.host:
            d["host"] = self.host
        if self.user:
            d["user"] = self.user
        if self.password:
            d["password"] = self.password
        return d


@dataclass(frozen=True)
class TokenConfig:
    """Access-token secret parameters."""

    num_bytes: int = 32
    hash_algorithm: str = "sha256"


@dataclass(frozen=True)
class Config:
    """Top-level configuration."""

    datastore: str = "memory"
    db: DatabaseConfig = field(default_factory=DatabaseConfig)
    tokens: TokenConfig = field(default_factory=TokenConfig)
    log_level: str = "INFO"


# Singleton
_config: Config | None = None


def get_config() -> Config:
    """Get or create the singleton config from environment variables."""
    global _config
    if _config is not None:
        return _config
    _config = _load_from_env()
    return _config


def _load_from_env() -> Config:
    """Load configuration from environment variables."""
    db = DatabaseConfig(
        host=os.environ.get("PIPELINE_MODELS_DB_HOST", ""),
        port=int(os.environ.get("PIPELINE_MODELS_DB_PORT", "5432")),
        name=os.environ.get("PIPELINE_MODELS_DB_NAME", "pipeline_models"),
        user=os.environ.get("PIPELINE_MODELS_DB_USER", os.environ.get("USER", "pipeline_models")),
        password=os.environ.get("PIPELINE_MODELS_DB_PASSWORD", ""),
    )

    tokens = TokenConfig(
        num_bytes=int(os.environ.get("PIPELINE_MODELS_TOKEN_BYTES", "32")),
        hash_algorithm=os.environ.get("PIPELINE_MODELS_TOKEN_HASH", "sha256"),
    )

    return Config(
        datastore=os.environ.get("PIPELINE_MODELS_DATASTORE", "memory").lower(),
        db=db,
        tokens=tokens,
        log_level=os.environ.get("PIPELINE_MODELS_LOG_LEVEL", "INFO").upper(),
    )


def reset_config() -> None:
    """Reset the singleton config (for testing)."""
    global _config
    _config = None
