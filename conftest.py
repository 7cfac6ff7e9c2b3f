"""
Root-level shared test fixtures.

Every suite runs against the in-memory datastore unless a test patches the
PostgreSQL connection itself.
"""

from __future__ import annotations

import pytest

from pipeline_models.config import reset_config
from pipeline_models.crypto import TokenGenerator
from pipeline_models.datastore.memory import InMemoryDatastore
from pipeline_models.factories import FactoryRegistry, TemplateFactory, TokenFactory


@pytest.fixture
def clean_env(monkeypatch):
    """Remove env vars that leak between tests and drop the cached config."""
    for key in [
        "PIPELINE_MODELS_DATASTORE",
        "PIPELINE_MODELS_DB_HOST",
        "PIPELINE_MODELS_DB_PORT",
        "PIPELINE_MODELS_DB_NAME",
        "PIPELINE_MODELS_DB_USER",
        "PIPELINE_MODELS_DB_PASSWORD",
        "PIPELINE_MODELS_TOKEN_BYTES",
        "PIPELINE_MODELS_TOKEN_HASH",
        "PIPELINE_MODELS_LOG_LEVEL",
    ]:
        monkeypatch.delenv(key, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def datastore() -> InMemoryDatastore:
    return InMemoryDatastore()


@pytest.fixture
def generator() -> TokenGenerator:
    return TokenGenerator()


@pytest.fixture
def registry(datastore: InMemoryDatastore) -> FactoryRegistry:
    return FactoryRegistry(datastore=datastore)


@pytest.fixture
def template_factory(datastore: InMemoryDatastore) -> TemplateFactory:
    return TemplateFactory(datastore)


@pytest.fixture
def token_factory(datastore: InMemoryDatastore, generator: TokenGenerator) -> TokenFactory:
    return TokenFactory(datastore, generator=generator)
