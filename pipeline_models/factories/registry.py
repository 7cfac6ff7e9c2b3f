"""
Factory registry — one factory instance per type, owned by the caller.

Build one registry at process start and pass it to whatever needs factories:

    registry = FactoryRegistry.from_config(get_config())
    templates = registry.get_instance(TemplateFactory)
    assert registry.get_instance(TemplateFactory) is templates

The first ``get_instance`` for a type constructs it; later calls return the
same object and ignore their config.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, TypeVar

from pipeline_models.config import DATASTORE_BACKENDS, Config
from pipeline_models.crypto import TokenGenerator
from pipeline_models.datastore.base import Datastore
from pipeline_models.datastore.memory import InMemoryDatastore
from pipeline_models.errors import ConfigurationError
from pipeline_models.factories.tokens import TokenFactory

logger = logging.getLogger(__name__)

F = TypeVar("F")


def create_datastore(cfg: Config) -> Datastore:
    """Build the datastore for the configured backend."""
    if cfg.datastore == "memory":
        return InMemoryDatastore()
    if cfg.datastore == "postgres":
        from pipeline_models.datastore.postgres import PostgresDatastore

        return PostgresDatastore()
    raise ConfigurationError(
        f"Unknown datastore backend {cfg.datastore!r}; expected one of {', '.join(DATASTORE_BACKENDS)}"
    )


class FactoryRegistry:
    """Holds at most one instance per factory class.

    Not safe for concurrent first construction from several threads.
    """

    def __init__(
        self,
        datastore: Datastore | None = None,
        defaults: Mapping[type, Mapping[str, Any]] | None = None,
    ) -> None:
        self.datastore = datastore
        self._defaults = {cls: dict(kw) for cls, kw in (defaults or {}).items()}
        self._instances: dict[type, Any] = {}

    @classmethod
    def from_config(cls, cfg: Config) -> FactoryRegistry:
        """Registry backed by the configured datastore and token settings."""
        logger.info("Using %s datastore", cfg.datastore)
        return cls(
            datastore=create_datastore(cfg),
            defaults={TokenFactory: {"generator": TokenGenerator.from_config(cfg.tokens)}},
        )

    def get_instance(self, factory_cls: type[F], config: Mapping[str, Any] | None = None) -> F:
        """Return the registered instance of ``factory_cls``, constructing it on first use.

        ``config`` may carry ``datastore`` plus constructor keyword arguments;
        it is only read on construction. Raises ConfigurationError when there
        is neither an instance nor a datastore.
        """
        existing = self._instances.get(factory_cls)
        if existing is not None:
            return existing

        kwargs = {**self._defaults.get(factory_cls, {}), **(config or {})}
        datastore = kwargs.pop("datastore", None) or self.datastore
        if datastore is None:
            raise ConfigurationError(f"No datastore provided to {factory_cls.__name__}")

        instance = factory_cls(datastore, **kwargs)
        self._instances[factory_cls] = instance
        logger.debug("Constructed %s", factory_cls.__name__)
        return instance

    def clear(self) -> None:
        """Forget every constructed factory."""
        self._instances.clear()
