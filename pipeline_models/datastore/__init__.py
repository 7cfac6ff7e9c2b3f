"""Datastore backends consumed by the factories."""

from pipeline_models.datastore.base import UNIQUE_KEYS, Datastore, Pagination
from pipeline_models.datastore.memory import InMemoryDatastore

__all__ = [
    "UNIQUE_KEYS",
    "Datastore",
    "InMemoryDatastore",
    "Pagination",
]
