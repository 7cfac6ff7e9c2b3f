"""Exception hierarchy for pipeline-models."""

from __future__ import annotations


class ModelsError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(ModelsError):
    """A factory or collaborator cannot be built from the given configuration."""


class VersionError(ModelsError, ValueError):
    """A version string or number is malformed or out of range."""


class DatastoreError(ModelsError):
    """Failure raised by one of the bundled datastores."""


class DuplicateRecordError(DatastoreError):
    """A record collides with an existing one on a unique key.

    Raised for templates sharing ``(name, version)`` and for tokens sharing a
    digest. Concurrent template creates that resolve to the same patch end up
    here rather than silently persisting two records.
    """

    def __init__(self, table: str, key: dict) -> None:
        self.table = table
        self.key = key
        fields = ", ".join(f"{k}={v!r}" for k, v in key.items())
        super().__init__(f"Duplicate {table} record: {fields}")
