"""Datastore protocol — generic record persistence used by the factories."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

# Unique keys enforced by the bundled backends, per table.
UNIQUE_KEYS: dict[str, list[tuple[str, ...]]] = {
    "templates": [("name", "version")],
    "tokens": [("hash",)],
}


@dataclass(frozen=True)
class Pagination:
    """1-based page of ``count`` records."""

    page: int = 1
    count: int = 50

    def __post_init__(self) -> None:
        if self.page < 1 or self.count < 1:
            raise ValueError(f"Invalid pagination: page={self.page}, count={self.count}")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.count


class Datastore(ABC):
    """Abstract base for all storage backends.

    Records are plain ``dict[str, Any]`` blobs grouped by table. The store is
    agnostic to what is stored; typing and validation belong to the models.
    """

    @abstractmethod
    async def save(self, table: str, record: Mapping[str, Any]) -> dict[str, Any]:
        """Insert or overwrite a record and return it as stored.

        An ``id`` is assigned when the record has none. Raises
        DuplicateRecordError when a unique key is already taken by another id.
        """
        ...

    @abstractmethod
    async def get(self, table: str, id_or_filter: str | Mapping[str, Any]) -> dict[str, Any] | None:
        """Return the record with this id, or the first matching all fields; ``None`` if absent."""
        ...

    @abstractmethod
    async def scan(
        self,
        table: str,
        params: Mapping[str, Any] | None = None,
        paginate: Pagination | None = None,
    ) -> list[dict[str, Any]]:
        """Return records whose fields equal every entry of ``params``.

        Order is stable per call but carries no meaning.
        """
        ...


def matches(record: Mapping[str, Any], params: Mapping[str, Any] | None) -> bool:
    """True when every ``params`` entry equals the record's field."""
    if not params:
        return True
    return all(k in record and record[k] == v for k, v in params.items())
