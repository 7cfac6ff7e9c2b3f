"""
In-memory datastore.

Default backend and the one the test suite runs against. Records are deep
copied on the way in and out so callers never share state with the store.
"""

from __future__ import annotations

import copy
import logging
import uuid
from collections.abc import Mapping
from typing import Any

from pipeline_models.datastore.base import UNIQUE_KEYS, Datastore, Pagination, matches
from pipeline_models.errors import DuplicateRecordError

logger = logging.getLogger(__name__)


class InMemoryDatastore(Datastore):
    """Dict-backed store keeping insertion order per table."""

    def __init__(self, unique_keys: Mapping[str, list[tuple[str, ...]]] | None = None) -> None:
        self._tables: dict[str, dict[str, dict[str, Any]]] = {}
        self._unique_keys = dict(UNIQUE_KEYS if unique_keys is None else unique_keys)

    def _table(self, table: str) -> dict[str, dict[str, Any]]:
        return self._tables.setdefault(table, {})

    def _check_unique(self, table: str, record: dict[str, Any]) -> None:
        rows = self._table(table)
        for fields in self._unique_keys.get(table, []):
            if not all(f in record for f in fields):
                continue
            key = {f: record[f] for f in fields}
            for other_id, other in rows.items():
                if other_id != record["id"] and matches(other, key):
                    raise DuplicateRecordError(table, key)

    async def save(self, table: str, record: Mapping[str, Any]) -> dict[str, Any]:
        stored = copy.deepcopy(dict(record))
        if not stored.get("id"):
            stored["id"] = uuid.uuid4().hex
        self._check_unique(table, stored)
        self._table(table)[stored["id"]] = stored
        logger.debug("Saved %s record %s", table, stored["id"])
        return copy.deepcopy(stored)

    async def get(self, table: str, id_or_filter: str | Mapping[str, Any]) -> dict[str, Any] | None:
        rows = self._table(table)
        if isinstance(id_or_filter, str):
            found = rows.get(id_or_filter)
        else:
            found = next((r for r in rows.values() if matches(r, id_or_filter)), None)
        return copy.deepcopy(found) if found is not None else None

    async def scan(
        self,
        table: str,
        params: Mapping[str, Any] | None = None,
        paginate: Pagination | None = None,
    ) -> list[dict[str, Any]]:
        results = [r for r in self._table(table).values() if matches(r, params)]
        if paginate is not None:
            results = results[paginate.offset : paginate.offset + paginate.count]
        return copy.deepcopy(results)
