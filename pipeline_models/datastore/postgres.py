"""
PostgreSQL datastore — JSONB records in the ``model_records`` table.

psycopg2 is blocking, so every call runs in the default executor and the
public API stays async. Schema lives in ``pipeline_models/migrations``.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import uuid
from collections.abc import Mapping
from typing import Any

import psycopg2.errors
from psycopg2.extras import Json, RealDictCursor

from pipeline_models.datastore.base import Datastore, Pagination
from pipeline_models.db.connection import get_connection
from pipeline_models.errors import DuplicateRecordError

logger = logging.getLogger(__name__)

# Unique index name -> fields reported on DuplicateRecordError
_CONSTRAINT_FIELDS = {
    "uq_templates_name_version": ("name", "version"),
    "uq_tokens_hash": ("hash",),
    "model_records_pkey": ("id",),
}


class PostgresDatastore(Datastore):
    """Datastore over a single JSONB table keyed by ``(table_name, id)``."""

    async def _run(self, fn, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(fn, *args))

    # ── Sync implementations (called through _run) ──

    def _save_sync(self, table: str, record: Mapping[str, Any]) -> dict[str, Any]:
        stored = dict(record)
        if not stored.get("id"):
            stored["id"] = uuid.uuid4().hex
        try:
            with get_connection() as conn:
                cur = conn.cursor(cursor_factory=RealDictCursor)
                cur.execute(
                    """
                    INSERT INTO model_records (table_name, id, data)
                    VALUES (%s, %s, %s)
                    ON CONFLICT (table_name, id) DO UPDATE SET
                        data = EXCLUDED.data,
                        updated_at = NOW()
                    RETURNING data
                    """,
                    (table, stored["id"], Json(stored)),
                )
                row = cur.fetchone()
        except psycopg2.errors.UniqueViolation as e:
            fields = _CONSTRAINT_FIELDS.get(e.diag.constraint_name or "", ())
            raise DuplicateRecordError(table, {f: stored.get(f) for f in fields}) from e
        logger.debug("Saved %s record %s", table, stored["id"])
        return dict(row["data"])

    def _get_sync(self, table: str, id_or_filter: str | Mapping[str, Any]) -> dict[str, Any] | None:
        with get_connection() as conn:
            cur = conn.cursor(cursor_factory=RealDictCursor)
            if isinstance(id_or_filter, str):
                cur.execute(
                    "SELECT data FROM model_records WHERE table_name = %s AND id = %s",
                    (table, id_or_filter),
                )
            else:
                cur.execute(
                    """
                    SELECT data FROM model_records
                    WHERE table_name = %s AND data @> %s
                    ORDER BY created_at, id
                    LIMIT 1
                    """,
                    (table, Json(dict(id_or_filter))),
                )
            row = cur.fetchone()
            return dict(row["data"]) if row else None

    def _scan_sync(
        self,
        table: str,
        params: Mapping[str, Any] | None,
        paginate: Pagination | None,
    ) -> list[dict[str, Any]]:
        sql = """
            SELECT data FROM model_records
            WHERE table_name = %s AND data @> %s
            ORDER BY created_at, id
        """
        args: list[Any] = [table, Json(dict(params or {}))]
        if paginate is not None:
            sql += " LIMIT %s OFFSET %s"
            args.extend([paginate.count, paginate.offset])

        with get_connection() as conn:
            cur = conn.cursor(cursor_factory=RealDictCursor)
            cur.execute(sql, tuple(args))
            return [dict(row["data"]) for row in cur.fetchall()]

    # ── Datastore API ──

    async def save(self, table: str, record: Mapping[str, Any]) -> dict[str, Any]:
        return await self._run(self._save_sync, table, record)

    async def get(self, table: str, id_or_filter: str | Mapping[str, Any]) -> dict[str, Any] | None:
        return await self._run(self._get_sync, table, id_or_filter)

    async def scan(
        self,
        table: str,
        params: Mapping[str, Any] | None = None,
        paginate: Pagination | None = None,
    ) -> list[dict[str, Any]]:
        return await self._run(self._scan_sync, table, params, paginate)
