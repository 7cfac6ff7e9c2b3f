"""
Generic factory — typed construction and persistence over a Datastore.

Entity factories compose a BaseFactory configured by an EntityDescriptor
instead of subclassing it:

    descriptor = EntityDescriptor(table="templates", model=Template)
    base = BaseFactory(descriptor, datastore)
    template = await base.create({...})
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from pipeline_models.datastore.base import Datastore, Pagination
from pipeline_models.models import Record

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Record)


@dataclass(frozen=True)
class EntityDescriptor(Generic[ModelT]):
    """What a BaseFactory needs to know about one entity kind."""

    table: str
    model: type[ModelT]
    # Returns fields merged over the caller's attributes before validation
    defaults: Callable[[dict[str, Any]], dict[str, Any]] | None = None

    def from_record(self, record: Mapping[str, Any]) -> ModelT:
        return self.model.model_validate(dict(record))


class BaseFactory(Generic[ModelT]):
    """Create, fetch and list one entity kind."""

    def __init__(self, descriptor: EntityDescriptor[ModelT], datastore: Datastore) -> None:
        self.descriptor = descriptor
        self.datastore = datastore

    @property
    def table(self) -> str:
        return self.descriptor.table

    async def create(self, attributes: Mapping[str, Any]) -> ModelT:
        """Validate, persist and return the model built from the stored record.

        A caller-supplied ``id`` is dropped; the datastore assigns one. Overwriting
        an existing record goes through ``save``.
        """
        attrs = {k: v for k, v in attributes.items() if k != "id"}
        if self.descriptor.defaults is not None:
            attrs.update(self.descriptor.defaults(attrs))
        model = self.descriptor.from_record(attrs)
        stored = await self.datastore.save(self.table, model.to_record())
        logger.info("Created %s record %s", self.table, stored.get("id"))
        return self.descriptor.from_record(stored)

    async def save(self, model: ModelT) -> ModelT:
        """Persist an existing model under its id."""
        stored = await self.datastore.save(self.table, model.to_record())
        return self.descriptor.from_record(stored)

    async def get(self, id_or_filter: str | Mapping[str, Any]) -> ModelT | None:
        record = await self.datastore.get(self.table, id_or_filter)
        if record is None:
            return None
        return self.descriptor.from_record(record)

    async def scan_records(
        self,
        params: Mapping[str, Any] | None = None,
        paginate: Pagination | None = None,
    ) -> list[dict[str, Any]]:
        return await self.datastore.scan(self.table, params=params, paginate=paginate)

    async def list(
        self,
        params: Mapping[str, Any] | None = None,
        paginate: Pagination | None = None,
    ) -> list[ModelT]:
        records = await self.scan_records(params, paginate)
        return [self.descriptor.from_record(r) for r in records]
