"""
Token factory — access-token issuance.

The cleartext value exists only on the model returned by ``create`` and
``refresh``. The datastore only ever sees its digest, including on lookup:

    token = await tokens.create({"user_id": "u1", "name": "ci"})
    show_once(token.value)
    same = await tokens.get({"value": token.value})   # queried by hash
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from pipeline_models.crypto import TokenGenerator
from pipeline_models.datastore.base import Datastore
from pipeline_models.factories.base import BaseFactory, EntityDescriptor
from pipeline_models.models import Token

logger = logging.getLogger(__name__)


def _token_defaults(attrs: dict[str, Any]) -> dict[str, Any]:
    return {"last_used": None}


TOKENS = EntityDescriptor(table="tokens", model=Token, defaults=_token_defaults)


class TokenFactory:
    """Issues tokens and finds them by presented cleartext."""

    descriptor = TOKENS

    def __init__(self, datastore: Datastore, *, generator: TokenGenerator | None = None) -> None:
        self._base = BaseFactory(self.descriptor, datastore)
        self.generator = generator or TokenGenerator()

    @property
    def datastore(self) -> Datastore:
        return self._base.datastore

    async def create(self, config: Mapping[str, Any]) -> Token:
        """Issue a token for ``config["user_id"]`` and return it with its cleartext ``value``."""
        value = self.generator.generate_value()
        attrs = {k: v for k, v in config.items() if k != "value"}
        attrs["hash"] = self.generator.hash_value(value)

        model = await self._base.create(attrs)
        model.value = value
        logger.info("Issued token %s for user %s", model.id, model.user_id)
        return model

    async def get(self, id_or_filter: str | Mapping[str, Any]) -> Token | None:
        """Fetch by id or filter. A cleartext ``value`` in the filter is swapped for its digest."""
        if isinstance(id_or_filter, Mapping) and "value" in id_or_filter:
            query = dict(id_or_filter)
            value = query.pop("value")
            # An empty secret matches nothing
            if not value:
                return None
            query["hash"] = self.generator.hash_value(value)
            id_or_filter = query
        return await self._base.get(id_or_filter)

    async def refresh(self, token: Token) -> Token:
        """Replace the secret of an existing token; the new cleartext is returned once."""
        value = self.generator.generate_value()
        updated = token.model_copy(update={"hash": self.generator.hash_value(value), "value": None})
        model = await self._base.save(updated)
        model.value = value
        logger.info("Refreshed token %s", model.id)
        return model

    async def mark_used(self, token: Token, when: datetime | None = None) -> Token:
        """Record that the token was just presented."""
        updated = token.model_copy(update={"last_used": when or datetime.now(UTC), "value": None})
        return await self._base.save(updated)

    async def list_for_user(self, user_id: str) -> list[Token]:
        return await self._base.list(params={"user_id": user_id})
