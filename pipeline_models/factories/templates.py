"""
Template factory — version resolution and label-aware lookup.

Creating a template only takes ``major`` or ``major.minor`` from the caller.
The patch number is assigned from what is already stored under the same
name:

    no 1.3.x yet          create(version="1.3") -> 1.3.0
    1.3.0 exists          create(version="1.3") -> 1.3.1
    bare major            create(version=1)     -> 1.0.0 (or next patch)

Resolution is a scan followed by a save with no transaction in between. Two
concurrent creates for the same (name, major, minor) can pick the same patch;
the datastore's unique key on (name, version) rejects the second one with
DuplicateRecordError.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any, Protocol

from pipeline_models.datastore.base import Datastore
from pipeline_models.errors import VersionError
from pipeline_models.factories.base import BaseFactory, EntityDescriptor
from pipeline_models.models import Template
from pipeline_models.version import SemVer, parse_requested_version, parse_version_prefix

logger = logging.getLogger(__name__)

TEMPLATES = EntityDescriptor(table="templates", model=Template)


def _parsed_versions(
    name: str,
    records: Iterable[Mapping[str, Any]],
) -> list[tuple[SemVer, Mapping[str, Any]]]:
    """Pair each record with its parsed version, skipping unparseable ones."""
    parsed = []
    for record in records:
        try:
            parsed.append((SemVer.parse(record.get("version")), record))
        except VersionError:
            logger.warning(
                "Ignoring template %s record %s with invalid version %r",
                name,
                record.get("id"),
                record.get("version"),
            )
    return parsed


class VersionResolver(Protocol):
    def resolve(self, name: str, requested: tuple[int, int], existing: Iterable[Mapping[str, Any]]) -> SemVer:
        """Pick the full version for a new template."""
        ...


class PatchBumpResolver:
    """Next patch after the highest stored one with the same major.minor, else 0."""

    def resolve(self, name: str, requested: tuple[int, int], existing: Iterable[Mapping[str, Any]]) -> SemVer:
        major, minor = requested
        patches = [v.patch for v, _ in _parsed_versions(name, existing) if v.matches((major, minor))]
        patch = max(patches) + 1 if patches else 0
        return SemVer(major, minor, patch)


class TemplateFactory:
    """Creates and looks up versioned templates."""

    descriptor = TEMPLATES

    def __init__(self, datastore: Datastore, *, resolver: VersionResolver | None = None) -> None:
        self._base = BaseFactory(self.descriptor, datastore)
        self.resolver = resolver or PatchBumpResolver()

    @property
    def datastore(self) -> Datastore:
        return self._base.datastore

    async def create(self, metadata: Mapping[str, Any]) -> Template:
        """Create a template, assigning its patch version.

        ``metadata["version"]`` is a bare major (``1`` or ``"1"``), ``"M.m"``
        or ``"M.m.p"``; a supplied patch is ignored. Raises VersionError before
        touching the datastore when the version is malformed.
        """
        name = metadata.get("name")
        if not name:
            raise ValueError("Template metadata has no name")
        if "version" not in metadata:
            raise VersionError("Template metadata has no version")
        requested = parse_requested_version(metadata["version"])

        existing = await self._base.scan_records(params={"name": name})
        version = self.resolver.resolve(name, requested, existing)
        logger.info("Resolved template %s %d.%d to %s", name, requested[0], requested[1], version)

        return await self._base.create({**metadata, "version": str(version)})

    async def get(self, id_or_filter: str | Mapping[str, Any]) -> Template | None:
        return await self._base.get(id_or_filter)

    async def _candidates(
        self,
        name: str,
        version: Any = None,
        label: str | None = None,
    ) -> list[tuple[SemVer, Mapping[str, Any]]]:
        prefix = parse_version_prefix(version) if version is not None else None
        records = await self._base.scan_records(params={"name": name})
        candidates = _parsed_versions(name, records)
        if label:
            candidates = [(v, r) for v, r in candidates if label in (r.get("labels") or [])]
        if prefix is not None:
            candidates = [(v, r) for v, r in candidates if v.matches(prefix)]
        return candidates

    async def get_template(self, name: str, version: Any = None, label: str | None = None) -> Template | None:
        """Return the highest version of ``name``, or None.

        A non-empty ``label`` keeps only templates carrying it; ``version``
        (``M``, ``M.m`` or ``M.m.p``) keeps only matching versions.
        """
        candidates = await self._candidates(name, version, label)
        if not candidates:
            return None
        _, record = max(candidates, key=lambda c: c[0])
        return self.descriptor.from_record(record)

    async def list_versions(self, name: str, label: str | None = None) -> list[Template]:
        """All templates of ``name``, newest version first."""
        candidates = await self._candidates(name, label=label)
        candidates.sort(key=lambda c: c[0], reverse=True)
        return [self.descriptor.from_record(r) for _, r in candidates]
