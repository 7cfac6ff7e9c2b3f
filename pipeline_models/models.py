"""Template and token data models."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pipeline_models.version import SemVer


class Record(BaseModel):
    """Base for anything persisted through a factory."""

    model_config = ConfigDict(extra="ignore")

    id: str | None = None

    def to_record(self) -> dict[str, Any]:
        """Shape written to the datastore. An unset id is left for the datastore to assign."""
        exclude = {"id"} if self.id is None else set()
        return self.model_dump(mode="json", exclude=exclude)


class Template(Record):
    """A named, versioned configuration bundle."""

    name: str = Field(min_length=1)
    version: str
    maintainer: str = ""
    description: str = ""
    labels: list[str] = Field(default_factory=list)
    config: dict[str, Any] = Field(default_factory=dict)
    pipeline_id: str | None = None

    @field_validator("version", mode="before")
    @classmethod
    def _full_version(cls, v: Any) -> str:
        # VersionError is a ValueError, so pydantic reports it as a validation error
        return str(SemVer.parse(v))

    @field_validator("labels")
    @classmethod
    def _unique_labels(cls, v: list[str]) -> list[str]:
        return list(dict.fromkeys(v))

    @property
    def semver(self) -> SemVer:
        return SemVer.parse(self.version)

    def has_label(self, label: str) -> bool:
        return label in self.labels


class Token(Record):
    """A bearer secret belonging to a user.

    Only ``hash`` is persisted. ``value`` holds the cleartext on the instance
    returned by create/refresh and is excluded from every dump.
    """

    user_id: str
    name: str
    description: str = ""
    hash: str
    last_used: datetime | None = None
    value: str | None = Field(default=None, exclude=True, repr=False)

    def to_public_dict(self) -> dict[str, Any]:
        """Caller-facing shape: never the digest, the cleartext only when present."""
        data = self.model_dump(mode="json", exclude={"hash"})
        if self.value is not None:
            data["value"] = self.value
        return data
