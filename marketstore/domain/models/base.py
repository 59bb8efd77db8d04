"""Generic entity base and object-id helpers.

Every stored document carries the same four system fields:

    id         — 24-char hex object id, assigned once at insert
    createdAt  — set at insert, immutable thereafter
    updatedAt  — refreshed on every replace
    deletedAt  — present only on tombstoned rows

Domain fields are declared on subclasses and are opaque to the
repository core.  Field names serialize in camelCase (the stored and
cached form); Python code uses snake_case attribute names.
"""

from __future__ import annotations

import itertools
import os
import re
import threading
import time
from datetime import datetime, timezone
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, ConfigDict, PlainSerializer, field_validator
from pydantic.alias_generators import to_camel

_ID_PATTERN = re.compile(r"^[0-9a-f]{24}$")

# ObjectId layout: 4-byte seconds timestamp | 5 bytes per process | 3-byte counter.
# The counter starts in the lower half of its range so it cannot wrap
# before ~8M ids have been issued by this process.
_PROCESS_UNIQUE = os.urandom(5)
_counter = itertools.count(int.from_bytes(os.urandom(3), "big") >> 1)
_counter_lock = threading.Lock()


def new_object_id() -> str:
    """Return a fresh id.  Ids sort lexicographically in creation order."""
    with _counter_lock:
        increment = next(_counter) & 0xFFFFFF
    timestamp = int(time.time()).to_bytes(4, "big")
    return (timestamp + _PROCESS_UNIQUE + increment.to_bytes(3, "big")).hex()


def is_valid_id(value: object) -> bool:
    return isinstance(value, str) and _ID_PATTERN.match(value) is not None


def as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC already."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Stored form of a timestamp: UTC, microsecond precision, "Z" suffix.

    Every stored timestamp has the same width, so comparing the strings
    orders them the same way as comparing the instants.
    """
    return as_utc(value).isoformat(timespec="microseconds").replace("+00:00", "Z")


Timestamp = Annotated[
    datetime,
    AfterValidator(as_utc),
    PlainSerializer(format_timestamp, return_type=str, when_used="json"),
]


class Entity(BaseModel):
    """Base model for every persisted entity.

    Instances are immutable; repositories derive post-images with
    model_copy(update=...).  A freshly constructed entity has no id and
    no timestamps — CachedRepository.insert assigns them.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str | None = None
    created_at: Timestamp | None = None
    updated_at: Timestamp | None = None
    deleted_at: Timestamp | None = None

    @field_validator("id")
    @classmethod
    def _id_is_object_id(cls, value: str | None) -> str | None:
        if value is not None and not is_valid_id(value):
            raise ValueError(f"id must be a 24-character hex string, got {value!r}")
        return value

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def to_document(self) -> dict[str, Any]:
        """JSON-compatible stored form.  deletedAt is omitted unless set."""
        document = self.model_dump(mode="json", by_alias=True)
        if document.get("deletedAt") is None:
            document.pop("deletedAt", None)
        return document

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> Entity:
        return cls.model_validate(document)
