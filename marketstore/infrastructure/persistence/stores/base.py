"""Document store contract.

A DocumentStore holds JSON-compatible documents grouped by collection.
Every document carries the system fields

    id         — 24-char hex string, unique within the collection
    createdAt  — ISO-8601 timestamp
    updatedAt  — ISO-8601 timestamp
    deletedAt  — ISO-8601 timestamp, present only on tombstoned rows

plus opaque domain fields.  Stores never interpret domain fields beyond
what a Predicate asks of them.  Timestamps are written in UTC with a fixed
width (format_timestamp), so they sort as text.

Driver failures surface as StoreReadFailed / StoreWriteFailed.  Deadlines
are the caller's concern (CachedRepository wraps every call).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from marketstore.domain.models.enums import SortDirection
from marketstore.domain.models.predicates import Predicate

DocumentDict = dict[str, Any]

TIMESTAMP_FIELDS = frozenset({"createdAt", "updatedAt", "deletedAt"})


def parse_timestamp(value: str | datetime | None) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


@dataclass(frozen=True)
class UpdateResult:
    """Outcome of update_one / update_many.

    modified_count counts rows whose stored values actually changed;
    a matched row already holding the new values is not modified.
    """

    matched_count: int
    modified_count: int

    def to_dict(self) -> dict[str, int]:
        return {"matchedCount": self.matched_count, "modifiedCount": self.modified_count}


class DocumentStore(ABC):
    @abstractmethod
    async def insert_one(self, collection: str, document: Mapping[str, Any]) -> None:
        """Persist a new document.  Raises StoreWriteFailed on duplicate id."""

    @abstractmethod
    async def find_one(self, collection: str, predicate: Predicate) -> DocumentDict | None:
        """Return the lowest-id document matching the predicate, or None."""

    @abstractmethod
    async def find_many(
        self,
        collection: str,
        predicate: Predicate,
        sort_field: str = "id",
        direction: SortDirection = SortDirection.ASCENDING,
        skip: int = 0,
        limit: int | None = None,
    ) -> list[DocumentDict]:
        """Return matching documents in sort order, after skip, at most limit."""

    @abstractmethod
    async def count(self, collection: str, predicate: Predicate) -> int:
        """Return the number of matching documents."""

    @abstractmethod
    async def find_one_and_replace(
        self,
        collection: str,
        predicate: Predicate,
        document: Mapping[str, Any],
    ) -> DocumentDict | None:
        """Atomically replace the first match and return the post-image.

        The stored id and createdAt are kept whatever the replacement says.
        Returns None when nothing matched.
        """

    @abstractmethod
    async def update_one(
        self,
        collection: str,
        predicate: Predicate,
        fields: Mapping[str, Any],
    ) -> UpdateResult:
        """Set fields on the first match."""

    @abstractmethod
    async def update_many(
        self,
        collection: str,
        predicate: Predicate,
        fields: Mapping[str, Any],
    ) -> UpdateResult:
        """Set fields on every match."""
