"""Dict-backed document store for tests and local development.

Operations never await internally, so each one is atomic with respect to
other coroutines on the same event loop.  Documents are deep-copied on
the way in and out; callers can never mutate stored state by aliasing.
"""

from __future__ import annotations

import copy
from collections import defaultdict
from collections.abc import Mapping
from typing import Any

from marketstore.domain.errors import StoreWriteFailed
from marketstore.domain.models.enums import SortDirection
from marketstore.domain.models.predicates import Predicate

from .base import DocumentDict, DocumentStore, UpdateResult

_MISSING = object()


class InMemoryDocumentStore(DocumentStore):
    def __init__(self) -> None:
        self._collections: dict[str, dict[str, DocumentDict]] = defaultdict(dict)

    def _matching(self, collection: str, predicate: Predicate) -> list[DocumentDict]:
        rows = self._collections[collection]
        return [rows[key] for key in sorted(rows) if predicate.matches(rows[key])]

    async def insert_one(self, collection: str, document: Mapping[str, Any]) -> None:
        rows = self._collections[collection]
        if document["id"] in rows:
            raise StoreWriteFailed(f"duplicate id {document['id']} in {collection}")
        rows[document["id"]] = copy.deepcopy(dict(document))

    async def find_one(self, collection: str, predicate: Predicate) -> DocumentDict | None:
        matches = self._matching(collection, predicate)
        return copy.deepcopy(matches[0]) if matches else None

    async def find_many(
        self,
        collection: str,
        predicate: Predicate,
        sort_field: str = "id",
        direction: SortDirection = SortDirection.ASCENDING,
        skip: int = 0,
        limit: int | None = None,
    ) -> list[DocumentDict]:
        matches = sorted(
            self._matching(collection, predicate),
            key=lambda document: document.get(sort_field),
            reverse=direction == SortDirection.DESCENDING,
        )
        end = None if limit is None else skip + limit
        return copy.deepcopy(matches[skip:end])

    async def count(self, collection: str, predicate: Predicate) -> int:
        return len(self._matching(collection, predicate))

    async def find_one_and_replace(
        self,
        collection: str,
        predicate: Predicate,
        document: Mapping[str, Any],
    ) -> DocumentDict | None:
        matches = self._matching(collection, predicate)
        if not matches:
            return None
        current = matches[0]
        replacement = copy.deepcopy(dict(document))
        replacement["id"] = current["id"]
        replacement["createdAt"] = current["createdAt"]
        self._collections[collection][current["id"]] = replacement
        return copy.deepcopy(replacement)

    def _update(self, rows: list[DocumentDict], fields: Mapping[str, Any]) -> UpdateResult:
        modified = 0
        for row in rows:
            if any(row.get(key, _MISSING) != value for key, value in fields.items()):
                row.update(copy.deepcopy(dict(fields)))
                modified += 1
        return UpdateResult(matched_count=len(rows), modified_count=modified)

    async def update_one(
        self,
        collection: str,
        predicate: Predicate,
        fields: Mapping[str, Any],
    ) -> UpdateResult:
        return self._update(self._matching(collection, predicate)[:1], fields)

    async def update_many(
        self,
        collection: str,
        predicate: Predicate,
        fields: Mapping[str, Any],
    ) -> UpdateResult:
        return self._update(self._matching(collection, predicate), fields)

