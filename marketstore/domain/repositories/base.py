"""Generic repository base interface.

Repository[T] is the root abstraction for all entity data access.  The
concrete cache-through implementation lives in
marketstore/infrastructure/persistence/repositories/ and is wired at the
application boundary via get_repositories().

Design notes:
  - All methods are async to accommodate network-backed stores and caches.
  - T is the domain model type (an Entity subclass, never a raw document).
  - Reads return None when no live row matches; only replace() raises
    EntityNotFound.
  - There is no hard delete.  soft_delete() tombstones the row; tombstoned
    rows are visible to id / predicate lookups only with include_deleted=True
    and never to list().
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, Generic, TypeVar

from marketstore.domain.models.base import Entity
from marketstore.domain.models.pagination import Page, PageRequest
from marketstore.domain.models.predicates import Predicate

T = TypeVar("T", bound=Entity)

PredicateLike = Predicate | Mapping[str, Any] | None


class Repository(ABC, Generic[T]):
    """Abstract CRUD interface for one entity collection."""

    @abstractmethod
    async def insert(self, entity: T) -> T:
        """Assign id and timestamps, persist, and return the stored entity."""

    @abstractmethod
    async def get_by_id(self, id: str, include_deleted: bool = False) -> T | None:
        """Return the entity with the given id, or None.  Raises BadIdentifier."""

    @abstractmethod
    async def find_one(self, predicate: PredicateLike, include_deleted: bool = False) -> T | None:
        """Return the first entity matching the predicate, or None."""

    @abstractmethod
    async def replace(self, entity: T) -> T:
        """Replace the live row with entity.id and return the post-image."""

    @abstractmethod
    async def soft_delete(self, id: str) -> bool:
        """Tombstone the row.  False when missing or already tombstoned."""

    @abstractmethod
    async def soft_delete_many(self, predicate: PredicateLike) -> int:
        """Tombstone every live row matching the predicate; return how many."""

    @abstractmethod
    async def list(self, predicate: PredicateLike = None, page: PageRequest | None = None) -> Page[T]:
        """Return one cursor-delimited slice of live rows ordered by id."""
