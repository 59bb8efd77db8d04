"""Cache-through repository over a DocumentStore.

One generic implementation serves every entity; per-entity subclasses
only add finders.  Read path: cache → store → repopulate cache.  Write
path: store → cache (set on insert, delete on replace / soft delete) →
webhook hand-off.

Cache faults are logged and bypassed; store faults always surface.  Every
store call runs under a deadline (point ops vs. list scans) and every
cache call under a shorter one.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta, timezone
from typing import Any, TypeVar

from marketstore.domain.errors import (
    BadIdentifier,
    CacheError,
    EntityNotFound,
    OperationTimeout,
    SerializationError,
)
from marketstore.domain.models.base import Entity, format_timestamp, is_valid_id, new_object_id
from marketstore.domain.models.enums import SortDirection, WebhookVerb
from marketstore.domain.models.pagination import Page, PageRequest
from marketstore.domain.models.predicates import NOT_DELETED, Predicate
from marketstore.domain.repositories.base import PredicateLike, Repository
from marketstore.domain.services.pagination import SORT_FIELD, plan_page, scoped_filter
from marketstore.infrastructure.cache import Cache
from marketstore.infrastructure.persistence.stores.base import DocumentStore
from marketstore.infrastructure.serialization import CacheKeyPolicy, EntityCodec
from marketstore.infrastructure.settings import Settings, get_settings
from marketstore.infrastructure.webhooks import WebhookPublisher

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Entity)
R = TypeVar("R")

_TICK = timedelta(microseconds=1)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CachedRepository(Repository[T]):
    def __init__(
        self,
        model: type[T],
        collection: str,
        store: DocumentStore,
        cache: Cache,
        publisher: WebhookPublisher,
        settings: Settings | None = None,
        entity_name: str | None = None,
        key_policy: CacheKeyPolicy | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._model = model
        self._collection = collection
        self._store = store
        self._cache = cache
        self._publisher = publisher
        self._settings = settings or get_settings()
        self._entity_name = entity_name or collection
        self._keys = key_policy or CacheKeyPolicy()
        self._codec: EntityCodec[T] = EntityCodec(model)
        self._clock = clock

    @property
    def collection(self) -> str:
        return self._collection

    @property
    def entity_name(self) -> str:
        return self._entity_name

    # --- helpers ---

    def _event(self, verb: WebhookVerb) -> str:
        return f"{self._entity_name}.{verb.value}"

    def _to_domain(self, document: dict[str, Any]) -> T:
        return self._model.from_document(document)  # type: ignore[return-value]

    async def _with_deadline(self, call: Awaitable[R], timeout: float, action: str) -> R:
        try:
            return await asyncio.wait_for(call, timeout)
        except asyncio.TimeoutError:
            raise OperationTimeout(
                f"{action} on {self._collection} exceeded {timeout}s"
            ) from None

    def _point(self, call: Awaitable[R], action: str) -> Awaitable[R]:
        return self._with_deadline(call, self._settings.point_op_timeout, action)

    def _scan(self, call: Awaitable[R], action: str) -> Awaitable[R]:
        return self._with_deadline(call, self._settings.list_op_timeout, action)

    async def _cache_get(self, key: str) -> T | None:
        try:
            data = await asyncio.wait_for(self._cache.get(key), self._settings.cache_op_timeout)
        except (CacheError, asyncio.TimeoutError) as exc:
            logger.warning("cache get %s failed: %r", key, exc)
            return None
        if data is None:
            return None
        try:
            return self._codec.decode(data)
        except SerializationError as exc:
            logger.warning("cache entry %s undecodable, treating as miss: %s", key, exc)
            return None

    async def _cache_put(self, key: str, data: bytes) -> None:
        try:
            await asyncio.wait_for(
                self._cache.set(key, data, self._settings.default_cache_ttl),
                self._settings.cache_op_timeout,
            )
        except (CacheError, asyncio.TimeoutError) as exc:
            logger.warning("cache set %s failed: %r", key, exc)

    async def _cache_set(self, key: str, entity: T) -> None:
        await self._cache_put(key, self._codec.encode(entity))

    async def _cache_delete(self, key: str) -> None:
        try:
            await asyncio.wait_for(self._cache.delete(key), self._settings.cache_op_timeout)
        except (CacheError, asyncio.TimeoutError) as exc:
            logger.warning("cache delete %s failed: %r", key, exc)

    @staticmethod
    def _require_id(entity_id: object) -> str:
        if not is_valid_id(entity_id):
            raise BadIdentifier(f"{entity_id!r} is not a valid id")
        return entity_id  # type: ignore[return-value]

    # --- writes ---

    async def insert(self, entity: T) -> T:
        now = self._clock()
        stored = entity.model_copy(
            update={"id": new_object_id(), "created_at": now, "updated_at": now, "deleted_at": None}
        )
        # Encode before writing so a codec failure leaves the store untouched.
        data = self._codec.encode(stored)
        await self._point(self._store.insert_one(self._collection, stored.to_document()), "insert")
        await self._cache_put(self._keys.for_id(stored.id), data)
        self._publisher.publish(self._event(WebhookVerb.CREATED), stored)
        return stored

    async def replace(self, entity: T) -> T:
        entity_id = self._require_id(entity.id)
        now = self._clock()
        if entity.updated_at is not None and now <= entity.updated_at:
            now = entity.updated_at + _TICK
        replacement = entity.model_copy(update={"updated_at": now, "deleted_at": None})
        predicate = Predicate.of({"id": entity_id}) & NOT_DELETED
        post_image = await self._point(
            self._store.find_one_and_replace(
                self._collection, predicate, replacement.to_document()
            ),
            "replace",
        )
        if post_image is None:
            raise EntityNotFound(f"no live {self._entity_name} with id {entity_id}")
        await self._cache_delete(self._keys.for_id(entity_id))
        updated = self._to_domain(post_image)
        self._publisher.publish(self._event(WebhookVerb.UPDATED), updated)
        return updated

    async def soft_delete(self, id: str) -> bool:
        entity_id = self._require_id(id)
        predicate = Predicate.of({"id": entity_id}) & NOT_DELETED
        deleted_at = format_timestamp(self._clock())
        result = await self._point(
            self._store.update_one(self._collection, predicate, {"deletedAt": deleted_at}),
            "soft_delete",
        )
        if result.matched_count < 1 or result.modified_count < 1:
            return False
        await self._cache_delete(self._keys.for_id(entity_id))
        self._publisher.publish(
            self._event(WebhookVerb.DELETED), {"id": entity_id, **result.to_dict()}
        )
        return True

    async def soft_delete_many(self, predicate: PredicateLike) -> int:
        live = Predicate.of(predicate) & NOT_DELETED
        documents = await self._scan(
            self._store.find_many(self._collection, live, sort_field=SORT_FIELD), "soft_delete_many"
        )
        ids = [document["id"] for document in documents]
        if not ids:
            return 0
        deleted_at = format_timestamp(self._clock())
        result = await self._scan(
            self._store.update_many(
                self._collection,
                Predicate.of({"id": {"$in": ids}}) & NOT_DELETED,
                {"deletedAt": deleted_at},
            ),
            "soft_delete_many",
        )
        for entity_id in ids:
            await self._cache_delete(self._keys.for_id(entity_id))
        if result.modified_count:
            self._publisher.publish(
                self._event(WebhookVerb.DELETED), {"ids": ids, **result.to_dict()}
            )
        return result.modified_count

    # --- reads ---

    async def get_by_id(self, id: str, include_deleted: bool = False) -> T | None:
        entity_id = self._require_id(id)
        key = self._keys.for_id(entity_id)
        if not include_deleted:
            cached = await self._cache_get(key)
            if cached is not None:
                return cached
        predicate = Predicate.of({"id": entity_id})
        if not include_deleted:
            predicate = predicate & NOT_DELETED
        document = await self._point(self._store.find_one(self._collection, predicate), "get_by_id")
        if document is None:
            return None
        entity = self._to_domain(document)
        if not include_deleted:
            await self._cache_set(key, entity)
        return entity

    async def find_one(self, predicate: PredicateLike, include_deleted: bool = False) -> T | None:
        scoped = Predicate.of(predicate)
        if include_deleted:
            document = await self._point(self._store.find_one(self._collection, scoped), "find_one")
            return self._to_domain(document) if document else None

        scoped = scoped & NOT_DELETED
        key = self._keys.for_predicate(self._collection, scoped)
        cached = await self._cache_get(key)
        if cached is not None:
            return cached
        document = await self._point(self._store.find_one(self._collection, scoped), "find_one")
        if document is None:
            return None
        entity = self._to_domain(document)
        data = self._codec.encode(entity)
        await self._cache_put(key, data)
        await self._cache_put(self._keys.for_id(entity.id), data)
        return entity

    async def list(self, predicate: PredicateLike = None, page: PageRequest | None = None) -> Page[T]:
        request = page or PageRequest()
        scoped = scoped_filter(predicate, request)
        total_count = await self._scan(self._store.count(self._collection, scoped), "count")
        plan = plan_page(request, total_count)
        if plan.is_empty:
            return Page(
                items=[],
                total_count=total_count,
                has_previous_page=plan.has_previous_page,
                has_next_page=plan.has_next_page,
            )
        documents = await self._scan(
            self._store.find_many(
                self._collection,
                scoped,
                sort_field=SORT_FIELD,
                direction=plan.direction,
                skip=plan.skip,
                limit=plan.limit,
            ),
            "list",
        )
        items = [self._to_domain(document) for document in documents]
        if plan.direction == SortDirection.DESCENDING:
            items.reverse()
        return Page(
            items=items,
            total_count=total_count,
            has_previous_page=plan.has_previous_page,
            has_next_page=plan.has_next_page,
        )
