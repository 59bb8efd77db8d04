"""Cache value codec and cache key policy.

EntityCodec      — entity ⇄ bytes (camelCase JSON); decode(encode(e)) == e
CacheKeyPolicy   — primary keys from ids, secondary keys from predicate hashes
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass
from typing import Generic, TypeVar

from pydantic import ValidationError

from marketstore.domain.errors import SerializationError
from marketstore.domain.models.base import Entity
from marketstore.domain.models.predicates import Predicate

T = TypeVar("T", bound=Entity)


class EntityCodec(Generic[T]):
    def __init__(self, model: type[T]) -> None:
        self._model = model

    def encode(self, entity: T) -> bytes:
        try:
            return entity.model_dump_json(by_alias=True).encode("utf-8")
        except (ValueError, TypeError) as exc:
            raise SerializationError(f"cannot encode {self._model.__name__}: {exc}") from exc

    def decode(self, data: bytes) -> T:
        try:
            return self._model.model_validate_json(data)
        except ValidationError as exc:
            raise SerializationError(f"cannot decode {self._model.__name__}: {exc}") from exc


@dataclass(frozen=True)
class CacheKeyPolicy:
    """Derives cache keys.

    The primary key of a row is its id (plus the optional prefix).  A
    predicate key hashes the collection together with the canonical
    predicate, so semantically equal predicates share a key and equal
    predicates on different collections never do.
    """

    prefix: str = ""

    def for_id(self, entity_id: str) -> str:
        return f"{self.prefix}{entity_id}"

    def for_predicate(self, collection: str, predicate: Predicate) -> str:
        canonical = json.dumps(
            [collection, predicate.canonical()], sort_keys=True, separators=(",", ":")
        )
        digest = hashlib.sha1(canonical.encode("utf-8")).hexdigest()
        return f"{self.prefix}{collection}:filter:{digest}"
