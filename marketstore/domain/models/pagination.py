"""Cursor pagination value objects.

PageRequest — after / before cursors and first / last sizes from the caller
Page        — one slice of a sorted scan plus its page-edge flags

Cursors are opaque to callers: the standard base64 encoding of the id of
the boundary row.
"""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from marketstore.domain.errors import InvalidArgument, InvalidCursor

from .base import Entity, is_valid_id

T = TypeVar("T", bound=Entity)


def encode_cursor(entity_id: str) -> str:
    return base64.b64encode(entity_id.encode("ascii")).decode("ascii")


def decode_cursor(cursor: str) -> str:
    """Return the id a cursor points at.  Raises InvalidCursor."""
    try:
        entity_id = base64.b64decode(cursor.encode("ascii"), validate=True).decode("ascii")
    except (binascii.Error, UnicodeError, AttributeError) as exc:
        raise InvalidCursor(f"cursor {cursor!r} is not valid base64") from exc
    if not is_valid_id(entity_id):
        raise InvalidCursor(f"cursor {cursor!r} does not name an id")
    return entity_id


@dataclass(frozen=True)
class PageRequest:
    """Relay-style slice request.  first wins when both first and last are set."""

    after: str | None = None
    before: str | None = None
    first: int | None = None
    last: int | None = None

    def __post_init__(self) -> None:
        for name in ("first", "last"):
            size = getattr(self, name)
            if size is not None and size < 0:
                raise InvalidArgument(f"{name} must be >= 0, got {size}")


@dataclass(frozen=True)
class Edge(Generic[T]):
    cursor: str
    node: T


@dataclass(frozen=True)
class Page(Generic[T]):
    items: list[T] = field(default_factory=list)
    total_count: int = 0
    has_previous_page: bool = False
    has_next_page: bool = False

    @property
    def edges(self) -> list[Edge[T]]:
        return [Edge(cursor=encode_cursor(item.id), node=item) for item in self.items]

    @property
    def start_cursor(self) -> str | None:
        return encode_cursor(self.items[0].id) if self.items else None

    @property
    def end_cursor(self) -> str | None:
        return encode_cursor(self.items[-1].id) if self.items else None
