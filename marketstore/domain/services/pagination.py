"""Bidirectional cursor pagination engine.

Pure functions — no I/O.  A list call runs in three steps:

    scoped_filter(predicate, request)   → filter with tombstones excluded and
                                          after / before bounds applied
    (caller counts rows under that filter)
    plan_page(request, total_count)     → skip / limit / direction / edge flags

The scan is always ordered by id ascending.  A "last N" slice is read in
descending order with limit N and reversed by the caller, so every page
is returned in ascending id order regardless of direction.

first and last both set: first wins.  A cursor naming a row that does not
exist still bounds the scan correctly — the > / < comparison places it
where it would have sorted.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from marketstore.domain.models.enums import SortDirection
from marketstore.domain.models.pagination import PageRequest, decode_cursor
from marketstore.domain.models.predicates import NOT_DELETED, Predicate

SORT_FIELD = "id"


@dataclass(frozen=True)
class PagePlan:
    """Concrete read geometry for one page.

    limit None means unbounded; limit 0 means the page is empty and the
    caller need not query at all.
    """

    skip: int
    limit: int | None
    direction: SortDirection
    has_previous_page: bool
    has_next_page: bool

    @property
    def is_empty(self) -> bool:
        return self.limit == 0


def cursor_bounds(request: PageRequest) -> Predicate:
    """id > after and / or id < before.  Raises InvalidCursor."""
    bounds: dict[str, Any] = {}
    if request.after is not None:
        bounds["$gt"] = decode_cursor(request.after)
    if request.before is not None:
        bounds["$lt"] = decode_cursor(request.before)
    return Predicate.of({SORT_FIELD: bounds}) if bounds else Predicate()


def scoped_filter(
    predicate: Predicate | Mapping[str, Any] | None,
    request: PageRequest,
) -> Predicate:
    """The caller's predicate, minus tombstones, bounded by the cursors."""
    return Predicate.of(predicate) & NOT_DELETED & cursor_bounds(request)


def plan_page(request: PageRequest, total_count: int) -> PagePlan:
    """Translate a request plus the bounded row count into a read plan."""
    if request.first is not None:
        return PagePlan(
            skip=0,
            limit=request.first,
            direction=SortDirection.ASCENDING,
            has_previous_page=request.after is not None,
            has_next_page=total_count > request.first,
        )
    if request.last is not None:
        return PagePlan(
            skip=0,
            limit=request.last,
            direction=SortDirection.DESCENDING,
            has_previous_page=total_count > request.last,
            has_next_page=request.before is not None,
        )
    return PagePlan(
        skip=0,
        limit=None,
        direction=SortDirection.ASCENDING,
        has_previous_page=False,
        has_next_page=False,
    )
