"""SQLAlchemy implementation of DocumentStore.

All collections share the documents table (see persistence/models).
Conditions on system fields compile to plain column comparisons; conditions
on domain fields compile to JSON-path comparisons typed after the Python
value (bool / int / float / str).  Datetime bounds compare against the
stored fixed-width UTC text.  A JSON-path $exists tests for SQL NULL,
so an explicit JSON null reads as absent, and equality with null matches
missing fields.

Each public call runs in its own session and transaction, taken from the
process-wide pool behind the session factory.  Replace and update lock
their target rows with SELECT … FOR UPDATE (ignored by SQLite, whose
write transactions are already serialised).
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from datetime import datetime
from typing import Any

from sqlalchemy import Select, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.sql.elements import ColumnElement

from marketstore.domain.errors import RepositoryError, StoreReadFailed, StoreWriteFailed
from marketstore.domain.models.base import format_timestamp
from marketstore.domain.models.enums import SortDirection
from marketstore.domain.models.predicates import Condition, Operator, Predicate
from marketstore.infrastructure.persistence.models.documents import Document

from .base import TIMESTAMP_FIELDS, DocumentDict, DocumentStore, UpdateResult, parse_timestamp

logger = logging.getLogger(__name__)

_MISSING = object()

_SYSTEM_COLUMNS = {
    "id": Document.id,
    "createdAt": Document.created_at,
    "updatedAt": Document.updated_at,
    "deletedAt": Document.deleted_at,
}


@contextmanager
def _store_errors(error: type[RepositoryError], action: str, collection: str) -> Iterator[None]:
    try:
        yield
    except (SQLAlchemyError, OSError) as exc:
        logger.error("%s on %s failed: %s", action, collection, exc)
        raise error(f"{action} on {collection} failed") from exc


def _typed(element: Any, sample: Any) -> ColumnElement:
    """Cast a JSON path element to the SQL type of the comparison value."""
    if isinstance(sample, bool):
        return element.as_boolean()
    if isinstance(sample, int):
        return element.as_integer()
    if isinstance(sample, float):
        return element.as_float()
    return element.as_string()


def _system_clause(condition: Condition) -> ColumnElement:
    column = _SYSTEM_COLUMNS[condition.field]
    if condition.operator is Operator.EXISTS:
        return column.is_not(None) if condition.value else column.is_(None)
    value = condition.value
    if condition.field in TIMESTAMP_FIELDS:
        if condition.operator is Operator.IN:
            value = tuple(parse_timestamp(item) for item in value)
        else:
            value = parse_timestamp(value)
    return _compare(column, condition.operator, value)


def _body_clause(condition: Condition) -> ColumnElement:
    element = Document.body[condition.field]
    if condition.operator is Operator.EXISTS:
        path = element.as_string()
        return path.is_not(None) if condition.value else path.is_(None)
    if condition.operator is Operator.IN:
        value = tuple(_stored(item) for item in condition.value)
        sample = next((item for item in value if item is not None), None)
    else:
        value = sample = _stored(condition.value)
    return _compare(_typed(element, sample), condition.operator, value)


def _stored(value: Any) -> Any:
    # Stored timestamps are fixed-width UTC strings, so they order as text.
    return format_timestamp(value) if isinstance(value, datetime) else value


def _compare(target: ColumnElement, operator: Operator, value: Any) -> ColumnElement:
    if operator is Operator.EQ:
        return target.is_(None) if value is None else target == value
    if operator is Operator.GT:
        return target > value
    if operator is Operator.GTE:
        return target >= value
    if operator is Operator.LT:
        return target < value
    if operator is Operator.LTE:
        return target <= value
    present = [item for item in value if item is not None]
    if len(present) < len(value):
        # A null in the list also matches a missing value.
        return or_(target.is_(None), target.in_(present))
    return target.in_(value)


def compile_predicate(predicate: Predicate) -> list[ColumnElement]:
    return [
        _system_clause(c) if c.field in _SYSTEM_COLUMNS else _body_clause(c)
        for c in predicate.conditions
    ]


def _sync_columns(row: Document, body: Mapping[str, Any]) -> None:
    row.updated_at = parse_timestamp(body["updatedAt"])
    row.deleted_at = parse_timestamp(body.get("deletedAt"))
    row.body = dict(body)


class SqlDocumentStore(DocumentStore):
    def __init__(self, sessions: async_sessionmaker[AsyncSession]) -> None:
        self._sessions = sessions

    @staticmethod
    def _select(collection: str, predicate: Predicate) -> Select:
        return select(Document).where(
            Document.collection == collection, *compile_predicate(predicate)
        )

    async def insert_one(self, collection: str, document: Mapping[str, Any]) -> None:
        row = Document(
            collection=collection,
            id=document["id"],
            created_at=parse_timestamp(document["createdAt"]),
            updated_at=parse_timestamp(document["updatedAt"]),
            deleted_at=parse_timestamp(document.get("deletedAt")),
            body=dict(document),
        )
        with _store_errors(StoreWriteFailed, "insert", collection):
            async with self._sessions() as session, session.begin():
                session.add(row)

    async def find_one(self, collection: str, predicate: Predicate) -> DocumentDict | None:
        stmt = self._select(collection, predicate).order_by(Document.id.asc()).limit(1)
        with _store_errors(StoreReadFailed, "find_one", collection):
            async with self._sessions() as session:
                result = await session.execute(stmt)
                row = result.scalar_one_or_none()
        return dict(row.body) if row else None

    async def find_many(
        self,
        collection: str,
        predicate: Predicate,
        sort_field: str = "id",
        direction: SortDirection = SortDirection.ASCENDING,
        skip: int = 0,
        limit: int | None = None,
    ) -> list[DocumentDict]:
        if sort_field in _SYSTEM_COLUMNS:
            order = _SYSTEM_COLUMNS[sort_field]
        else:
            order = Document.body[sort_field].as_string()
        order = order.desc() if direction == SortDirection.DESCENDING else order.asc()
        stmt = self._select(collection, predicate).order_by(order)
        if skip:
            stmt = stmt.offset(skip)
        if limit is not None:
            stmt = stmt.limit(limit)
        with _store_errors(StoreReadFailed, "find_many", collection):
            async with self._sessions() as session:
                result = await session.execute(stmt)
                rows = result.scalars().all()
        return [dict(row.body) for row in rows]

    async def count(self, collection: str, predicate: Predicate) -> int:
        stmt = (
            select(func.count())
            .select_from(Document)
            .where(Document.collection == collection, *compile_predicate(predicate))
        )
        with _store_errors(StoreReadFailed, "count", collection):
            async with self._sessions() as session:
                result = await session.execute(stmt)
                return result.scalar_one()

    async def find_one_and_replace(
        self,
        collection: str,
        predicate: Predicate,
        document: Mapping[str, Any],
    ) -> DocumentDict | None:
        stmt = (
            self._select(collection, predicate)
            .order_by(Document.id.asc())
            .limit(1)
            .with_for_update()
        )
        post_image = None
        with _store_errors(StoreWriteFailed, "find_one_and_replace", collection):
            async with self._sessions() as session, session.begin():
                result = await session.execute(stmt)
                row = result.scalar_one_or_none()
                if row is not None:
                    post_image = {**document, "id": row.id, "createdAt": row.body["createdAt"]}
                    _sync_columns(row, post_image)
        return post_image

    async def _update(
        self,
        collection: str,
        predicate: Predicate,
        fields: Mapping[str, Any],
        limit: int | None,
    ) -> UpdateResult:
        stmt = self._select(collection, predicate).order_by(Document.id.asc()).with_for_update()
        if limit is not None:
            stmt = stmt.limit(limit)
        modified = 0
        with _store_errors(StoreWriteFailed, "update", collection):
            async with self._sessions() as session, session.begin():
                result = await session.execute(stmt)
                rows = result.scalars().all()
                for row in rows:
                    if all(row.body.get(key, _MISSING) == value for key, value in fields.items()):
                        continue
                    _sync_columns(row, {**row.body, **fields})
                    modified += 1
        return UpdateResult(matched_count=len(rows), modified_count=modified)

    async def update_one(
        self,
        collection: str,
        predicate: Predicate,
        fields: Mapping[str, Any],
    ) -> UpdateResult:
        return await self._update(collection, predicate, fields, limit=1)

    async def update_many(
        self,
        collection: str,
        predicate: Predicate,
        fields: Mapping[str, Any],
    ) -> UpdateResult:
        return await self._update(collection, predicate, fields, limit=None)

