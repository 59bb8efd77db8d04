"""Repository error taxonomy.

Raised by repositories, stores and the pagination engine.  Callers catch
RepositoryError to handle every persistence failure in one place, or a
specific subclass when the distinction matters (e.g. BadIdentifier → 400,
EntityNotFound → 404).

CacheError is raised by cache adapters only; CachedRepository always
catches it, so it never reaches application code.  Cancellation is not
part of this hierarchy: asyncio.CancelledError propagates untouched.
"""

from __future__ import annotations


class RepositoryError(Exception):
    """Base class for every persistence-layer failure."""


class EntityNotFound(RepositoryError, LookupError):
    """No live row matches the requested identifier."""


class BadIdentifier(RepositoryError, ValueError):
    """The supplied id is not a 24-character hex object id."""


class InvalidCursor(RepositoryError, ValueError):
    """A pagination cursor could not be decoded into an id."""


class InvalidArgument(RepositoryError, ValueError):
    """A pagination size or predicate operator is not acceptable."""


class StoreReadFailed(RepositoryError):
    """The document store reported an error on a read."""


class StoreWriteFailed(RepositoryError):
    """The document store reported an error on a write."""


class CacheError(RepositoryError):
    """The cache backend reported an error.  Logged, never surfaced."""


class SerializationError(RepositoryError):
    """An entity could not be encoded, or cached bytes could not be decoded."""


class OperationTimeout(RepositoryError, TimeoutError):
    """A store operation exceeded its deadline."""
