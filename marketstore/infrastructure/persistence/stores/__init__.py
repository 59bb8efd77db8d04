"""Document store adapters."""

from .base import DocumentDict, DocumentStore, UpdateResult
from .memory import InMemoryDocumentStore
from .sql import SqlDocumentStore

__all__ = [
    "DocumentDict",
    "DocumentStore",
    "InMemoryDocumentStore",
    "SqlDocumentStore",
    "UpdateResult",
]
