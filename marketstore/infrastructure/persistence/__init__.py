"""Persistence package.

Importing this package registers the documents table with Base.metadata
and exports the store adapters, repository implementations and the
wiring factory.
"""

from marketstore.infrastructure.persistence.models import Document
from marketstore.infrastructure.persistence.repositories import (
    CachedCouponRepository,
    CachedRefreshTokenRepository,
    CachedRepository,
    CachedWebhookRepository,
    Repositories,
    get_repositories,
)
from marketstore.infrastructure.persistence.stores import (
    DocumentStore,
    InMemoryDocumentStore,
    SqlDocumentStore,
    UpdateResult,
)

__all__ = [
    "Document",
    "DocumentStore",
    "InMemoryDocumentStore",
    "SqlDocumentStore",
    "UpdateResult",
    "CachedRepository",
    "CachedCouponRepository",
    "CachedWebhookRepository",
    "CachedRefreshTokenRepository",
    "Repositories",
    "get_repositories",
]
