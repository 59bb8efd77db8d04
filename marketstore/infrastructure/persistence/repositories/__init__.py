"""Cache-through repository implementations.

Exports every CachedRepository subclass and the get_repositories() factory
for wiring at the application boundary.
"""

from __future__ import annotations

from dataclasses import dataclass

from marketstore.infrastructure.cache import Cache
from marketstore.infrastructure.persistence.stores.base import DocumentStore
from marketstore.infrastructure.settings import Settings
from marketstore.infrastructure.webhooks import WebhookPublisher

from .cached import CachedRepository
from .coupons import CachedCouponRepository
from .tokens import CachedRefreshTokenRepository
from .webhooks import CachedWebhookRepository


@dataclass
class Repositories:
    """All repository instances sharing one store, cache and publisher."""

    coupons: CachedCouponRepository
    webhooks: CachedWebhookRepository
    refresh_tokens: CachedRefreshTokenRepository


def get_repositories(
    store: DocumentStore,
    cache: Cache,
    publisher: WebhookPublisher,
    settings: Settings | None = None,
) -> Repositories:
    """Construct all repositories over the given process-wide resources.

    Typical wiring at startup:

        settings = get_settings()
        engine = create_engine(settings)
        store = SqlDocumentStore(create_session_factory(engine))
        cache = RedisCache.from_settings(settings)
        publisher = WebhookPublisher.from_settings(
            RedisChannelSink.from_settings(settings), settings
        )
        await publisher.start()
        repos = get_repositories(store, cache, publisher, settings)
        coupon = await repos.coupons.get_by_code("SPRING10")

    and at shutdown:

        await publisher.stop()      # drains the queue and closes the sink
        await cache.close()
        await engine.dispose()
    """
    return Repositories(
        coupons=CachedCouponRepository(store, cache, publisher, settings),
        webhooks=CachedWebhookRepository(store, cache, publisher, settings),
        refresh_tokens=CachedRefreshTokenRepository(store, cache, publisher, settings),
    )


__all__ = [
    "CachedRepository",
    "CachedCouponRepository",
    "CachedWebhookRepository",
    "CachedRefreshTokenRepository",
    "Repositories",
    "get_repositories",
]
