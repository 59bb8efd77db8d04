"""Cache-through implementation of WebhookRepository."""

from __future__ import annotations

from marketstore.domain.models.pagination import PageRequest
from marketstore.domain.models.webhooks import Webhook
from marketstore.domain.repositories.webhooks import WebhookRepository
from marketstore.infrastructure.cache import Cache
from marketstore.infrastructure.persistence.stores.base import DocumentStore
from marketstore.infrastructure.settings import Settings
from marketstore.infrastructure.webhooks import WebhookPublisher

from .cached import CachedRepository

COLLECTION = "webhooks"
ENTITY_NAME = "webhook"


class CachedWebhookRepository(CachedRepository[Webhook], WebhookRepository):
    def __init__(
        self,
        store: DocumentStore,
        cache: Cache,
        publisher: WebhookPublisher,
        settings: Settings | None = None,
    ) -> None:
        super().__init__(
            Webhook,
            COLLECTION,
            store,
            cache,
            publisher,
            settings=settings,
            entity_name=ENTITY_NAME,
        )

    async def list_active_for_event(self, event_type: str) -> list[Webhook]:
        # Topic wildcards are matched in Python; the store only filters on isActive.
        page = await self.list({"isActive": True}, PageRequest())
        return [webhook for webhook in page.items if webhook.subscribes_to(event_type)]
