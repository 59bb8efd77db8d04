"""Cache-through implementation of RefreshTokenRepository."""

from __future__ import annotations

from marketstore.domain.models.tokens import RefreshToken
from marketstore.domain.repositories.tokens import RefreshTokenRepository
from marketstore.infrastructure.cache import Cache
from marketstore.infrastructure.persistence.stores.base import DocumentStore
from marketstore.infrastructure.settings import Settings
from marketstore.infrastructure.webhooks import WebhookPublisher

from .cached import CachedRepository

COLLECTION = "oauth_refresh_tokens"
ENTITY_NAME = "refresh_token"


class CachedRefreshTokenRepository(CachedRepository[RefreshToken], RefreshTokenRepository):
    def __init__(
        self,
        store: DocumentStore,
        cache: Cache,
        publisher: WebhookPublisher,
        settings: Settings | None = None,
    ) -> None:
        super().__init__(
            RefreshToken,
            COLLECTION,
            store,
            cache,
            publisher,
            settings=settings,
            entity_name=ENTITY_NAME,
        )

    async def get_by_token(self, token: str) -> RefreshToken | None:
        return await self.find_one({"token": token})

    async def revoke_for_user(self, user_id: str) -> int:
        return await self.soft_delete_many({"userId": user_id})
