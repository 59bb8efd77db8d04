"""Cache-through implementation of CouponRepository."""

from __future__ import annotations

from marketstore.domain.models.coupons import Coupon
from marketstore.domain.repositories.coupons import CouponRepository
from marketstore.infrastructure.cache import Cache
from marketstore.infrastructure.persistence.stores.base import DocumentStore
from marketstore.infrastructure.settings import Settings
from marketstore.infrastructure.webhooks import WebhookPublisher

from .cached import CachedRepository

COLLECTION = "coupons"
ENTITY_NAME = "coupon"


class CachedCouponRepository(CachedRepository[Coupon], CouponRepository):
    def __init__(
        self,
        store: DocumentStore,
        cache: Cache,
        publisher: WebhookPublisher,
        settings: Settings | None = None,
    ) -> None:
        super().__init__(
            Coupon,
            COLLECTION,
            store,
            cache,
            publisher,
            settings=settings,
            entity_name=ENTITY_NAME,
        )

    async def get_by_code(self, code: str) -> Coupon | None:
        return await self.find_one({"code": code})
