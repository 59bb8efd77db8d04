"""Tests for marketstore/domain/repositories — abstract interfaces."""

import pytest

from marketstore.domain.repositories import (
    CouponRepository,
    RefreshTokenRepository,
    Repository,
    WebhookRepository,
)


class _Full(Repository):
    async def insert(self, entity): return entity
    async def get_by_id(self, id, include_deleted=False): return None
    async def find_one(self, predicate, include_deleted=False): return None
    async def replace(self, entity): return entity
    async def soft_delete(self, id): return False
    async def soft_delete_many(self, predicate): return 0
    async def list(self, predicate=None, page=None): return None


def test_repository_cannot_be_instantiated_directly():
    with pytest.raises(TypeError):
        Repository()  # type: ignore[abstract]


def test_repository_concrete_subclass_must_implement_all_methods():
    class _Partial(Repository):
        async def insert(self, entity): return entity
        # missing everything else

    with pytest.raises(TypeError):
        _Partial()  # type: ignore[abstract]


def test_repository_full_concrete_subclass_instantiates():
    assert _Full() is not None


def test_coupon_repository_requires_get_by_code():
    class _Coupons(_Full, CouponRepository):
        pass

    with pytest.raises(TypeError):
        _Coupons()  # type: ignore[abstract]


def test_webhook_repository_requires_list_active_for_event():
    class _Hooks(_Full, WebhookRepository):
        pass

    with pytest.raises(TypeError):
        _Hooks()  # type: ignore[abstract]


def test_refresh_token_repository_requires_both_finders():
    class _Tokens(_Full, RefreshTokenRepository):
        async def get_by_token(self, token): return None

    with pytest.raises(TypeError):
        _Tokens()  # type: ignore[abstract]
