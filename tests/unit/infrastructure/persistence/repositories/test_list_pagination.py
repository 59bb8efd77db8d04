"""Tests for CachedRepository.list — cursor pagination over live rows."""

import pytest

from marketstore.domain.errors import InvalidArgument, InvalidCursor
from marketstore.domain.models.coupons import Coupon
from marketstore.domain.models.pagination import PageRequest, encode_cursor
from marketstore.infrastructure.cache import InMemoryCache
from marketstore.infrastructure.persistence.repositories.cached import CachedRepository
from marketstore.infrastructure.persistence.stores.memory import InMemoryDocumentStore
from marketstore.infrastructure.settings import Settings
from marketstore.infrastructure.webhooks import CollectingSink, WebhookPublisher


@pytest.fixture()
def repo():
    return CachedRepository(
        Coupon,
        "coupons",
        InMemoryDocumentStore(),
        InMemoryCache(),
        WebhookPublisher(CollectingSink()),
        settings=Settings(),
        entity_name="coupon",
    )


async def _insert(repo, n):
    return [await repo.insert(Coupon(code=f"R{i}")) for i in range(1, n + 1)]


def _codes(page):
    return [c.code for c in page.items]


# --- soft delete visibility ---

async def test_soft_deleted_rows_hidden_from_list(repo):
    a, b, c = await _insert(repo, 3)
    await repo.soft_delete(b.id)
    page = await repo.list(page=PageRequest(first=10))
    assert page.items == [a, c]
    assert page.total_count == 2
    assert not page.has_next_page


async def test_list_never_returns_tombstones(repo):
    rows = await _insert(repo, 6)
    for row in rows[::2]:
        await repo.soft_delete(row.id)
    for request in (PageRequest(), PageRequest(first=2), PageRequest(last=2)):
        page = await repo.list(page=request)
        assert all(not item.is_deleted for item in page.items)


# --- forward ---

async def test_forward_pagination(repo):
    r = await _insert(repo, 5)

    p1 = await repo.list(page=PageRequest(first=2))
    assert p1.items == r[0:2]
    assert p1.has_next_page
    assert not p1.has_previous_page

    p2 = await repo.list(page=PageRequest(first=2, after=encode_cursor(r[1].id)))
    assert p2.items == r[2:4]
    assert p2.has_previous_page and p2.has_next_page

    p3 = await repo.list(page=PageRequest(first=2, after=encode_cursor(r[3].id)))
    assert p3.items == r[4:5]
    assert not p3.has_next_page


async def test_forward_pages_concatenate_to_full_scan(repo):
    rows = await _insert(repo, 7)
    seen, after = [], None
    while True:
        page = await repo.list(page=PageRequest(first=3, after=after))
        seen.extend(page.items)
        if not page.has_next_page:
            break
        after = page.end_cursor
    assert seen == rows


# --- backward ---

async def test_backward_pagination(repo):
    r = await _insert(repo, 5)
    page = await repo.list(page=PageRequest(last=2, before=encode_cursor(r[4].id)))
    assert page.items == r[2:4]
    assert page.has_previous_page
    assert page.has_next_page


async def test_last_without_cursor_returns_tail_ascending(repo):
    r = await _insert(repo, 5)
    page = await repo.list(page=PageRequest(last=2))
    assert page.items == r[3:5]
    assert not page.has_next_page


async def test_backward_page_reverses_forward_page(repo):
    await _insert(repo, 6)
    p1 = await repo.list(page=PageRequest(first=2))
    p2 = await repo.list(page=PageRequest(first=2, after=p1.end_cursor))
    back = await repo.list(page=PageRequest(last=2, before=p2.start_cursor))
    assert back.items == p1.items


# --- edge cases ---

async def test_unbounded_list_returns_everything(repo):
    rows = await _insert(repo, 4)
    page = await repo.list()
    assert page.items == rows
    assert not page.has_next_page and not page.has_previous_page


async def test_first_zero_returns_empty_page_with_next_flag(repo):
    await _insert(repo, 1)
    page = await repo.list(page=PageRequest(first=0))
    assert page.items == []
    assert page.has_next_page
    assert page.total_count == 1


async def test_first_wins_over_last(repo):
    r = await _insert(repo, 5)
    page = await repo.list(page=PageRequest(first=1, last=3))
    assert page.items == r[:1]


async def test_total_count_reflects_cursor_window(repo):
    r = await _insert(repo, 5)
    page = await repo.list(page=PageRequest(first=1, after=encode_cursor(r[1].id)))
    assert page.total_count == 3


async def test_cursor_of_deleted_row_still_bounds_scan(repo):
    r = await _insert(repo, 4)
    await repo.soft_delete(r[1].id)
    page = await repo.list(page=PageRequest(first=10, after=encode_cursor(r[1].id)))
    assert page.items == r[2:]


async def test_list_applies_caller_predicate(repo):
    await repo.insert(Coupon(code="A", is_active=False))
    b = await repo.insert(Coupon(code="B"))
    page = await repo.list({"isActive": True})
    assert page.items == [b]


async def test_malformed_cursor_raises(repo):
    with pytest.raises(InvalidCursor):
        await repo.list(page=PageRequest(first=1, after="not-a-cursor!"))


def test_negative_size_raises():
    with pytest.raises(InvalidArgument):
        PageRequest(last=-2)


async def test_empty_collection(repo):
    page = await repo.list(page=PageRequest(first=5))
    assert page.items == []
    assert page.total_count == 0
    assert page.start_cursor is None
