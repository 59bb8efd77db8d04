"""Tests for marketstore/domain/models/base.py."""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from marketstore.domain.models.base import (
    Entity,
    as_utc,
    format_timestamp,
    is_valid_id,
    new_object_id,
)


class _Widget(Entity):
    name: str
    unit_price: float = 0.0


# --- object ids ---

def test_new_object_id_is_24_lowercase_hex():
    assert is_valid_id(new_object_id())


def test_new_object_ids_are_unique():
    ids = {new_object_id() for _ in range(1000)}
    assert len(ids) == 1000


def test_new_object_ids_sort_in_creation_order():
    ids = [new_object_id() for _ in range(100)]
    assert ids == sorted(ids)


def test_new_object_id_starts_with_current_timestamp():
    now = int(datetime.now(timezone.utc).timestamp())
    assert abs(int(new_object_id()[:8], 16) - now) <= 2


@pytest.mark.parametrize(
    "value",
    ["", "xyz", "507F1F77BCF86CD799439011", "507f1f77bcf86cd79943901", None, 42],
)
def test_is_valid_id_rejects_malformed(value):
    assert not is_valid_id(value)


def test_is_valid_id_accepts_object_id():
    assert is_valid_id("507f1f77bcf86cd799439011")


# --- timestamps ---

def test_as_utc_treats_naive_as_utc():
    assert as_utc(datetime(2026, 1, 1)) == datetime(2026, 1, 1, tzinfo=timezone.utc)


def test_as_utc_converts_offsets():
    local = datetime(2026, 1, 1, 3, tzinfo=timezone(timedelta(hours=3)))
    assert as_utc(local).hour == 0
    assert as_utc(local).tzinfo is timezone.utc


def test_format_timestamp_is_fixed_width():
    whole = format_timestamp(datetime(2026, 6, 1, tzinfo=timezone.utc))
    half = format_timestamp(datetime(2026, 6, 1, 0, 0, 0, 500000, tzinfo=timezone.utc))
    assert whole == "2026-06-01T00:00:00.000000Z"
    assert half == "2026-06-01T00:00:00.500000Z"
    assert len(whole) == len(half)


def test_formatted_timestamps_sort_in_time_order():
    base = datetime(2026, 6, 1, 12, tzinfo=timezone.utc)
    instants = [
        base,
        base + timedelta(microseconds=1),
        base + timedelta(milliseconds=500),
        (base + timedelta(seconds=1)).astimezone(timezone(timedelta(hours=-5))),
    ]
    texts = [format_timestamp(value) for value in instants]
    assert texts == sorted(texts)


# --- Entity ---

def test_entity_fields_default_to_none():
    w = _Widget(name="bolt")
    assert w.id is None
    assert w.created_at is None
    assert w.updated_at is None
    assert w.deleted_at is None


def test_entity_rejects_malformed_id():
    with pytest.raises(ValidationError):
        _Widget(id="not-an-id", name="bolt")


def test_entity_is_frozen():
    w = _Widget(name="bolt")
    with pytest.raises(ValidationError):
        w.name = "nut"


def test_entity_accepts_camel_case_input():
    w = _Widget.model_validate({"name": "bolt", "unitPrice": 1.5})
    assert w.unit_price == 1.5


def test_is_deleted_reflects_deleted_at():
    assert not _Widget(name="bolt").is_deleted
    assert _Widget(name="bolt", deleted_at=datetime.now(timezone.utc)).is_deleted


def test_to_document_uses_camel_case_keys():
    document = _Widget(name="bolt", unit_price=2.0).to_document()
    assert document["unitPrice"] == 2.0
    assert "unit_price" not in document


def test_to_document_omits_absent_deleted_at():
    assert "deletedAt" not in _Widget(name="bolt").to_document()


def test_to_document_keeps_deleted_at_when_set():
    document = _Widget(name="bolt", deleted_at=datetime(2026, 1, 1, tzinfo=timezone.utc)).to_document()
    assert document["deletedAt"].startswith("2026-01-01T00:00:00")


def test_to_document_serializes_timestamps_as_strings():
    now = datetime(2026, 3, 4, 5, 6, 7, tzinfo=timezone.utc)
    document = _Widget(name="bolt", created_at=now, updated_at=now).to_document()
    assert isinstance(document["createdAt"], str)


def test_timestamps_are_stored_in_utc():
    local = datetime(2026, 3, 4, 0, 6, 7, tzinfo=timezone(timedelta(hours=-5)))
    w = _Widget(name="bolt", created_at=local)
    assert w.created_at.tzinfo is timezone.utc
    assert w.to_document()["createdAt"] == "2026-03-04T05:06:07.000000Z"


def test_from_document_round_trips():
    now = datetime(2026, 3, 4, 5, 6, 7, 123456, tzinfo=timezone.utc)
    w = _Widget(id=new_object_id(), name="bolt", created_at=now, updated_at=now)
    assert _Widget.from_document(w.to_document()) == w
