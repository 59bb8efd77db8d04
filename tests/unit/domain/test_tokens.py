"""Tests for marketstore/domain/models/tokens.py."""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from marketstore.domain.models.tokens import RefreshToken

NOW = datetime(2026, 6, 1, tzinfo=timezone.utc)


def _token(**overrides):
    defaults = dict(
        token="rt-abc",
        client_id="client-1",
        user_id="user-1",
        expires_at=NOW + timedelta(days=30),
    )
    defaults.update(overrides)
    return RefreshToken(**defaults)


def test_token_requires_token_string():
    with pytest.raises(ValidationError):
        _token(token="")


def test_token_hidden_from_repr():
    assert "rt-abc" not in repr(_token())


def test_token_scope_defaults_to_empty():
    assert _token().scope == ""


def test_token_not_expired_before_expiry():
    assert not _token().is_expired(at=NOW)


def test_token_expired_at_expiry():
    t = _token()
    assert t.is_expired(at=t.expires_at)


def test_token_document_field_names():
    document = _token().to_document()
    assert document["userId"] == "user-1"
    assert document["clientId"] == "client-1"
