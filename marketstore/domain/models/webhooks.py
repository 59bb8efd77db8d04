"""Webhook models.

Webhook      — a developer's subscription: where to deliver which events
WebhookEvent — the envelope handed to the bus for every mutation
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import secrets
import string
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .base import Entity, Timestamp

_EVENT_ID_ALPHABET = string.ascii_letters + string.digits
EVENT_ID_LENGTH = 20


def new_event_id() -> str:
    return "".join(secrets.choice(_EVENT_ID_ALPHABET) for _ in range(EVENT_ID_LENGTH))


class Webhook(Entity):
    """An endpoint subscribed to mutation events.

    events holds exact names ("coupon.created"), entity wildcards
    ("coupon.*") or the global wildcard ("*").
    """

    app_id: str
    url: str = Field(min_length=1)
    events: list[str] = Field(default_factory=list)
    secret: str = Field(default="", repr=False)
    is_active: bool = True
    created_by: str | None = None

    def subscribes_to(self, event_type: str) -> bool:
        entity = event_type.split(".", 1)[0]
        return any(
            topic in ("*", event_type, f"{entity}.*") for topic in self.events
        )

    def sign(self, body: bytes) -> str:
        """base64(HMAC-SHA256(secret, body)) — sent as X-Webhook-Signature."""
        digest = hmac.new(self.secret.encode("utf-8"), body, hashlib.sha256).digest()
        return base64.b64encode(digest).decode("ascii")


class WebhookEvent(BaseModel):
    """Envelope published for every mutation.  Serializes as
    {"id", "createdAt", "type", "data"}."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str = Field(default_factory=new_event_id)
    created_at: Timestamp = Field(default_factory=lambda: datetime.now(timezone.utc))
    event_type: str = Field(alias="type")
    data: Any = None

    def to_json(self) -> bytes:
        return self.model_dump_json(by_alias=True).encode("utf-8")
