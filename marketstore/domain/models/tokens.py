"""OAuth refresh token model."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import Field

from .base import Entity, Timestamp


class RefreshToken(Entity):
    """A long-lived OAuth refresh token.  Revocation is a soft delete."""

    token: str = Field(min_length=1, repr=False)
    client_id: str
    user_id: str
    scope: str = ""
    expires_at: Timestamp

    def is_expired(self, at: datetime | None = None) -> bool:
        return (at or datetime.now(timezone.utc)) >= self.expires_at
