"""Refresh token repository interface."""

from __future__ import annotations

from abc import abstractmethod

from marketstore.domain.models.tokens import RefreshToken

from .base import Repository


class RefreshTokenRepository(Repository[RefreshToken]):
    """Read/write interface for RefreshToken entities.

    Revoking is a soft delete: revoked tokens disappear from get_by_token
    and list() but stay in the store for audit.
    """

    @abstractmethod
    async def get_by_token(self, token: str) -> RefreshToken | None:
        """Return the live token record for the opaque token string, or None."""

    @abstractmethod
    async def revoke_for_user(self, user_id: str) -> int:
        """Revoke every live token issued to user_id; return how many."""
