"""Webhook subscription repository interface."""

from __future__ import annotations

from abc import abstractmethod

from marketstore.domain.models.webhooks import Webhook

from .base import Repository


class WebhookRepository(Repository[Webhook]):
    @abstractmethod
    async def list_active_for_event(self, event_type: str) -> list[Webhook]:
        """Return active subscriptions whose topics cover event_type."""
