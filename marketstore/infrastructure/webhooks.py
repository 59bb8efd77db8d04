"""Webhook publisher: non-blocking hand-off of mutation events.

publish() wraps (event_type, payload) in a WebhookEvent envelope and puts
it on a bounded asyncio.Queue.  A fixed pool of worker tasks drains the
queue into a sink.  The caller never waits and never sees a failure:

  - queue full       → event dropped, warning logged (backpressure)
  - sink raises      → warning logged, worker carries on
  - publisher idle   → events wait in the queue until start()

No ordering is promised across workers; two quick writes to the same row
may reach the sink as updated-before-created.  Consumers must be idempotent.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Protocol

import redis.asyncio as redis
from pydantic_core import to_jsonable_python
from redis.asyncio import Redis

from marketstore.domain.models.webhooks import WebhookEvent

from .settings import Settings, get_settings

logger = logging.getLogger(__name__)


class WebhookSink(Protocol):
    async def deliver(self, event: WebhookEvent) -> None:
        """Hand one event to the transport.  May raise; the publisher logs it."""
        ...

    async def close(self) -> None:
        """Release the transport.  Called once when the publisher stops."""
        ...


class RedisChannelSink:
    """Publishes the JSON envelope on a Redis channel for delivery workers."""

    def __init__(self, client: Redis, channel: str) -> None:
        self._client = client
        self._channel = channel

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> RedisChannelSink:
        settings = settings or get_settings()
        return cls(redis.from_url(settings.redis_url), settings.webhook_channel)

    async def deliver(self, event: WebhookEvent) -> None:
        await self._client.publish(self._channel, event.to_json())

    async def close(self) -> None:
        await self._client.aclose()


class LoggingSink:
    async def deliver(self, event: WebhookEvent) -> None:
        logger.info("webhook %s %s", event.event_type, event.id)

    async def close(self) -> None:
        pass


class CollectingSink:
    """Keeps every delivered event in memory (tests, local development)."""

    def __init__(self) -> None:
        self.events: list[WebhookEvent] = []

    async def deliver(self, event: WebhookEvent) -> None:
        self.events.append(event)

    async def close(self) -> None:
        pass

    def types(self) -> list[str]:
        return [event.event_type for event in self.events]


class WebhookPublisher:
    def __init__(self, sink: WebhookSink, worker_count: int = 4, queue_size: int = 1000) -> None:
        if worker_count < 1:
            raise ValueError(f"worker_count must be >= 1, got {worker_count}")
        self._sink = sink
        self._worker_count = worker_count
        self._queue: asyncio.Queue[WebhookEvent] = asyncio.Queue(maxsize=queue_size)
        self._workers: list[asyncio.Task[None]] = []

    @classmethod
    def from_settings(cls, sink: WebhookSink, settings: Settings | None = None) -> WebhookPublisher:
        settings = settings or get_settings()
        return cls(
            sink,
            worker_count=settings.webhook_worker_count,
            queue_size=settings.webhook_queue_size,
        )

    @property
    def running(self) -> bool:
        return bool(self._workers)

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def publish(self, event_type: str, payload: Any) -> None:
        """Enqueue an event.  Never blocks, never raises."""
        try:
            # Snapshot the payload now; later mutations must not leak into the event.
            data = to_jsonable_python(payload, by_alias=True)
            self._queue.put_nowait(WebhookEvent(event_type=event_type, data=data))
        except asyncio.QueueFull:
            logger.warning("webhook queue full, dropping %s", event_type)
        except (ValueError, TypeError) as exc:
            logger.warning("webhook payload for %s not serializable: %s", event_type, exc)

    async def start(self) -> None:
        if self._workers:
            return
        self._workers = [
            asyncio.create_task(self._work(), name=f"webhook-worker-{n}")
            for n in range(self._worker_count)
        ]
        logger.info("webhook publisher started with %d workers", self._worker_count)

    async def stop(self, drain_timeout: float = 5.0) -> None:
        """Wait up to drain_timeout for queued events, stop the workers, close the sink."""
        if self._workers:
            try:
                await asyncio.wait_for(self._queue.join(), drain_timeout)
            except asyncio.TimeoutError:
                logger.warning(
                    "webhook publisher stopping with %d events undelivered", self.pending
                )
            for task in self._workers:
                task.cancel()
            await asyncio.gather(*self._workers, return_exceptions=True)
            self._workers = []
            logger.info("webhook publisher stopped")
        await self._sink.close()

    async def _work(self) -> None:
        while True:
            event = await self._queue.get()
            try:
                await self._sink.deliver(event)
            except Exception:
                # Delivery is best-effort; a failing sink must not kill the worker.
                logger.warning(
                    "webhook %s (%s) not delivered", event.event_type, event.id, exc_info=True
                )
            finally:
                self._queue.task_done()

    async def __aenter__(self) -> WebhookPublisher:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()
