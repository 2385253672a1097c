"""Notification service — fan notification events out to subscribers.

Every published event is copied onto each subscriber's queue. Publishing
never blocks, so ``EventNotifier`` can call it from the watcher's
synchronous mutation methods.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tx_watcher.notifications.events import NotificationEvent

logger = logging.getLogger(__name__)

_SUBSCRIBER_BUFFER = 100


class NotificationService:
    """Fan-out of notification events onto per-subscriber asyncio queues.

    Usage::

        svc = NotificationService()
        q = svc.subscribe("console")
        svc.publish(NotificationEvent(kind=NotificationKind.SUCCESS, title="Done"))
        event = await q.get()
        svc.unsubscribe("console")
    """

    def __init__(self) -> None:
        self._subscribers: dict[str, asyncio.Queue[NotificationEvent]] = {}

    @property
    def subscribers(self) -> list[str]:
        return list(self._subscribers)

    def subscribe(
        self, key: str, *, buffer: int = _SUBSCRIBER_BUFFER
    ) -> asyncio.Queue[NotificationEvent]:
        """Register a subscriber and return its queue."""
        q: asyncio.Queue[NotificationEvent] = asyncio.Queue(maxsize=buffer)
        self._subscribers[key] = q
        return q

    def unsubscribe(self, key: str) -> None:
        self._subscribers.pop(key, None)

    def publish(self, event: NotificationEvent) -> None:
        """Deliver *event* to every subscriber; full queues drop it."""
        for key, q in self._subscribers.items():
            try:
                q.put_nowait(event)
            except asyncio.QueueFull:
                logger.warning("Subscriber %s queue full, dropping %s event", key, event.kind)
