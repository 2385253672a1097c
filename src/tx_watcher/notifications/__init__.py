"""Notifications — user-facing success/error messages and pending indicators.

Provides:
- ``Notifier`` — sink interface used by the watcher
- ``MemoryNotifier`` — records notifications in memory
- ``EventNotifier`` — forwards notifications to ``NotificationService``
- ``NotificationService`` — copies events onto per-subscriber asyncio queues
"""

from __future__ import annotations

from tx_watcher.notifications.events import NotificationEvent, NotificationKind
from tx_watcher.notifications.notifier import EventNotifier, MemoryNotifier, Notifier
from tx_watcher.notifications.service import NotificationService

__all__ = [
    "EventNotifier",
    "MemoryNotifier",
    "NotificationEvent",
    "NotificationKind",
    "NotificationService",
    "Notifier",
]
