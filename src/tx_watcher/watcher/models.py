"""Watcher data model — WatchedTransaction and NotificationTemplate."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

from tx_watcher.gateway.models import TxStatus


@dataclass(frozen=True)
class NotificationTemplate:
    """Caller-supplied texts for the terminal notification.

    Attributes:
        success_title: Title shown when the transaction is ``updated``.
        success_description: Body shown on success.
        error_title: Title shown on ``failed`` / ``expired``.
        error_description: Body shown on failure; when None the status's
            ``last_error`` is used instead.
    """

    success_title: str
    success_description: str
    error_title: str
    error_description: str | None = None


@dataclass
class WatchedTransaction:
    """Registry entry for one transaction hash.

    ``task`` is the stream/poll task owned by the registry; it is None once
    the transaction is terminal or the watch has been released.
    ``notified`` records that a terminal notification has been emitted, by
    the registry or by a subscriber.
    """

    tx_hash: str
    tx_type: str
    template: NotificationTemplate
    registered_at: float
    status: TxStatus | None = None
    is_terminal: bool = False
    subscriber_count: int = 0
    notified: bool = False
    task: asyncio.Task[None] | None = field(default=None, repr=False, compare=False)
