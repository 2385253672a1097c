"""Watcher — process-wide transaction confirmation tracking.

Provides:
- ``TxWatcher`` — registry of watched transactions (stream + polling)
- ``TxSubscription`` — observer that owns notifications while mounted
- ``poll_until_terminal`` — standalone polling fallback
- ``track_submitted_transaction`` — post-submission entry point
"""

from __future__ import annotations

from tx_watcher.watcher.models import NotificationTemplate, WatchedTransaction
from tx_watcher.watcher.polling import poll_until_terminal
from tx_watcher.watcher.registry import TxWatcher
from tx_watcher.watcher.subscription import TxSubscription
from tx_watcher.watcher.tracking import track_submitted_transaction

__all__ = [
    "NotificationTemplate",
    "TxSubscription",
    "TxWatcher",
    "WatchedTransaction",
    "poll_until_terminal",
    "track_submitted_transaction",
]
