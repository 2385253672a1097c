"""Subscription bridge — an observer displaying one transaction's progress.

A ``TxSubscription`` counts as a subscriber of the registry while mounted.
When it sees the terminal status it claims the notification and emits it
itself (or hands the status to ``on_complete``), which is why the
registry stays silent for transactions with mounted subscribers.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from tx_watcher.watcher.dispatch import notify_terminal

if TYPE_CHECKING:
    from collections.abc import Callable

    from tx_watcher.gateway.models import TxStatus
    from tx_watcher.watcher.registry import TxWatcher

logger = logging.getLogger(__name__)


class TxSubscription:
    """Mount/unmount wrapper around the registry's subscriber count.

    Usage::

        with TxSubscription(watcher, tx_hash) as sub:
            status = await sub.wait()

    Args:
        watcher: The registry watching the transaction.
        tx_hash: Hash of the displayed transaction.
        on_status: Called with every status seen while mounted.
        on_complete: Replaces the default notification when this
            subscription owns the terminal notification.
    """

    def __init__(
        self,
        watcher: TxWatcher,
        tx_hash: str,
        *,
        on_status: Callable[[TxStatus], None] | None = None,
        on_complete: Callable[[TxStatus], None] | None = None,
    ) -> None:
        self._watcher = watcher
        self._tx_hash = tx_hash
        self._on_status = on_status
        self._on_complete = on_complete
        self._status: TxStatus | None = None
        self._done = asyncio.Event()
        self._mounted = False
        self._remove_listener: Callable[[], None] | None = None

    @property
    def tx_hash(self) -> str:
        return self._tx_hash

    @property
    def is_mounted(self) -> bool:
        return self._mounted

    @property
    def status(self) -> TxStatus | None:
        """Last status seen by this subscription."""
        return self._status

    @property
    def is_terminal(self) -> bool:
        """Whether the registry has finalized the transaction."""
        return self._done.is_set()

    def mount(self) -> None:
        """Start counting as a subscriber. Idempotent."""
        if self._mounted:
            return
        self._mounted = True
        self._watcher.increment_subscriber(self._tx_hash)
        self._remove_listener = self._watcher.add_listener(self._tx_hash, self._handle_status)

        entry = self._watcher.get_watched_tx(self._tx_hash)
        if entry is not None and entry.status is not None:
            self._handle_status(entry.status)

    def unmount(self) -> None:
        """Stop counting as a subscriber. Idempotent."""
        if not self._mounted:
            return
        self._mounted = False
        if self._remove_listener is not None:
            self._remove_listener()
            self._remove_listener = None
        self._watcher.decrement_subscriber(self._tx_hash)

    def __enter__(self) -> TxSubscription:
        self.mount()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.unmount()

    async def wait(self, timeout: float | None = None) -> TxStatus | None:
        """Wait until a terminal status is seen and return it.

        Raises:
            TimeoutError: If *timeout* elapses first.
        """
        await asyncio.wait_for(self._done.wait(), timeout)
        return self._status

    def _handle_status(self, status: TxStatus) -> None:
        self._status = status
        # A terminal state_change is not final until the registry finalizes.
        entry = self._watcher.get_watched_tx(self._tx_hash)
        if status.is_terminal and entry is not None and entry.is_terminal:
            self._done.set()
            if self._mounted and self._watcher.claim_notification(self._tx_hash):
                if self._on_complete is not None:
                    self._on_complete(status)
                else:
                    notify_terminal(self._watcher.notifier, entry.template, status)
                    logger.debug("TX %s notified by subscriber", self._tx_hash[:16])

        if self._on_status is not None:
            self._on_status(status)
