"""Watched transaction registry — process-wide confirmation watcher.

``TxWatcher`` tracks submitted transactions by hash, independently of any
UI screen. For each registered hash it runs one asyncio task that reads the
gateway's event stream and, if the stream fails or closes before a terminal
state, falls back to polling. On a terminal state the registry dismisses
the pending indicator and notifies the user unless a mounted subscriber
owns the notification; the entry is removed ``cleanup_delay`` seconds
later so late observers can still read the final status.

All public methods are synchronous and contain no suspension points, so a
read-modify-write on an entry can never interleave with another mutation.
The background tasks report back exclusively through the same private
mutation helpers (``_apply_status``, ``_apply_state_change``, ``_finalize``).
"""

from __future__ import annotations

import asyncio
import functools
import json
import logging
import time
from dataclasses import replace
from typing import TYPE_CHECKING

import httpx

from tx_watcher.config.settings import WatcherConfig
from tx_watcher.errors.watcher_errors import MalformedEventError, WatcherError
from tx_watcher.gateway.models import Completion, StateChange, TxState, TxStatus
from tx_watcher.stream.parser import SSEParser
from tx_watcher.taskmanager.manager import CronJob
from tx_watcher.taskmanager.tasks import SWEEP_STALE_TRANSACTIONS, task_sweep_stale_transactions
from tx_watcher.watcher.dispatch import CONFIRMED_MESSAGE, dispatch_terminal
from tx_watcher.watcher.models import NotificationTemplate, WatchedTransaction
from tx_watcher.watcher.polling import poll_until_terminal

if TYPE_CHECKING:
    from collections.abc import Callable

    from tx_watcher.gateway.client import GatewayClient
    from tx_watcher.notifications.notifier import Notifier
    from tx_watcher.stream.parser import SSEEvent

logger = logging.getLogger(__name__)


class TxWatcher:
    """Registry of in-flight transactions with stream/poll watching.

    Usage::

        async with TxWatcher(gateway, notifier, config.watcher) as watcher:
            watcher.update_auth_token(jwt)
            watcher.register(tx_hash, "task_submit", template)
            ...

    ``register`` must be called while an event loop is running.
    """

    def __init__(
        self,
        gateway: GatewayClient,
        notifier: Notifier,
        config: WatcherConfig | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._gateway = gateway
        self._notifier = notifier
        self._config = config or WatcherConfig()
        self._clock = clock
        self._token: str | None = None
        self._entries: dict[str, WatchedTransaction] = {}
        self._listeners: dict[str, list[Callable[[TxStatus], None]]] = {}
        self._removals: dict[str, asyncio.TimerHandle] = {}
        self._tasks: set[asyncio.Task[None]] = set()
        self._sweep = CronJob(
            SWEEP_STALE_TRANSACTIONS,
            functools.partial(task_sweep_stale_transactions, self),
            period=self._config.sweep_interval,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        """Whether the periodic staleness sweep is running."""
        return self._sweep.is_running

    @property
    def gateway(self) -> GatewayClient:
        return self._gateway

    @property
    def notifier(self) -> Notifier:
        return self._notifier

    @property
    def auth_token(self) -> str | None:
        return self._token

    async def start(self) -> None:
        """Start the periodic staleness sweep."""
        await self._sweep.start()

    async def close(self) -> None:
        """Stop the sweep, abort every watch and wait for the tasks to exit."""
        await self._sweep.stop()
        self.clear_all()
        pending = list(self._tasks)
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    async def __aenter__(self) -> TxWatcher:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def register(self, tx_hash: str, tx_type: str, template: NotificationTemplate) -> None:
        """Start watching *tx_hash*. No-op if it is already tracked."""
        if tx_hash in self._entries:
            return

        entry = WatchedTransaction(
            tx_hash=tx_hash,
            tx_type=tx_type,
            template=template,
            registered_at=self._clock(),
        )
        self._entries[tx_hash] = entry
        task = asyncio.create_task(self._watch(tx_hash), name=f"tx-watch-{tx_hash[:16]}")
        entry.task = task
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        logger.info("Watching TX %s (%s)", tx_hash[:16], tx_type)

    def unregister(self, tx_hash: str) -> None:
        """Stop watching *tx_hash* and forget it. No notification is emitted."""
        entry = self._entries.get(tx_hash)
        if entry is None:
            return
        self._notifier.dismiss(tx_hash)
        self._remove(tx_hash)
        logger.info("Stopped watching TX %s", tx_hash[:16])

    def update_auth_token(self, token: str | None) -> None:
        """Set the bearer token used by future connections and fallback polls.

        Streams that are already open keep the token they were opened with.
        """
        self._token = token

    def increment_subscriber(self, tx_hash: str) -> None:
        entry = self._entries.get(tx_hash)
        if entry is None:
            return
        entry.subscriber_count += 1

    def decrement_subscriber(self, tx_hash: str) -> None:
        entry = self._entries.get(tx_hash)
        if entry is None:
            return
        entry.subscriber_count = max(0, entry.subscriber_count - 1)

    def get_watched_tx(self, tx_hash: str) -> WatchedTransaction | None:
        """Return a snapshot of the entry for *tx_hash*, or None."""
        entry = self._entries.get(tx_hash)
        return replace(entry) if entry is not None else None

    def watched_hashes(self) -> list[str]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, tx_hash: object) -> bool:
        return tx_hash in self._entries

    def cleanup(self) -> int:
        """Evict entries registered more than ``max_age`` seconds ago.

        Returns:
            Number of evicted entries.
        """
        now = self._clock()
        stale = [
            tx_hash
            for tx_hash, entry in self._entries.items()
            if now - entry.registered_at > self._config.max_age
        ]
        for tx_hash in stale:
            self._remove(tx_hash)
            logger.info("Evicted stale TX %s", tx_hash[:16])
        return len(stale)

    def clear_all(self) -> None:
        """Abort every watch and empty the registry (e.g. on sign-out)."""
        for tx_hash in list(self._entries):
            self._notifier.dismiss(tx_hash)
            self._remove(tx_hash)

    # ------------------------------------------------------------------
    # Subscriber support
    # ------------------------------------------------------------------

    def add_listener(
        self, tx_hash: str, listener: Callable[[TxStatus], None]
    ) -> Callable[[], None]:
        """Call *listener* with every status recorded for *tx_hash*.

        Listeners are dropped when the entry is removed. Returns a function
        that removes the listener; it is a no-op for untracked hashes.
        """
        if tx_hash not in self._entries:
            return lambda: None
        listeners = self._listeners.setdefault(tx_hash, [])
        listeners.append(listener)

        def _remove_listener() -> None:
            current = self._listeners.get(tx_hash)
            if current is not None and listener in current:
                current.remove(listener)

        return _remove_listener

    def claim_notification(self, tx_hash: str) -> bool:
        """Take ownership of the terminal notification for *tx_hash*.

        Returns True exactly once per terminal transaction, to the first
        caller; the registry's own notification counts as a claim.
        """
        entry = self._entries.get(tx_hash)
        if entry is None or not entry.is_terminal or entry.notified:
            return False
        entry.notified = True
        return True

    # ------------------------------------------------------------------
    # Mutation helpers (called from the watch tasks)
    # ------------------------------------------------------------------

    def _apply_status(self, tx_hash: str, status: TxStatus) -> bool:
        """Record a full status snapshot. Returns True when watching is done."""
        entry = self._entries.get(tx_hash)
        if entry is None or entry.is_terminal:
            return True
        if status.is_terminal:
            self._finalize(tx_hash, status)
            return True
        entry.status = status
        self._emit(tx_hash, status)
        return False

    def _apply_state_change(self, tx_hash: str, new_state: TxState) -> bool:
        """Merge a bare state change into the current status.

        Never finalizes, even for a terminal state: the ``complete`` event
        that follows carries ``last_error`` and ``confirmed_at``.
        """
        entry = self._entries.get(tx_hash)
        if entry is None or entry.is_terminal:
            return True
        if entry.status is not None:
            status = entry.status.with_state(new_state)
        else:
            status = TxStatus(tx_hash=tx_hash, state=new_state, tx_type=entry.tx_type)
        entry.status = status
        if new_state is TxState.CONFIRMED:
            self._notifier.pending(tx_hash, CONFIRMED_MESSAGE)
        self._emit(tx_hash, status)
        return False

    def _finalize(self, tx_hash: str, status: TxStatus) -> None:
        entry = self._entries.get(tx_hash)
        if entry is None or entry.is_terminal:
            return

        entry.status = status
        entry.is_terminal = True
        entry.task = None
        self._notifier.dismiss(tx_hash)
        self._emit(tx_hash, status)

        if dispatch_terminal(self._notifier, entry):
            logger.info("TX %s %s, notified by watcher", tx_hash[:16], status.state)
        else:
            logger.info("TX %s %s, notification left to subscriber", tx_hash[:16], status.state)

        loop = asyncio.get_running_loop()
        self._removals[tx_hash] = loop.call_later(
            self._config.cleanup_delay, self._remove_finished, tx_hash, entry
        )

    def _emit(self, tx_hash: str, status: TxStatus) -> None:
        for listener in list(self._listeners.get(tx_hash, ())):
            try:
                listener(status)
            except Exception:
                logger.exception("Status listener failed for TX %s", tx_hash[:16])

    def _remove(self, tx_hash: str) -> None:
        """Drop an entry, aborting its task and any pending removal timer."""
        entry = self._entries.pop(tx_hash, None)
        self._listeners.pop(tx_hash, None)
        handle = self._removals.pop(tx_hash, None)
        if handle is not None:
            handle.cancel()
        if entry is not None and entry.task is not None:
            entry.task.cancel()
            entry.task = None

    def _remove_finished(self, tx_hash: str, entry: WatchedTransaction) -> None:
        # Only remove the entry this timer was scheduled for.
        if self._entries.get(tx_hash) is entry:
            self._removals.pop(tx_hash, None)
            self._entries.pop(tx_hash, None)
            self._listeners.pop(tx_hash, None)
            logger.debug("Removed finished TX %s", tx_hash[:16])

    # ------------------------------------------------------------------
    # Watch task
    # ------------------------------------------------------------------

    async def _watch(self, tx_hash: str) -> None:
        """Stream events for *tx_hash*, falling back to polling if needed."""
        try:
            finished = await self._consume_stream(tx_hash, self._token)
        except (WatcherError, httpx.HTTPError) as exc:
            logger.warning(
                "Stream failed for TX %s, falling back to polling: %s", tx_hash[:16], exc
            )
            finished = False
        else:
            if not finished:
                logger.warning(
                    "Stream for TX %s ended without terminal event, falling back to polling",
                    tx_hash[:16],
                )

        if finished or tx_hash not in self._entries:
            return

        await poll_until_terminal(
            self._gateway,
            tx_hash,
            token=self._token,
            on_status=functools.partial(self._apply_status, tx_hash),
            on_error=functools.partial(self._log_poll_error, tx_hash),
            interval=self._config.poll_interval,
            max_polls=self._config.max_polls,
        )

    async def _consume_stream(self, tx_hash: str, token: str | None) -> bool:
        """Read the event stream. Returns True once watching is done."""
        parser = SSEParser()
        async with self._gateway.stream(tx_hash, token=token) as chunks:
            async for chunk in chunks:
                for event in parser.feed(chunk):
                    if self._handle_event(tx_hash, event):
                        return True
        if parser.has_pending:
            logger.debug("Stream for TX %s closed mid-record", tx_hash[:16])
        return False

    def _handle_event(self, tx_hash: str, event: SSEEvent) -> bool:
        """Apply one stream event. Returns True once watching is done."""
        if event.event not in ("state", "state_change", "complete") or not event.data:
            return False

        try:
            payload = json.loads(event.data)
            if event.event == "state":
                return self._apply_status(tx_hash, TxStatus.from_dict(payload, tx_hash=tx_hash))
            if event.event == "state_change":
                return self._apply_state_change(tx_hash, StateChange.from_dict(payload).new_state)
            completion = Completion.from_dict(payload)
        except (ValueError, TypeError, MalformedEventError) as exc:
            logger.warning(
                "Skipping malformed %s event for TX %s: %s", event.event, tx_hash[:16], exc
            )
            return False

        self._finalize(tx_hash, completion.to_status(tx_hash))
        return True

    def _log_poll_error(self, tx_hash: str, exc: WatcherError) -> None:
        logger.error("Polling error for TX %s: %s", tx_hash[:16], exc)

    def _on_task_done(self, task: asyncio.Task[None]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Watch task %s crashed", task.get_name(), exc_info=exc)
