"""Polling fallback — query transaction status until a terminal state.

Used when the event stream cannot be relied upon to deliver a terminal
event. The first request is sent immediately, later ones every
``interval`` seconds. Cancelling the surrounding task stops the loop.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from tx_watcher.errors.watcher_errors import PollTimeoutError, WatcherError

if TYPE_CHECKING:
    from collections.abc import Callable

    from tx_watcher.gateway.client import GatewayClient
    from tx_watcher.gateway.models import TxStatus

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 6.0
DEFAULT_MAX_POLLS = 150


async def poll_until_terminal(
    gateway: GatewayClient,
    tx_hash: str,
    *,
    token: str | None = None,
    on_status: Callable[[TxStatus], None] | None = None,
    on_error: Callable[[WatcherError], None] | None = None,
    interval: float = DEFAULT_POLL_INTERVAL,
    max_polls: int = DEFAULT_MAX_POLLS,
) -> TxStatus | None:
    """Poll the gateway status endpoint until the transaction is terminal.

    Args:
        gateway: Connected gateway client.
        tx_hash: Transaction hash to poll.
        token: Bearer token sent with every request.
        on_status: Called with every status received (terminal included).
        on_error: Called for each failed request, and once with a
            PollTimeoutError when *max_polls* is exhausted.
        interval: Seconds between requests.
        max_polls: Number of requests before giving up.

    Returns:
        The terminal TxStatus, or None if polling gave up.
    """
    for attempt in range(max_polls):
        if attempt > 0:
            await asyncio.sleep(interval)

        try:
            status = await gateway.get_status(tx_hash, token=token)
        except WatcherError as exc:
            if on_error is not None:
                on_error(exc)
            continue

        if status is None:
            # Not registered with the gateway yet; expected right after submit.
            logger.debug("TX %s not known to gateway yet (poll %d)", tx_hash[:16], attempt + 1)
            continue

        if on_status is not None:
            on_status(status)
        if status.is_terminal:
            return status

    if on_error is not None:
        on_error(PollTimeoutError(tx_hash, max_polls))
    return None
