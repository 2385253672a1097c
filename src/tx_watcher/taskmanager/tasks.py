"""Background task definitions — cron job handlers."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tx_watcher.watcher.registry import TxWatcher

logger = logging.getLogger(__name__)

SWEEP_STALE_TRANSACTIONS = "sweep_stale_transactions"


async def task_sweep_stale_transactions(watcher: TxWatcher) -> None:
    """Evict watched transactions older than the configured max age."""
    evicted = watcher.cleanup()
    if evicted:
        logger.info("Evicted %d stale watched transactions", evicted)
