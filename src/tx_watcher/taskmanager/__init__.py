"""Task manager — periodic background jobs.

Provides ``CronJob`` for recurring work such as the staleness sweep that
evicts watched transactions past their maximum validity window.
"""

from __future__ import annotations

from tx_watcher.taskmanager.manager import CronJob
from tx_watcher.taskmanager.tasks import SWEEP_STALE_TRANSACTIONS, task_sweep_stale_transactions

__all__ = ["SWEEP_STALE_TRANSACTIONS", "CronJob", "task_sweep_stale_transactions"]
