"""Error types raised inside the watcher and its gateway client."""

from __future__ import annotations

from tx_watcher.errors.gateway_errors import GatewayError, StreamError
from tx_watcher.errors.watcher_errors import MalformedEventError, PollTimeoutError, WatcherError

__all__ = [
    "GatewayError",
    "MalformedEventError",
    "PollTimeoutError",
    "StreamError",
    "WatcherError",
]
