"""WatcherError — base exception class for all tx-watcher errors."""

from __future__ import annotations


class WatcherError(Exception):
    """Base error for all transaction watcher operations.

    Attributes:
        message: Human-readable error description.
        status_code: HTTP status code associated with the failure (0 if none).
        code: Machine-readable error code string.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int = 0,
        code: str = "watcher-error",
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code


class MalformedEventError(WatcherError):
    """A stream event or status payload could not be decoded."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="malformed-event")


class PollTimeoutError(WatcherError):
    """Polling gave up before the transaction reached a terminal state."""

    def __init__(self, tx_hash: str, attempts: int) -> None:
        super().__init__(
            f"TX polling timed out after {attempts} attempts for {tx_hash}",
            code="poll-timeout",
        )
        self.tx_hash = tx_hash
        self.attempts = attempts
