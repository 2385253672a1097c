"""Gateway transport errors — status polls, registration, event stream."""

from __future__ import annotations

from tx_watcher.errors.watcher_errors import WatcherError


class GatewayError(WatcherError):
    """Error from the transaction gateway REST API."""

    def __init__(self, message: str, *, status_code: int = 502) -> None:
        super().__init__(message, status_code=status_code, code="gateway-error")


class StreamError(WatcherError):
    """The event stream could not be opened or was unusable."""

    def __init__(self, message: str, *, status_code: int = 502) -> None:
        super().__init__(message, status_code=status_code, code="stream-error")
