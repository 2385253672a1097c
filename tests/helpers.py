"""Helpers shared by the watcher tests — event encoding and stream bodies."""

from __future__ import annotations

import asyncio
import json
from typing import TYPE_CHECKING, Any

import httpx

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

TX_HASH = "ab" * 32
GATEWAY_URL = "https://gateway.test"


def sse(event: str, data: Any) -> bytes:
    """Encode one event-stream record."""
    body = data if isinstance(data, str) else json.dumps(data)
    return f"event: {event}\ndata: {body}\n\n".encode()


def status_body(state: str, **extra: Any) -> dict[str, Any]:
    """A gateway status object as returned by the poll endpoint."""
    return {
        "tx_hash": TX_HASH,
        "tx_type": "task_submit",
        "state": state,
        "retry_count": 0,
        **extra,
    }


class StreamFeed:
    """Event-stream body whose chunks are pushed by the test.

    Each call to ``body()`` yields the chunks pushed afterwards until
    ``close()`` is called.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[bytes | None] = asyncio.Queue()
        self.opened = 0

    def push(self, chunk: bytes) -> None:
        self._queue.put_nowait(chunk)

    def close(self) -> None:
        self._queue.put_nowait(None)

    async def body(self) -> AsyncIterator[bytes]:
        self.opened += 1
        while True:
            chunk = await self._queue.get()
            if chunk is None:
                return
            yield chunk


class FakeClock:
    """Manually advanced replacement for ``time.monotonic``."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class GatewayStub:
    """``httpx.MockTransport`` handler routing stream, status and register calls.

    Args:
        feed: Body source for stream requests.
        stream_status: HTTP status for stream requests; None raises a
            connection error instead.
        statuses: ``(status_code, body)`` pairs answered to status polls in
            order; the last pair repeats. Defaults to a pending status.
    """

    def __init__(
        self,
        feed: StreamFeed | None = None,
        *,
        stream_status: int | None = 200,
        statuses: list[tuple[int, Any]] | None = None,
    ) -> None:
        self.feed = feed or StreamFeed()
        self.stream_status = stream_status
        self.statuses = list(statuses or [(200, status_body("pending"))])
        self.requests: list[httpx.Request] = []

    def _matching(self, marker: str) -> list[httpx.Request]:
        return [r for r in self.requests if marker in r.url.path]

    @property
    def stream_calls(self) -> list[httpx.Request]:
        return self._matching("/tx/stream/")

    @property
    def status_calls(self) -> list[httpx.Request]:
        return self._matching("/tx/status/")

    @property
    def register_calls(self) -> list[httpx.Request]:
        return self._matching("/tx/register")

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if "/tx/stream/" in path:
            if self.stream_status is None:
                raise httpx.ConnectError("connection refused", request=request)
            if self.stream_status != 200:
                return httpx.Response(self.stream_status, text="unavailable")
            return httpx.Response(
                200,
                headers={"content-type": "text/event-stream"},
                content=self.feed.body(),
            )
        if "/tx/status/" in path:
            code, body = self.statuses.pop(0) if len(self.statuses) > 1 else self.statuses[0]
            return httpx.Response(code, json=body)
        if path.endswith("/tx/register"):
            return httpx.Response(201, json={})
        return httpx.Response(404, json={"error": "not found"})
