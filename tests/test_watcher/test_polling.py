"""Tests for the standalone polling fallback."""

from __future__ import annotations

import httpx
import pytest

from tests.helpers import GATEWAY_URL, TX_HASH, GatewayStub, status_body
from tx_watcher.config.settings import GatewayConfig
from tx_watcher.errors import GatewayError, PollTimeoutError
from tx_watcher.gateway.client import GatewayClient
from tx_watcher.gateway.models import TxState
from tx_watcher.watcher.polling import poll_until_terminal


@pytest.fixture
async def gateway_for():
    clients: list[GatewayClient] = []

    async def _make(stub: GatewayStub) -> GatewayClient:
        client = GatewayClient(GatewayConfig(url=GATEWAY_URL), transport=httpx.MockTransport(stub))
        await client.connect()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        await client.close()


async def test_returns_terminal_status(gateway_for):
    stub = GatewayStub(
        statuses=[
            (200, status_body("pending")),
            (200, status_body("confirmed")),
            (200, status_body("updated", confirmed_at="2025-01-01T00:00:00Z")),
        ]
    )
    seen = []
    result = await poll_until_terminal(
        await gateway_for(stub), TX_HASH, on_status=seen.append, interval=0.001
    )

    assert result.state == TxState.UPDATED
    assert result.confirmed_at == "2025-01-01T00:00:00Z"
    assert [s.state for s in seen] == [TxState.PENDING, TxState.CONFIRMED, TxState.UPDATED]
    assert len(stub.status_calls) == 3


async def test_first_poll_is_immediate(gateway_for):
    stub = GatewayStub(statuses=[(200, status_body("expired"))])
    result = await poll_until_terminal(await gateway_for(stub), TX_HASH, interval=60)
    assert result.state == TxState.EXPIRED


async def test_sends_token(gateway_for):
    stub = GatewayStub(statuses=[(200, status_body("updated"))])
    await poll_until_terminal(await gateway_for(stub), TX_HASH, token="jwt", interval=0.001)
    assert stub.status_calls[0].headers["Authorization"] == "Bearer jwt"


async def test_errors_reported_and_retried(gateway_for):
    stub = GatewayStub(
        statuses=[
            (500, {"error": "boom"}),
            (404, {"error": "not found"}),
            (200, status_body("failed", last_error="double spend")),
        ]
    )
    errors = []
    result = await poll_until_terminal(
        await gateway_for(stub), TX_HASH, on_error=errors.append, interval=0.001
    )

    assert result.state == TxState.FAILED
    assert result.last_error == "double spend"
    assert len(errors) == 1
    assert isinstance(errors[0], GatewayError)


async def test_gives_up_after_max_polls(gateway_for):
    stub = GatewayStub()
    errors = []
    result = await poll_until_terminal(
        await gateway_for(stub), TX_HASH, on_error=errors.append, interval=0.001, max_polls=4
    )

    assert result is None
    assert len(stub.status_calls) == 4
    assert isinstance(errors[-1], PollTimeoutError)
    assert errors[-1].attempts == 4
