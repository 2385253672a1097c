"""Shared test fixtures for the tx-watcher test suite."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

import httpx
import pytest

from tests.helpers import GATEWAY_URL
from tx_watcher.config.settings import GatewayConfig, WatcherConfig
from tx_watcher.gateway.client import GatewayClient
from tx_watcher.notifications.notifier import MemoryNotifier
from tx_watcher.watcher.models import NotificationTemplate
from tx_watcher.watcher.registry import TxWatcher

if TYPE_CHECKING:
    from collections.abc import Callable


@pytest.fixture
def template() -> NotificationTemplate:
    return NotificationTemplate(
        success_title="Task submitted!",
        success_description="Transaction confirmed and database updated.",
        error_title="Transaction Failed",
    )


@pytest.fixture
def notifier() -> MemoryNotifier:
    return MemoryNotifier()


@pytest.fixture
def watcher_config() -> WatcherConfig:
    """Watcher timings shrunk so tests finish quickly."""
    return WatcherConfig(
        poll_interval=0.01,
        max_polls=50,
        cleanup_delay=0.05,
        max_age=3600.0,
        sweep_interval=3600.0,
    )


@pytest.fixture
async def make_watcher(notifier, watcher_config):
    """Factory building a TxWatcher wired to an httpx MockTransport handler."""
    created: list[tuple[GatewayClient, TxWatcher]] = []

    async def _make(
        handler: Callable[[httpx.Request], Any],
        *,
        clock: Callable[[], float] | None = None,
        **overrides: Any,
    ) -> TxWatcher:
        gateway = GatewayClient(
            GatewayConfig(url=GATEWAY_URL), transport=httpx.MockTransport(handler)
        )
        await gateway.connect()
        config = watcher_config.model_copy(update=overrides)
        if clock is None:
            watcher = TxWatcher(gateway, notifier, config)
        else:
            watcher = TxWatcher(gateway, notifier, config, clock=clock)
        created.append((gateway, watcher))
        return watcher

    yield _make

    for gateway, watcher in created:
        await watcher.close()
        await gateway.close()


@pytest.fixture
def eventually():
    """Await until *predicate* holds, failing after *timeout* seconds."""

    async def _eventually(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while not predicate():
            if loop.time() > deadline:
                pytest.fail("condition not met before timeout")
            await asyncio.sleep(0.005)

    return _eventually
