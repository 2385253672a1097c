"""Command-line entry point — watch a transaction until it completes.

    # Watch a transaction and print notifications as they arrive
    tx-watcher watch <tx_hash> [tx_type]

The gateway is configured through ``TXWATCH_*`` environment variables (or
a YAML file named by ``TXWATCH_CONFIG_PATH``); the bearer token is read
from ``TXWATCH_TOKEN``.
"""

from __future__ import annotations

import asyncio
import logging
import os
import sys

from tx_watcher.config.settings import AppConfig
from tx_watcher.gateway.client import GatewayClient
from tx_watcher.notifications.events import NotificationKind
from tx_watcher.notifications.notifier import EventNotifier
from tx_watcher.notifications.service import NotificationService
from tx_watcher.watcher.models import NotificationTemplate
from tx_watcher.watcher.registry import TxWatcher

logger = logging.getLogger(__name__)

_USAGE = "usage: tx-watcher watch <tx_hash> [tx_type]"


def _configure_logging(config: AppConfig) -> None:
    logging.basicConfig(
        level=config.effective_log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


async def watch(config: AppConfig, tx_hash: str, tx_type: str, token: str | None) -> int:
    """Watch one transaction; return 0 on success and 1 on failure."""
    service = NotificationService()
    queue = service.subscribe("console")
    gateway = GatewayClient(config.gateway)
    await gateway.connect()
    try:
        async with TxWatcher(gateway, EventNotifier(service), config.watcher) as watcher:
            watcher.update_auth_token(token)
            watcher.register(
                tx_hash,
                tx_type,
                NotificationTemplate(
                    success_title="Transaction complete",
                    success_description="Transaction confirmed and database updated.",
                    error_title="Transaction Failed",
                ),
            )
            while True:
                try:
                    event = await asyncio.wait_for(queue.get(), config.watcher.max_age)
                except TimeoutError:
                    logger.error(
                        "No outcome for TX %s after %.0fs", tx_hash, config.watcher.max_age
                    )
                    return 1
                if event.kind == NotificationKind.DISMISS:
                    continue
                print(f"[{event.kind}] {event.title} {event.description}".rstrip())
                if event.is_terminal:
                    return 0 if event.kind == NotificationKind.SUCCESS else 1
    finally:
        service.unsubscribe("console")
        await gateway.close()


def main(argv: list[str] | None = None) -> int:
    """Run the CLI and return a process exit code."""
    args = sys.argv[1:] if argv is None else argv
    if len(args) < 2 or args[0] != "watch":
        print(_USAGE, file=sys.stderr)
        return 2

    config = AppConfig()
    _configure_logging(config)
    tx_hash = args[1]
    tx_type = args[2] if len(args) > 2 else "unknown"
    try:
        return asyncio.run(watch(config, tx_hash, tx_type, os.getenv("TXWATCH_TOKEN")))
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
