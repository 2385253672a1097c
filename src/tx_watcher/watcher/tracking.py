"""Post-submission flow — hand a freshly submitted transaction to the watcher."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from tx_watcher.errors.watcher_errors import WatcherError
from tx_watcher.gateway.tx_types import get_gateway_tx_type
from tx_watcher.watcher.models import NotificationTemplate

if TYPE_CHECKING:
    from tx_watcher.gateway.client import GatewayClient
    from tx_watcher.watcher.registry import TxWatcher

logger = logging.getLogger(__name__)

SUBMITTED_DB_MESSAGE = "Transaction submitted. Waiting for confirmation..."
SUBMITTED_CHAIN_MESSAGE = "Transaction submitted to blockchain!"


async def track_submitted_transaction(
    gateway: GatewayClient,
    watcher: TxWatcher,
    tx_hash: str,
    transaction_type: str,
    success_info: str,
    *,
    requires_db_update: bool = True,
    metadata: dict[str, str] | None = None,
) -> NotificationTemplate:
    """Register a submitted transaction with the gateway and the watcher.

    Gateway registration failure is logged and otherwise ignored: the
    gateway may still pick the transaction up on its own. A pending
    indicator keyed by *tx_hash* is shown until the watcher dismisses it.

    Returns:
        The notification template the watcher will use.
    """
    tx_type = get_gateway_tx_type(transaction_type)
    try:
        await gateway.register_transaction(
            tx_hash, tx_type, token=watcher.auth_token, metadata=metadata
        )
        logger.info("[%s] Transaction registered with gateway", transaction_type)
    except WatcherError as exc:
        logger.warning("[%s] Failed to register TX: %s", transaction_type, exc)

    template = NotificationTemplate(
        success_title=success_info,
        success_description="Transaction confirmed and database updated.",
        error_title="Transaction Failed",
    )
    watcher.register(tx_hash, tx_type, template)
    watcher.notifier.pending(
        tx_hash,
        success_info,
        SUBMITTED_DB_MESSAGE if requires_db_update else SUBMITTED_CHAIN_MESSAGE,
    )
    return template
