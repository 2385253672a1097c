"""Gateway — transaction status, registration and event stream endpoints."""

from tx_watcher.gateway.client import GatewayClient
from tx_watcher.gateway.models import TERMINAL_STATES, Completion, StateChange, TxState, TxStatus
from tx_watcher.gateway.tx_types import TX_TYPE_MAP, get_gateway_tx_type

__all__ = [
    "TERMINAL_STATES",
    "TX_TYPE_MAP",
    "Completion",
    "GatewayClient",
    "StateChange",
    "TxState",
    "TxStatus",
    "get_gateway_tx_type",
]
