"""Gateway data models — TxState, TxStatus and stream event payloads.

Data classes representing the gateway's transaction status object and the
payloads carried by the ``state``, ``state_change`` and ``complete`` stream
events.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace
from typing import Any

from tx_watcher.errors.watcher_errors import MalformedEventError

# ---------------------------------------------------------------------------
# Transaction state enum
# ---------------------------------------------------------------------------


class TxState(enum.StrEnum):
    """Gateway transaction lifecycle states.

    Lifecycle: PENDING → CONFIRMED → UPDATED
                       ↘ FAILED / EXPIRED

    ``CONFIRMED`` is not terminal: the transaction is on-chain but the
    gateway has not finished its database update yet.
    """

    PENDING = "pending"
    CONFIRMED = "confirmed"
    UPDATED = "updated"
    FAILED = "failed"
    EXPIRED = "expired"

    @classmethod
    def parse(cls, value: Any) -> TxState:
        """Parse a state string, raising MalformedEventError for unknown values."""
        try:
            return cls(value)
        except ValueError:
            raise MalformedEventError(f"unknown transaction state: {value!r}") from None

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES

    @property
    def is_success(self) -> bool:
        return self is TxState.UPDATED

    @property
    def is_failure(self) -> bool:
        return self in (TxState.FAILED, TxState.EXPIRED)


TERMINAL_STATES: frozenset[TxState] = frozenset(
    {TxState.UPDATED, TxState.FAILED, TxState.EXPIRED}
)


def _require_dict(data: Any) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise MalformedEventError(f"expected a JSON object, got {type(data).__name__}")
    return data


# ---------------------------------------------------------------------------
# TxStatus — gateway status object
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TxStatus:
    """Snapshot of a transaction's lifecycle as reported by the gateway.

    Attributes:
        tx_hash: 64-hex transaction hash.
        tx_type: Gateway transaction type tag.
        state: Current lifecycle state.
        retry_count: Number of gateway-side processing retries.
        confirmed_at: ISO timestamp of on-chain confirmation, if any.
        last_error: Last processing error reported by the gateway, if any.
    """

    tx_hash: str
    state: TxState
    tx_type: str = ""
    retry_count: int = 0
    confirmed_at: str | None = None
    last_error: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.state.is_terminal

    def with_state(self, state: TxState) -> TxStatus:
        """Return a copy with only the state replaced."""
        return replace(self, state=state)

    @classmethod
    def from_dict(cls, data: Any, *, tx_hash: str = "") -> TxStatus:
        """Create TxStatus from a ``state`` event or status poll response.

        Raises:
            MalformedEventError: If *data* is not an object or has no valid state.
        """
        data = _require_dict(data)
        return cls(
            tx_hash=data.get("tx_hash") or tx_hash,
            state=TxState.parse(data.get("state")),
            tx_type=data.get("tx_type") or "",
            retry_count=int(data.get("retry_count") or 0),
            confirmed_at=data.get("confirmed_at"),
            last_error=data.get("last_error"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a dict matching the gateway JSON format."""
        return {
            "tx_hash": self.tx_hash,
            "tx_type": self.tx_type,
            "state": self.state.value,
            "retry_count": self.retry_count,
            "confirmed_at": self.confirmed_at,
            "last_error": self.last_error,
        }


# ---------------------------------------------------------------------------
# Stream event payloads
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StateChange:
    """Payload of a ``state_change`` event."""

    new_state: TxState
    previous_state: TxState | None = None

    @classmethod
    def from_dict(cls, data: Any) -> StateChange:
        data = _require_dict(data)
        new_state = TxState.parse(data.get("new_state"))
        # previous_state is informational only; unknown values are dropped.
        try:
            previous_state = TxState(data.get("previous_state"))
        except ValueError:
            previous_state = None
        return cls(new_state=new_state, previous_state=previous_state)


@dataclass(frozen=True)
class Completion:
    """Payload of a ``complete`` event."""

    final_state: TxState
    tx_type: str = ""
    confirmed_at: str | None = None
    last_error: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> Completion:
        data = _require_dict(data)
        return cls(
            final_state=TxState.parse(data.get("final_state")),
            tx_type=data.get("tx_type") or "",
            confirmed_at=data.get("confirmed_at"),
            last_error=data.get("last_error"),
        )

    def to_status(self, tx_hash: str) -> TxStatus:
        """Convert into the TxStatus recorded by the watcher."""
        return TxStatus(
            tx_hash=tx_hash,
            state=self.final_state,
            tx_type=self.tx_type,
            confirmed_at=self.confirmed_at,
            last_error=self.last_error,
        )
