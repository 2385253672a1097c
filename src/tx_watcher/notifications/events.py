"""Event types for user-facing notifications.

- ``PENDING`` — a persistent "waiting" indicator keyed by transaction hash
- ``SUCCESS`` / ``ERROR`` — terminal outcome notifications
- ``DISMISS`` — removes the indicator with the given key
"""

from __future__ import annotations

import enum
from dataclasses import asdict, dataclass
from typing import Any


class NotificationKind(enum.StrEnum):
    """What a notification event asks the UI to do."""

    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"
    DISMISS = "dismiss"


@dataclass(frozen=True)
class NotificationEvent:
    """A single notification emitted towards the user."""

    kind: NotificationKind
    title: str = ""
    description: str = ""
    key: str | None = None

    @property
    def is_terminal(self) -> bool:
        """Success or error outcome (as opposed to indicator bookkeeping)."""
        return self.kind in (NotificationKind.SUCCESS, NotificationKind.ERROR)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dict."""
        return asdict(self)
