"""tx-watcher — track blockchain transaction confirmations across a session."""

from __future__ import annotations

__version__ = "0.1.0"
