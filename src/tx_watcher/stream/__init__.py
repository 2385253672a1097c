"""Server-sent event stream parsing."""

from tx_watcher.stream.parser import SSEEvent, SSEParser, parse_events

__all__ = ["SSEEvent", "SSEParser", "parse_events"]
