"""Incremental ``text/event-stream`` parser.

Consumes arbitrary-sized byte chunks and yields complete events. A record
ends at a blank line (``\\n\\n``); anything after the last blank line stays
buffered until more bytes arrive. Within a record:

- ``event: <name>`` sets the event name (default ``message``)
- ``data: <text>`` appends a data line (multiple lines join with ``\\n``)
- ``id: <value>`` sets the event id
- lines starting with ``:`` are comments (heartbeats)

Records without any ``data`` line produce no event.
"""

from __future__ import annotations

import codecs
from dataclasses import dataclass

DEFAULT_EVENT = "message"


@dataclass(frozen=True)
class SSEEvent:
    """One dispatched server-sent event."""

    event: str = DEFAULT_EVENT
    data: str = ""
    id: str | None = None


class SSEParser:
    """Stateful parser turning byte chunks into :class:`SSEEvent` records.

    Usage::

        parser = SSEParser()
        async for chunk in body:
            for event in parser.feed(chunk):
                handle(event)
        if parser.has_pending:
            ...  # stream ended mid-record
    """

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""

    @property
    def has_pending(self) -> bool:
        """Whether an incomplete record is buffered."""
        return bool(self._buffer.strip())

    def feed(self, chunk: bytes | str) -> list[SSEEvent]:
        """Add a chunk and return every record it completes."""
        text = self._decoder.decode(chunk) if isinstance(chunk, bytes) else chunk
        # CRLF split across chunks is rejoined here because the buffer is rescanned.
        self._buffer = (self._buffer + text).replace("\r\n", "\n")

        events: list[SSEEvent] = []
        while "\n\n" in self._buffer:
            block, self._buffer = self._buffer.split("\n\n", 1)
            event = _parse_block(block)
            if event is not None:
                events.append(event)
        return events

    def reset(self) -> None:
        """Drop any buffered partial record."""
        self._decoder.reset()
        self._buffer = ""


def _parse_block(block: str) -> SSEEvent | None:
    name = DEFAULT_EVENT
    event_id: str | None = None
    data_lines: list[str] = []

    for line in block.split("\n"):
        if not line or line.startswith(":"):
            continue
        field, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]
        if field == "event":
            name = value.strip() or DEFAULT_EVENT
        elif field == "data":
            data_lines.append(value)
        elif field == "id":
            event_id = value

    if not data_lines:
        return None
    return SSEEvent(event=name, data="\n".join(data_lines).strip(), id=event_id)


def parse_events(text: str) -> list[SSEEvent]:
    """Parse a complete event-stream document in one go."""
    parser = SSEParser()
    events = parser.feed(text)
    if parser.has_pending:
        events.extend(parser.feed("\n\n"))
    return events
