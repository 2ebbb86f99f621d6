"""Incremental line framing for the gateway's ``text/event-stream`` bodies."""

from __future__ import annotations

import codecs
import json
from typing import Any

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"


class LineDecoder:
    """Turn arbitrary byte reads into complete text lines.

    Bytes are decoded progressively, so a multi-byte character split across two
    reads is kept intact. The text after the last newline is buffered and
    prefixed onto the next read.
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._buffer = ""

    def feed(self, data: bytes) -> list[str]:
        self._buffer += self._decoder.decode(data)
        *lines, self._buffer = self._buffer.split("\n")
        return lines

    def flush(self) -> list[str]:
        """Return whatever is left once the body has ended."""
        tail = self._buffer + self._decoder.decode(b"", final=True)
        self._buffer = ""
        return tail.split("\n") if tail else []


def data_payload(line: str) -> str | None:
    """Return the payload of a ``data: `` line, or None for anything else."""
    line = line.strip()
    if not line.startswith(DATA_PREFIX):
        return None
    return line[len(DATA_PREFIX) :]


def load_event(payload: str) -> dict[str, Any] | None:
    """Parse a ``data:`` payload into a JSON object, None when it isn't one."""
    try:
        event = json.loads(payload)
    except json.JSONDecodeError:
        return None
    return event if isinstance(event, dict) else None
