"""Conversation state around streamed gateway replies."""

from __future__ import annotations

import asyncio
from collections.abc import Callable

from openclaw_client.client import GatewayClient
from openclaw_client.types import GatewayConfig, Message

_SPEAKERS = {"user": "You", "assistant": "OpenClaw"}


class ChatSession:
    """Chronological user/assistant history fed back to the gateway on every turn.

    Only one reply may be in flight at a time. A reply that is stopped or fails
    part-way keeps whatever text had already arrived.
    """

    def __init__(self, client: GatewayClient, config: GatewayConfig) -> None:
        self._client = client
        self._config = config
        self._history: list[Message] = []
        self._cancel: asyncio.Event | None = None

    @property
    def history(self) -> list[Message]:
        return list(self._history)

    @property
    def is_streaming(self) -> bool:
        return self._cancel is not None

    async def send(self, text: str, on_chunk: Callable[[str], None] | None = None) -> str:
        """Send ``text`` and return the full reply once the stream completes."""
        text = text.strip()
        if not text:
            raise ValueError("message must not be blank")
        if self._cancel is not None:
            raise RuntimeError("a reply is already streaming")

        self._history.append(Message(role="user", content=text))
        messages = list(self._history)
        cancel = self._cancel = asyncio.Event()
        parts: list[str] = []

        def _collect(chunk: str) -> None:
            parts.append(chunk)
            if on_chunk is not None:
                on_chunk(chunk)

        try:
            await self._client.chat_stream(messages, _collect, lambda: None, self._config, cancel)
        except BaseException:
            self._commit(parts, messages)
            raise
        finally:
            if self._cancel is cancel:
                self._cancel = None

        reply = "".join(parts)
        self._history.append(Message(role="assistant", content=reply))
        return reply

    def stop(self) -> None:
        """Stop the reply in flight; ``send`` then raises GatewayAbortedError."""
        if self._cancel is not None:
            self._cancel.set()

    def clear(self) -> None:
        self.stop()
        self._history.clear()

    def transcript(self) -> str:
        return "\n\n".join(f"{_SPEAKERS[m.role]}: {m.content}" for m in self._history if m.role in _SPEAKERS)

    def _commit(self, parts: list[str], sent: list[Message]) -> None:
        # A clear() during the reply leaves nothing to attach the partial text to.
        if parts and self._history == sent:
            self._history.append(Message(role="assistant", content="".join(parts)))
