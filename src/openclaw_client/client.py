"""Async client for the OpenClaw Gateway chat-completions endpoint."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator, Awaitable, Callable, Sequence
from typing import Any, TypeVar

import httpx
from pydantic import ValidationError

from openclaw_client.errors import (
    EmptyResponseError,
    GatewayAbortedError,
    GatewayAuthError,
    GatewayHTTPError,
    StreamDecodeError,
)
from openclaw_client.sse import DONE_SENTINEL, LineDecoder, data_payload, load_event
from openclaw_client.types import ChatCompletion, ChatCompletionChunk, GatewayConfig, Message, StreamEvent

CHAT_PATH = "/v1/chat/completions"
AGENT_HEADER = "x-openclaw-agent-id"
DEFAULT_MODEL = "openclaw"
_HEALTH_TIMEOUT_S = 5.0

T = TypeVar("T")


def build_url(config: GatewayConfig) -> str:
    """Return the chat-completions URL for the configured gateway."""
    return config.gateway_url.rstrip("/") + CHAT_PATH


def build_headers(config: GatewayConfig) -> dict[str, str]:
    """Return request headers; a pure function of ``config``."""
    headers = {"Content-Type": "application/json"}
    if config.auth_token:
        headers["Authorization"] = f"Bearer {config.auth_token}"
    if config.agent_id:
        headers[AGENT_HEADER] = config.agent_id
    return headers


def resolve_model(config: GatewayConfig) -> str:
    """Explicit model wins, then ``openclaw:<agent>``, then the bare default."""
    if config.model:
        return config.model
    if config.agent_id:
        return f"{DEFAULT_MODEL}:{config.agent_id}"
    return DEFAULT_MODEL


def build_payload(
    messages: Sequence[Message],
    config: GatewayConfig,
    *,
    stream: bool,
    max_tokens: int | None = None,
) -> dict[str, Any]:
    """Build the JSON request body, forwarding messages in order."""
    payload: dict[str, Any] = {
        "model": resolve_model(config),
        "messages": [{"role": m.role, "content": m.content} for m in messages],
        "stream": stream,
    }
    if max_tokens is not None:
        payload["max_tokens"] = max_tokens
    return payload


class GatewayClient:
    """Talks to one OpenClaw Gateway per call, configured explicitly each time.

    The client keeps no per-request state: every call opens its own
    ``httpx.AsyncClient`` and closes it before returning, so one instance can
    serve concurrent calls. ``transport`` lets tests swap in
    ``httpx.MockTransport``. With ``strict=True`` a malformed streamed chunk
    raises :class:`StreamDecodeError` instead of being skipped.
    """

    _logger = logging.getLogger(__name__)

    def __init__(
        self,
        *,
        timeout_s: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
        strict: bool = False,
    ) -> None:
        self._timeout_s = timeout_s
        self._transport = transport
        self._strict = strict

    def _http(self, timeout_s: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=timeout_s, transport=self._transport)

    async def chat(self, messages: Sequence[Message], config: GatewayConfig) -> str:
        """Send a non-streaming completion and return the assistant's text."""
        payload = build_payload(messages, config, stream=False)
        url = build_url(config)
        self._logger.debug("POST %s (stream=False, model=%s)", url, payload["model"])

        async with self._http(self._timeout_s) as http:
            response = await http.post(url, headers=build_headers(config), json=payload)
        self._raise_for_status(response, config)

        try:
            completion = ChatCompletion.model_validate_json(response.content)
        except ValidationError as exc:
            raise EmptyResponseError() from exc

        content = completion.first_content()
        if not content:
            raise EmptyResponseError()
        return content

    def stream(
        self,
        messages: Sequence[Message],
        config: GatewayConfig,
        cancel: asyncio.Event | None = None,
    ) -> AsyncIterator[StreamEvent]:
        """Return an async iterator of text deltas ending in a single ``done`` event.

        Setting ``cancel`` stops the in-flight read and makes the iterator raise
        :class:`GatewayAbortedError`.
        """

        async def _gen() -> AsyncIterator[StreamEvent]:
            payload = build_payload(messages, config, stream=True)
            url = build_url(config)
            self._logger.debug("POST %s (stream=True, model=%s)", url, payload["model"])

            async with self._http(self._timeout_s) as http:
                request = http.build_request("POST", url, headers=build_headers(config), json=payload)
                response = await _until_cancelled(http.send(request, stream=True), cancel)
                try:
                    _check_cancel(cancel)
                    if not response.is_success:
                        await response.aread()
                        self._raise_for_status(response, config)

                    decoder = LineDecoder()
                    chunks = response.aiter_bytes()
                    while (data := await _until_cancelled(_read(chunks), cancel)) is not None:
                        for line in decoder.feed(data):
                            event = self._parse_line(line)
                            if event is None:
                                continue
                            _check_cancel(cancel)
                            yield event
                            if event.type == "done":
                                return

                    for line in decoder.flush():
                        event = self._parse_line(line)
                        if event is None:
                            continue
                        _check_cancel(cancel)
                        yield event
                        if event.type == "done":
                            return

                    # End of body is completion too.
                    _check_cancel(cancel)
                    yield StreamEvent(type="done")
                finally:
                    await response.aclose()

        return _gen()

    async def chat_stream(
        self,
        messages: Sequence[Message],
        on_chunk: Callable[[str], None],
        on_done: Callable[[], None],
        config: GatewayConfig,
        cancel: asyncio.Event | None = None,
    ) -> None:
        """Callback flavour of :meth:`stream`."""
        async with contextlib.aclosing(self.stream(messages, config, cancel)) as events:
            async for event in events:
                if event.type == "text_delta" and event.text:
                    on_chunk(event.text)
                elif event.type == "done":
                    on_done()
                    return

    async def check_health(self, config: GatewayConfig) -> bool:
        """Return True when the gateway answers a one-token request successfully."""
        payload = {
            "model": resolve_model(config),
            "messages": [{"role": "user", "content": "ping"}],
            "max_tokens": 1,
        }
        try:
            async with self._http(_HEALTH_TIMEOUT_S) as http:
                # Overall deadline; httpx timeouts only bound each phase.
                response = await asyncio.wait_for(
                    http.post(build_url(config), headers=build_headers(config), json=payload),
                    _HEALTH_TIMEOUT_S,
                )
        except Exception as exc:  # any failure means unreachable
            self._logger.warning("OpenClaw Gateway unreachable at %s: %s", config.gateway_url, exc)
            return False
        if not response.is_success:
            self._logger.warning("OpenClaw Gateway health check returned %s", response.status_code)
        return response.is_success

    def _parse_line(self, line: str) -> StreamEvent | None:
        payload = data_payload(line)
        if payload is None:
            return None
        if payload == DONE_SENTINEL:
            return StreamEvent(type="done")

        event = load_event(payload)
        chunk = None
        if event is not None:
            try:
                chunk = ChatCompletionChunk.model_validate(event)
            except ValidationError:
                chunk = None
        if chunk is None:
            if self._strict:
                raise StreamDecodeError(payload)
            self._logger.debug("Skipping malformed stream chunk: %s", payload)
            return None

        text = chunk.delta_text()
        if not text:
            return None
        return StreamEvent(type="text_delta", text=text, raw=event)

    @staticmethod
    def _raise_for_status(response: httpx.Response, config: GatewayConfig) -> None:
        if response.is_success:
            return
        if response.status_code == 405:
            raise GatewayAuthError(response.text, has_token=bool(config.auth_token))
        raise GatewayHTTPError(response.status_code, response.text)


async def _read(chunks: AsyncIterator[bytes]) -> bytes | None:
    return await anext(chunks, None)


def _check_cancel(cancel: asyncio.Event | None) -> None:
    if cancel is not None and cancel.is_set():
        raise GatewayAbortedError()


async def _until_cancelled(aw: Awaitable[T], cancel: asyncio.Event | None) -> T:
    """Await ``aw`` unless ``cancel`` fires first, in which case abort it."""
    if cancel is None:
        return await aw
    task = asyncio.ensure_future(aw)
    if cancel.is_set():
        task.cancel()
        await asyncio.wait({task})
        raise GatewayAbortedError()

    waiter = asyncio.ensure_future(cancel.wait())
    try:
        await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        waiter.cancel()
        if not task.done():
            task.cancel()
            await asyncio.wait({task})
    if task.cancelled():
        raise GatewayAbortedError()
    return task.result()
