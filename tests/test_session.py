import asyncio
import json
import unittest
from collections.abc import AsyncIterator

import httpx

from openclaw_client.client import GatewayClient
from openclaw_client.errors import GatewayAbortedError, GatewayHTTPError
from openclaw_client.session import ChatSession
from openclaw_client.types import GatewayConfig, Message

CONFIG = GatewayConfig(gateway_url="http://gateway.test")


def _chunk(text: str) -> bytes:
    return b"data: " + json.dumps({"choices": [{"delta": {"content": text}}]}).encode() + b"\n"


class ChatSessionTests(unittest.TestCase):
    def setUp(self) -> None:
        self.requests: list[dict] = []

    def _session(self, respond) -> ChatSession:
        def handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(json.loads(request.content))
            return respond()

        return ChatSession(GatewayClient(transport=httpx.MockTransport(handler)), CONFIG)

    def test_send_records_both_sides_and_forwards_history(self) -> None:
        session = self._session(lambda: httpx.Response(200, content=_chunk("Hel") + _chunk("lo") + b"data: [DONE]\n"))
        seen: list[str] = []

        async def run_case() -> tuple[str, str]:
            first = await session.send("  hi  ", on_chunk=seen.append)
            second = await session.send("again")
            return first, second

        first, second = asyncio.run(run_case())
        self.assertEqual(first, "Hello")
        self.assertEqual(second, "Hello")
        self.assertEqual(seen, ["Hel", "lo"])
        self.assertEqual(
            session.history,
            [
                Message(role="user", content="hi"),
                Message(role="assistant", content="Hello"),
                Message(role="user", content="again"),
                Message(role="assistant", content="Hello"),
            ],
        )
        self.assertEqual(
            self.requests[1]["messages"],
            [
                {"role": "user", "content": "hi"},
                {"role": "assistant", "content": "Hello"},
                {"role": "user", "content": "again"},
            ],
        )
        self.assertFalse(session.is_streaming)

    def test_blank_message_is_rejected(self) -> None:
        session = self._session(lambda: httpx.Response(200))
        with self.assertRaises(ValueError):
            asyncio.run(session.send("   "))
        self.assertEqual(self.requests, [])

    def test_stop_keeps_partial_reply(self) -> None:
        async def body() -> AsyncIterator[bytes]:
            yield _chunk("part")
            await asyncio.sleep(30)
            yield _chunk("never")

        session = self._session(lambda: httpx.Response(200, content=body()))

        async def run_case() -> None:
            loop = asyncio.get_running_loop()
            await session.send("hi", on_chunk=lambda _text: loop.call_soon(session.stop))

        with self.assertRaises(GatewayAbortedError):
            asyncio.run(run_case())
        self.assertEqual(session.history[-1], Message(role="assistant", content="part"))
        self.assertFalse(session.is_streaming)

    def test_failed_request_leaves_only_user_message(self) -> None:
        session = self._session(lambda: httpx.Response(500, text="boom"))
        with self.assertRaises(GatewayHTTPError):
            asyncio.run(session.send("hi"))
        self.assertEqual(session.history, [Message(role="user", content="hi")])

    def test_failure_mid_reply_keeps_partial_reply(self) -> None:
        async def body() -> AsyncIterator[bytes]:
            yield _chunk("half")
            raise httpx.ReadError("connection reset")

        session = self._session(lambda: httpx.Response(200, content=body()))
        with self.assertRaises(httpx.ReadError):
            asyncio.run(session.send("hi"))
        self.assertEqual(session.history[-1], Message(role="assistant", content="half"))
        self.assertFalse(session.is_streaming)

    def test_clear_and_transcript(self) -> None:
        session = self._session(lambda: httpx.Response(200, content=_chunk("yo")))
        asyncio.run(session.send("hi"))
        self.assertEqual(session.transcript(), "You: hi\n\nOpenClaw: yo")

        session.clear()
        self.assertEqual(session.history, [])
        self.assertEqual(session.transcript(), "")

    def test_second_send_while_streaming_is_refused(self) -> None:
        release: list[asyncio.Event] = []

        async def body() -> AsyncIterator[bytes]:
            yield _chunk("a")
            await release[0].wait()

        session = self._session(lambda: httpx.Response(200, content=body()))

        async def run_case() -> None:
            release.append(asyncio.Event())
            first = asyncio.create_task(session.send("one"))
            while not session.is_streaming:
                await asyncio.sleep(0)
            try:
                with self.assertRaises(RuntimeError):
                    await session.send("two")
            finally:
                release[0].set()
                await first

        asyncio.run(run_case())
        self.assertEqual([m.content for m in session.history], ["one", "a"])


if __name__ == "__main__":
    unittest.main()
