"""Entry point for `python -m openclaw_client`."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import signal
import sys

import httpx

from .client import GatewayClient
from .config import GatewaySettings
from .errors import GatewayAbortedError, OpenClawError
from .session import ChatSession
from .types import Message


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="openclaw", description="Chat with an OpenClaw Gateway.")
    parser.add_argument("prompt", nargs="*", help="message to send; omit for an interactive session")
    parser.add_argument("--check", action="store_true", help="only report whether the gateway is reachable")
    parser.add_argument("--no-stream", action="store_true", help="wait for the whole reply (single prompt only)")
    return parser.parse_args(argv)


def _echo(chunk: str) -> None:
    sys.stdout.write(chunk)
    sys.stdout.flush()


async def _reply(session: ChatSession, text: str) -> None:
    loop = asyncio.get_running_loop()
    # Ctrl-C stops the reply instead of the program where the loop supports it.
    with contextlib.suppress(NotImplementedError):
        loop.add_signal_handler(signal.SIGINT, session.stop)
    try:
        await session.send(text, on_chunk=_echo)
    except GatewayAbortedError:
        sys.stdout.write(" [stopped]")
    finally:
        with contextlib.suppress(NotImplementedError):
            loop.remove_signal_handler(signal.SIGINT)
        sys.stdout.write("\n")


async def _run(args: argparse.Namespace, settings: GatewaySettings) -> int:
    config = settings.to_config()
    client = GatewayClient(timeout_s=settings.timeout_seconds, strict=settings.strict_stream)

    if args.check:
        ok = await client.check_health(config)
        print("reachable" if ok else "unreachable")
        return 0 if ok else 1

    prompt = " ".join(args.prompt).strip()
    if prompt and args.no_stream:
        print(await client.chat([Message(role="user", content=prompt)], config))
        return 0

    session = ChatSession(client, config)
    if prompt:
        await _reply(session, prompt)
        return 0

    while True:
        try:
            text = await asyncio.to_thread(input, "> ")
        except EOFError:
            return 0
        if not text.strip():
            continue
        try:
            await _reply(session, text)
        except (OpenClawError, httpx.HTTPError) as exc:
            print(f"error: {exc}", file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    settings = GatewaySettings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    try:
        return asyncio.run(_run(args, settings))
    except (OpenClawError, httpx.HTTPError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
