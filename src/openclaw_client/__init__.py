"""Async client for the OpenClaw Gateway's OpenAI-compatible chat endpoint."""

from .client import GatewayClient, build_headers, build_url, resolve_model
from .config import GatewaySettings
from .errors import (
    EmptyResponseError,
    GatewayAbortedError,
    GatewayAuthError,
    GatewayHTTPError,
    OpenClawError,
    StreamDecodeError,
)
from .session import ChatSession
from .types import GatewayConfig, Message, StreamEvent

__all__ = [
    "ChatSession",
    "EmptyResponseError",
    "GatewayAbortedError",
    "GatewayAuthError",
    "GatewayClient",
    "GatewayConfig",
    "GatewayHTTPError",
    "GatewaySettings",
    "Message",
    "OpenClawError",
    "StreamDecodeError",
    "StreamEvent",
    "build_headers",
    "build_url",
    "resolve_model",
]
