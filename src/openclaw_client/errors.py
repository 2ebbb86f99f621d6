"""Package specific exception hierarchy.

Transport failures (connection refused, DNS, timeouts) are not wrapped: they
surface as the ``httpx`` exceptions that caused them.
"""

_AUTH_REQUIRED = (
    "OpenClaw Gateway returned 405 (Method Not Allowed). This usually means "
    "authentication is required. Please set your Auth Token."
)
_AUTH_INVALID = (
    "OpenClaw Gateway returned 405 (Method Not Allowed). Your auth token may "
    "be invalid. Please check your Auth Token."
)


class OpenClawError(Exception):
    """Base exception for openclaw_client package."""


class GatewayHTTPError(OpenClawError):
    """Raised when the gateway answers with a non-success status."""

    def __init__(self, status_code: int, body: str, message: str | None = None) -> None:
        super().__init__(message or f"OpenClaw Gateway error ({status_code}): {body}")
        self.status_code = status_code
        self.body = body


class GatewayAuthError(GatewayHTTPError):
    """405 from the gateway, which it uses to signal an authentication problem."""

    def __init__(self, body: str, *, has_token: bool) -> None:
        super().__init__(405, body, _AUTH_INVALID if has_token else _AUTH_REQUIRED)
        self.has_token = has_token


class EmptyResponseError(OpenClawError):
    """Raised when a successful response carries no usable content."""

    def __init__(self) -> None:
        super().__init__("No response content from OpenClaw")


class StreamDecodeError(OpenClawError):
    """Raised in strict mode when a streamed ``data:`` payload is not valid JSON."""

    def __init__(self, payload: str) -> None:
        super().__init__(f"Malformed stream chunk: {payload[:200]}")
        self.payload = payload


class GatewayAbortedError(OpenClawError):
    """Raised when a streamed request is cancelled by its caller."""

    def __init__(self) -> None:
        super().__init__("Request aborted")
