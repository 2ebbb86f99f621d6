"""Request/response models for the OpenClaw Gateway chat-completions API."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

Role = Literal["system", "user", "assistant"]


class Message(BaseModel):
    """Single chat message."""

    role: Role
    content: str


class GatewayConfig(BaseModel):
    """Connection settings passed explicitly into every gateway call."""

    model_config = ConfigDict(frozen=True)

    gateway_url: str
    auth_token: str | None = None
    agent_id: str | None = None
    model: str | None = None

    @field_validator("auth_token", "agent_id", "model")
    @classmethod
    def _blank_is_absent(cls, value: str | None) -> str | None:
        # Preference stores hand back "" for untouched optional fields.
        if value is None or not value.strip():
            return None
        return value


class _Envelope(BaseModel):
    # Pass-through fields are accepted but never interpreted.
    model_config = ConfigDict(extra="ignore")

    id: Any = None
    object: Any = None
    created: Any = None
    model: Any = None


def _as_mappings(value: Any) -> Any:
    # Only choices[0] is read; a null or odd entry elsewhere must not void it.
    if isinstance(value, list):
        return [item if isinstance(item, dict) else {} for item in value]
    return value


class ChoiceMessage(BaseModel):
    role: Any = None
    content: str | None = None


class Choice(BaseModel):
    index: Any = None
    message: ChoiceMessage | None = None
    finish_reason: Any = None


class ChatCompletion(_Envelope):
    """Non-streaming response envelope."""

    choices: list[Choice] = Field(default_factory=list)
    usage: Any = None

    normalize_choices = field_validator("choices", mode="before")(_as_mappings)

    def first_content(self) -> str | None:
        if not self.choices or self.choices[0].message is None:
            return None
        return self.choices[0].message.content


class Delta(BaseModel):
    role: Any = None
    content: str | None = None


class ChunkChoice(BaseModel):
    index: Any = None
    delta: Delta | None = None
    finish_reason: Any = None


class ChatCompletionChunk(_Envelope):
    """One streamed protocol event."""

    choices: list[ChunkChoice] = Field(default_factory=list)

    normalize_choices = field_validator("choices", mode="before")(_as_mappings)

    def delta_text(self) -> str:
        """Return ``choices[0].delta.content`` or an empty string."""
        if not self.choices or self.choices[0].delta is None:
            return ""
        return self.choices[0].delta.content or ""


class StreamEvent(BaseModel):
    """Streaming events emitted by the gateway client."""

    type: Literal["text_delta", "done"]
    text: str | None = None
    raw: dict[str, Any] | None = None
