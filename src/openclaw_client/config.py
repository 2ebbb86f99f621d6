"""Environment-backed gateway settings."""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict

from openclaw_client.types import GatewayConfig


class GatewaySettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="OPENCLAW_", extra="ignore")

    gateway_url: str = "http://127.0.0.1:18789"
    auth_token: str | None = None
    agent_id: str | None = None
    model: str | None = None
    timeout_seconds: float = 60.0
    # Raise on malformed stream chunks instead of skipping them.
    strict_stream: bool = False
    log_level: str = "info"

    def to_config(self) -> GatewayConfig:
        """Snapshot the connection fields as an immutable GatewayConfig."""
        return GatewayConfig(
            gateway_url=self.gateway_url,
            auth_token=self.auth_token,
            agent_id=self.agent_id,
            model=self.model,
        )
