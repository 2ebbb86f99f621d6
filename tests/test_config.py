import os
import unittest
from unittest import mock

from openclaw_client.config import GatewaySettings
from openclaw_client.types import GatewayConfig


class GatewaySettingsTests(unittest.TestCase):
    def test_defaults(self) -> None:
        with mock.patch.dict(os.environ, {}, clear=True):
            settings = GatewaySettings()
        self.assertEqual(settings.to_config(), GatewayConfig(gateway_url="http://127.0.0.1:18789"))
        self.assertFalse(settings.strict_stream)
        self.assertEqual(settings.timeout_seconds, 60.0)

    def test_reads_prefixed_environment(self) -> None:
        env = {
            "OPENCLAW_GATEWAY_URL": "http://10.0.0.2:18789/",
            "OPENCLAW_AUTH_TOKEN": "tok",
            "OPENCLAW_AGENT_ID": "beta",
            "OPENCLAW_MODEL": "",
            "OPENCLAW_STRICT_STREAM": "true",
        }
        with mock.patch.dict(os.environ, env, clear=True):
            config = GatewaySettings().to_config()
            strict = GatewaySettings().strict_stream
        self.assertEqual(config.gateway_url, "http://10.0.0.2:18789/")
        self.assertEqual(config.auth_token, "tok")
        self.assertEqual(config.agent_id, "beta")
        self.assertIsNone(config.model)
        self.assertTrue(strict)


if __name__ == "__main__":
    unittest.main()
