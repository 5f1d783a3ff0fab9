"""Tests for lambda_relay.core.settings — RelaySettings.

Covers defaults, RELAY_* environment overrides and field validation.
"""

import pytest
from pydantic import ValidationError

from lambda_relay.core.settings import RelaySettings


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    """Keep a developer's .env and RELAY_* variables out of the tests."""
    monkeypatch.chdir(tmp_path)
    for name in ("REGION", "ENDPOINT_URL", "MAX_ATTEMPTS", "QUEUE_NAME_PREFIX", "LOG_LEVEL", "JSON_LOGS"):
        monkeypatch.delenv(f"RELAY_{name}", raising=False)


class TestDefaults:
    def test_defaults(self):
        s = RelaySettings()
        assert s.region is None
        assert s.endpoint_url is None
        assert s.max_attempts == 3
        assert s.queue_name_prefix == "awsRelayQueue_"
        assert s.log_level == "INFO"
        assert s.json_logs is None


class TestEnvOverride:
    def test_region_from_env(self, monkeypatch):
        monkeypatch.setenv("RELAY_REGION", "ap-southeast-2")
        assert RelaySettings().region == "ap-southeast-2"

    def test_endpoint_and_attempts(self, monkeypatch):
        monkeypatch.setenv("RELAY_ENDPOINT_URL", "http://localhost:4566")
        monkeypatch.setenv("RELAY_MAX_ATTEMPTS", "5")
        s = RelaySettings()
        assert s.endpoint_url == "http://localhost:4566"
        assert s.max_attempts == 5

    def test_json_logs_from_env(self, monkeypatch):
        monkeypatch.setenv("RELAY_JSON_LOGS", "false")
        assert RelaySettings().json_logs is False

    def test_unprefixed_vars_ignored(self, monkeypatch):
        monkeypatch.setenv("REGION", "us-west-2")
        assert RelaySettings().region is None

    def test_dotenv_file(self, tmp_path):
        (tmp_path / ".env").write_text("RELAY_QUEUE_NAME_PREFIX=batch-\n")
        assert RelaySettings().queue_name_prefix == "batch-"


class TestValidation:
    def test_max_attempts_at_least_one(self):
        with pytest.raises(ValidationError):
            RelaySettings(max_attempts=0)

    def test_prefix_must_be_queue_safe(self):
        with pytest.raises(ValidationError):
            RelaySettings(queue_name_prefix="relay.queue:")


class TestConfigureLogging:
    def test_passes_level_and_format(self, monkeypatch):
        calls = []
        monkeypatch.setattr(
            "lambda_relay.core.settings.configure_logging",
            lambda **kwargs: calls.append(kwargs),
        )
        monkeypatch.setenv("RELAY_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("RELAY_JSON_LOGS", "true")

        RelaySettings().configure_logging()

        assert calls == [{"level": "DEBUG", "json_format": True}]
