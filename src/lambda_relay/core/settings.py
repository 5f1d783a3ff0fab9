"""Process-level settings for the AWS adapters.

The relay operations themselves read no environment variables; everything
they need arrives through the packet and the execution context. Settings
only matter at cold start, when the handler module builds its boto3
clients and configures logging.

Examples:
    >>> from lambda_relay.core.settings import RelaySettings
    >>> settings = RelaySettings()          # RELAY_* env vars, then .env
    >>> settings.queue_name_prefix
    'awsRelayQueue_'

Environment:
    RELAY_REGION             AWS region for the clients (default: boto3 chain)
    RELAY_ENDPOINT_URL       Endpoint override (LocalStack, ElasticMQ)
    RELAY_MAX_ATTEMPTS       botocore retry attempts (standard mode)
    RELAY_QUEUE_NAME_PREFIX  Prefix for synthesized queue names
    RELAY_LOG_LEVEL          structlog level
    RELAY_JSON_LOGS          true/false, unset = auto-detect
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from lambda_relay.core.logging import configure_logging


class RelaySettings(BaseSettings):
    """Settings for building relay collaborators.

    Fields
    ──────
    region            : AWS region; None defers to the boto3 credential chain
    endpoint_url      : Endpoint override shared by the SQS and Lambda clients
    max_attempts      : botocore ``standard`` retry mode max attempts
    queue_name_prefix : Prefix used when setup() synthesizes a queue name
    log_level         : structlog log level
    json_logs         : Force JSON (True) or console (False) rendering
    """

    model_config = SettingsConfigDict(
        env_prefix="RELAY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── AWS ──────────────────────────────────────────────────────
    region: str | None = None
    endpoint_url: str | None = None
    max_attempts: int = Field(default=3, ge=1)

    # ── Relay ────────────────────────────────────────────────────
    queue_name_prefix: str = Field(
        default="awsRelayQueue_",
        pattern=r"^[A-Za-z0-9_-]*$",
        description="Prefix for synthesized ephemeral queue names",
    )

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    json_logs: bool | None = None

    def configure_logging(self) -> None:
        """Apply ``log_level`` and ``json_logs`` to structlog."""
        configure_logging(level=self.log_level, json_format=self.json_logs)
