"""Connector Configuration Objects.

Pattern:
    connector = Web3PagoConnector.create(
        store,
        config=ConnectorConfig(
            flows=FlowConfig(callback_base_url="https://connector.example.com"),
            processor_url="https://api.web3pago.example.com/notifications",
        ),
    )

Rules:
    1. No env vars. Settings are mapped onto these objects by
       connector_config_from_settings().
    2. Immutable after creation (frozen dataclasses).
"""

from __future__ import annotations

from dataclasses import dataclass, field

from web3pago_connector.config import Settings
from web3pago_connector.flows.config import FlowConfig


@dataclass(frozen=True)
class ConnectorConfig:
    """
    Complete connector configuration.

    Attributes:
        flows: Flow classification and response configuration.
        processor_url: Web3Pago endpoint notified of every inbound
            operation. None disables processor notification.
        http_timeout_seconds: Timeout for outbound HTTP calls.
    """

    flows: FlowConfig = field(default_factory=FlowConfig)
    processor_url: str | None = None
    http_timeout_seconds: float = 10.0

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.processor_url is not None and not self.processor_url.startswith(
            ("http://", "https://")
        ):
            raise ValueError("processor_url must be an http(s) URL")
        if self.http_timeout_seconds <= 0:
            raise ValueError("http_timeout_seconds must be positive")


def connector_config_from_settings(settings: Settings) -> ConnectorConfig:
    """Build the connector configuration from environment settings."""
    return ConnectorConfig(
        flows=FlowConfig(
            app_name=settings.payment_app_name,
            callback_base_url=settings.connector_base_url,
        ),
        processor_url=settings.web3pago_api_url,
        http_timeout_seconds=settings.http_timeout_seconds,
    )
