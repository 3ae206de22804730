"""Connector facade and its configuration."""

from web3pago_connector.connector.config import (
    ConnectorConfig,
    connector_config_from_settings,
)
from web3pago_connector.connector.connector import Web3PagoConnector

__all__ = [
    "ConnectorConfig",
    "Web3PagoConnector",
    "connector_config_from_settings",
]
