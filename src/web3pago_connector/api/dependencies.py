"""FastAPI dependencies for dependency injection."""

from typing import Annotated

from fastapi import Depends, Request

from web3pago_connector.connector import Web3PagoConnector
from web3pago_connector.exceptions import ConfigurationError


def get_connector(request: Request) -> Web3PagoConnector:
    """Get the connector wired at application startup."""
    connector = getattr(request.app.state, "connector", None)
    if connector is None:
        raise ConfigurationError("Connector is not initialized")
    return connector


# Type aliases for cleaner dependency injection
Connector = Annotated[Web3PagoConnector, Depends(get_connector)]
