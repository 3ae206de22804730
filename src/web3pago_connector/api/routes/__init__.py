"""API routes."""

from web3pago_connector.api.routes.confirmations import router as confirmations_router
from web3pago_connector.api.routes.health import router as health_router
from web3pago_connector.api.routes.manifest import router as manifest_router
from web3pago_connector.api.routes.payments import router as payments_router

__all__ = [
    "confirmations_router",
    "health_router",
    "manifest_router",
    "payments_router",
]
