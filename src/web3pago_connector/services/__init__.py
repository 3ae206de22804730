"""Connector services."""

from web3pago_connector.services.orchestrator import AuthorizationOrchestrator
from web3pago_connector.services.reconciliation import (
    ConfirmationResult,
    ConfirmationStatus,
    ReconciliationService,
)

__all__ = [
    "AuthorizationOrchestrator",
    "ConfirmationResult",
    "ConfirmationStatus",
    "ReconciliationService",
]
