"""Domain types and response builders for the Payment Provider Protocol."""

from web3pago_connector.domain.types import (
    AuthorizationRequest,
    AuthorizationResponse,
    AuthorizationStatus,
    CancellationRequest,
    CancellationResponse,
    Card,
    CardExpiration,
    PaymentAppData,
    PendingStatus,
    PendingTransaction,
    RefundRequest,
    RefundResponse,
    SettlementRequest,
    SettlementResponse,
)

__all__ = [
    "AuthorizationRequest",
    "AuthorizationResponse",
    "AuthorizationStatus",
    "CancellationRequest",
    "CancellationResponse",
    "Card",
    "CardExpiration",
    "PaymentAppData",
    "PendingStatus",
    "PendingTransaction",
    "RefundRequest",
    "RefundResponse",
    "SettlementRequest",
    "SettlementResponse",
]
