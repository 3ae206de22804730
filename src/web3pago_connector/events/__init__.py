"""Connector domain events.

This package provides:
- Typed domain events for authorizations, confirmations and notifications
- An async event emitter with handler error isolation
"""

from web3pago_connector.events.emitter import (
    AsyncEventEmitter,
    AsyncEventHandler,
    EventHandler,
)
from web3pago_connector.events.types import (
    AuthorizationReplayed,
    AuthorizationResolved,
    ConfirmationRejected,
    DeferredResponseDelivered,
    DomainEvent,
    EventCategory,
    EventMetadata,
    NotificationFailed,
    OperationCompleted,
    PaymentConfirmed,
    PendingTransactionStored,
)

__all__ = [
    "AsyncEventEmitter",
    "AsyncEventHandler",
    "AuthorizationReplayed",
    "AuthorizationResolved",
    "ConfirmationRejected",
    "DeferredResponseDelivered",
    "DomainEvent",
    "EventCategory",
    "EventHandler",
    "EventMetadata",
    "NotificationFailed",
    "OperationCompleted",
    "PaymentConfirmed",
    "PendingTransactionStored",
]
