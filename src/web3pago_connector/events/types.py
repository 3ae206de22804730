"""Domain event types for connector operations.

All events are:
- Immutable (frozen dataclasses)
- Typed with explicit payloads
- Traceable via metadata (trace_id is the payment id)
- Serializable for logging and forwarding
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID, uuid4


class EventCategory(str, Enum):
    """Event categories for routing and filtering."""

    AUTHORIZATION = "authorization"
    RECONCILIATION = "reconciliation"
    NOTIFICATION = "notification"
    OPERATION = "operation"


@dataclass(frozen=True)
class EventMetadata:
    """Metadata attached to every domain event."""

    event_id: UUID
    timestamp: datetime
    trace_id: str  # Payment id the event belongs to
    source: str  # Component that emitted
    version: int = 1  # Schema version for evolution

    @classmethod
    def create(cls, trace_id: str, source: str = "connector") -> EventMetadata:
        """Create metadata with auto-generated fields."""
        return cls(
            event_id=uuid4(),
            timestamp=datetime.now(timezone.utc),
            trace_id=trace_id,
            source=source,
        )


@dataclass(frozen=True)
class DomainEvent:
    """Base class for all domain events."""

    metadata: EventMetadata

    @property
    def event_type(self) -> str:
        """Event type name for routing."""
        return self.__class__.__name__

    @property
    def category(self) -> EventCategory:
        """Event category for filtering."""
        raise NotImplementedError("Subclasses must define category")

    def to_dict(self) -> dict[str, Any]:
        """Serialize event to dictionary."""
        data = _serialize(asdict(self))
        data["event_type"] = self.event_type
        data["category"] = self.category.value
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)


def _serialize(obj: Any) -> Any:
    """Recursively serialize objects for JSON compatibility."""
    if isinstance(obj, dict):
        return {k: _serialize(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_serialize(v) for v in obj]
    elif isinstance(obj, UUID):
        return str(obj)
    elif isinstance(obj, datetime):
        return obj.isoformat()
    elif isinstance(obj, Decimal):
        return str(obj)
    elif isinstance(obj, Enum):
        return obj.value
    return obj


# =============================================================================
# Authorization Events
# =============================================================================


@dataclass(frozen=True)
class AuthorizationReplayed(DomainEvent):
    """A persisted response was returned instead of running a flow."""

    payment_id: str
    status: str

    @property
    def category(self) -> EventCategory:
        return EventCategory.AUTHORIZATION


@dataclass(frozen=True)
class AuthorizationResolved(DomainEvent):
    """A flow produced the immediate response for an authorization."""

    payment_id: str
    flow: str
    status: str
    has_deferred: bool

    @property
    def category(self) -> EventCategory:
        return EventCategory.AUTHORIZATION


@dataclass(frozen=True)
class DeferredResponseDelivered(DomainEvent):
    """The superseding response of an async flow was persisted and sent."""

    payment_id: str
    flow: str
    status: str
    callback_delivered: bool

    @property
    def category(self) -> EventCategory:
        return EventCategory.AUTHORIZATION


@dataclass(frozen=True)
class PendingTransactionStored(DomainEvent):
    """A payment-app authorization is waiting for confirmation."""

    payment_id: str
    correlation_id: str

    @property
    def category(self) -> EventCategory:
        return EventCategory.AUTHORIZATION


# =============================================================================
# Reconciliation Events
# =============================================================================


@dataclass(frozen=True)
class PaymentConfirmed(DomainEvent):
    """The payment app approved or denied a pending transaction."""

    payment_id: str
    correlation_id: str
    outcome: str  # approved / denied
    callback_delivered: bool

    @property
    def category(self) -> EventCategory:
        return EventCategory.RECONCILIATION


@dataclass(frozen=True)
class ConfirmationRejected(DomainEvent):
    """A confirmation did not resolve anything."""

    correlation_id: str
    requested_outcome: str
    reason: str  # not_found / duplicate / conflict / error

    @property
    def category(self) -> EventCategory:
        return EventCategory.RECONCILIATION


# =============================================================================
# Notification Events
# =============================================================================


@dataclass(frozen=True)
class NotificationFailed(DomainEvent):
    """A best-effort outbound call failed and was discarded."""

    target: str  # processor / platform / store
    operation: str
    message: str

    @property
    def category(self) -> EventCategory:
        return EventCategory.NOTIFICATION


# =============================================================================
# Operation Events
# =============================================================================


@dataclass(frozen=True)
class OperationCompleted(DomainEvent):
    """A cancellation, refund or settlement was answered."""

    payment_id: str
    operation: str  # cancellation / refund / settlement
    request_id: str
    approved: bool

    @property
    def category(self) -> EventCategory:
        return EventCategory.OPERATION
