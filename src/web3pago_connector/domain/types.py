"""Payment Provider Protocol types.

Requests and responses exchanged with the checkout platform. All types are:
- Immutable (frozen dataclasses)
- Serialized with the platform's camelCase keys
- Round-trippable through to_dict/from_dict for persistence
"""

from __future__ import annotations

import json
from dataclasses import dataclass, fields, is_dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, ClassVar

from web3pago_connector.exceptions import InvalidPayloadError


class AuthorizationStatus(str, Enum):
    """Outcome of an authorization attempt."""

    APPROVED = "approved"
    DENIED = "denied"
    PENDING = "pending"
    PENDING_REDIRECT = "pending_redirect"
    PENDING_BANK_INVOICE = "pending_bank_invoice"

    @property
    def is_terminal(self) -> bool:
        """Approved and denied supersede any earlier pending response."""
        return self in (AuthorizationStatus.APPROVED, AuthorizationStatus.DENIED)


class PendingStatus(str, Enum):
    """Resolution state of a pending payment-app transaction."""

    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _serialize(value: Any) -> Any:
    if is_dataclass(value):
        return value.to_dict()  # type: ignore[union-attr]
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, datetime):
        return value.isoformat()
    return value


class _CamelCaseRecord:
    """Serialization shared by all protocol types.

    None values are dropped unless the field is listed in `_nullable_keys`,
    which the platform expects to see as explicit nulls.
    """

    _nullable_keys: ClassVar[frozenset[str]] = frozenset()

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        for f in fields(self):  # type: ignore[arg-type]
            value = getattr(self, f.name)
            if value is None and f.name not in self._nullable_keys:
                continue
            data[_camel(f.name)] = _serialize(value)
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


def _require(data: dict[str, Any], key: str, type_name: str) -> Any:
    value = data.get(key)
    if value is None or value == "":
        raise InvalidPayloadError(
            f"{type_name} is missing required field '{key}'",
            details={"field": key},
        )
    return value


def _decimal(value: Any, key: str) -> Decimal:
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvalidPayloadError(
            f"Field '{key}' is not a valid amount",
            details={"field": key, "value": value},
        )


@dataclass(frozen=True)
class CardExpiration(_CamelCaseRecord):
    """Card expiration as sent by the platform."""

    month: str
    year: str


@dataclass(frozen=True)
class Card(_CamelCaseRecord):
    """Card details attached to a card authorization.

    The security code is accepted on the wire but never kept, so it cannot
    leak into persisted requests.
    """

    holder: str | None = None
    number: str | None = None
    bin: str | None = None
    expiration: CardExpiration | None = None
    number_token: str | None = None
    holder_token: str | None = None

    @property
    def is_tokenized(self) -> bool:
        """Tokenized cards carry a vault reference instead of a clear number."""
        return self.number_token is not None or not self.number

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Card:
        expiration = data.get("expiration")
        return cls(
            holder=data.get("holder"),
            number=data.get("number"),
            bin=data.get("bin"),
            expiration=(
                CardExpiration(
                    month=str(expiration.get("month", "")),
                    year=str(expiration.get("year", "")),
                )
                if isinstance(expiration, dict)
                else None
            ),
            number_token=data.get("numberToken"),
            holder_token=data.get("holderToken"),
        )


@dataclass(frozen=True)
class AuthorizationRequest(_CamelCaseRecord):
    """A payment attempt sent by the checkout platform.

    Created once per checkout attempt and never mutated. Echoed into
    responses and stored verbatim in correlation records.
    """

    payment_id: str
    value: Decimal
    currency: str | None = None
    payment_method: str | None = None
    payment_method_custom_code: str | None = None
    card: Card | None = None
    transaction_id: str | None = None
    order_id: str | None = None
    reference: str | None = None
    callback_url: str | None = None
    return_url: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AuthorizationRequest:
        """Build a request from its camelCase JSON form."""
        card = data.get("card")
        return cls(
            payment_id=str(_require(data, "paymentId", "AuthorizationRequest")),
            value=_decimal(data.get("value", 0), "value"),
            currency=data.get("currency"),
            payment_method=data.get("paymentMethod"),
            payment_method_custom_code=data.get("paymentMethodCustomCode"),
            card=Card.from_dict(card) if isinstance(card, dict) else None,
            transaction_id=data.get("transactionId"),
            order_id=data.get("orderId"),
            reference=data.get("reference"),
            callback_url=data.get("callbackUrl"),
            return_url=data.get("returnUrl"),
        )


@dataclass(frozen=True)
class PaymentAppData(_CamelCaseRecord):
    """Opaque bundle handed to the payment app that completes the payment."""

    app_name: str
    payload: str

    def parsed_payload(self) -> dict[str, Any]:
        """Decode the JSON payload."""
        try:
            parsed = json.loads(self.payload)
        except (TypeError, ValueError) as e:
            raise InvalidPayloadError(
                f"Payment app payload is not valid JSON: {e}",
                details={"app_name": self.app_name},
            )
        if not isinstance(parsed, dict):
            raise InvalidPayloadError(
                "Payment app payload must be a JSON object",
                details={"app_name": self.app_name},
            )
        return parsed

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PaymentAppData:
        return cls(app_name=data.get("appName", ""), payload=data.get("payload", ""))


@dataclass(frozen=True)
class AuthorizationResponse(_CamelCaseRecord):
    """Outcome of processing an AuthorizationRequest.

    A pending response may later be superseded by a terminal
    (approved/denied) response for the same payment id.
    """

    payment_id: str
    status: AuthorizationStatus
    authorization_id: str | None = None
    nsu: str | None = None
    tid: str | None = None
    code: str | None = None
    message: str | None = None
    delay_to_cancel: int | None = None
    delay_to_auto_settle: int | None = None
    redirect_url: str | None = None
    payment_url: str | None = None
    payment_app_data: PaymentAppData | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AuthorizationResponse:
        """Build a response from its persisted camelCase JSON form."""
        try:
            status = AuthorizationStatus(_require(data, "status", "AuthorizationResponse"))
        except ValueError:
            raise InvalidPayloadError(
                f"Unknown authorization status: {data.get('status')}",
                details={"field": "status"},
            )
        app_data = data.get("paymentAppData")
        return cls(
            payment_id=str(_require(data, "paymentId", "AuthorizationResponse")),
            status=status,
            authorization_id=data.get("authorizationId"),
            nsu=data.get("nsu"),
            tid=data.get("tid"),
            code=data.get("code"),
            message=data.get("message"),
            delay_to_cancel=data.get("delayToCancel"),
            delay_to_auto_settle=data.get("delayToAutoSettle"),
            redirect_url=data.get("redirectUrl"),
            payment_url=data.get("paymentUrl"),
            payment_app_data=(
                PaymentAppData.from_dict(app_data) if isinstance(app_data, dict) else None
            ),
        )


@dataclass(frozen=True)
class PendingTransaction(_CamelCaseRecord):
    """Correlation record for a payment-app authorization awaiting confirmation.

    Keyed by correlation id (distinct from the payment id). The status
    moves from pending to approved or denied exactly once, and the terminal
    response synthesized at that moment is kept alongside it. notified_at is
    set once the platform has accepted that response.
    """

    correlation_id: str
    request: AuthorizationRequest
    status: PendingStatus
    created_at: datetime
    resolved_at: datetime | None = None
    response: AuthorizationResponse | None = None
    notified_at: datetime | None = None

    @property
    def is_resolved(self) -> bool:
        return self.status is not PendingStatus.PENDING

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PendingTransaction:
        request = data.get("request")
        if not isinstance(request, dict):
            raise InvalidPayloadError(
                "Pending transaction has no stored request",
                details={"correlation_id": data.get("correlationId")},
            )
        resolved_at = data.get("resolvedAt")
        notified_at = data.get("notifiedAt")
        response = data.get("response")
        return cls(
            correlation_id=str(_require(data, "correlationId", "PendingTransaction")),
            request=AuthorizationRequest.from_dict(request),
            status=PendingStatus(data.get("status", PendingStatus.PENDING.value)),
            created_at=datetime.fromisoformat(_require(data, "createdAt", "PendingTransaction")),
            resolved_at=datetime.fromisoformat(resolved_at) if resolved_at else None,
            response=(
                AuthorizationResponse.from_dict(response) if isinstance(response, dict) else None
            ),
            notified_at=datetime.fromisoformat(notified_at) if notified_at else None,
        )


# ============================================================================
# Cancellation / Refund / Settlement
# ============================================================================


@dataclass(frozen=True)
class CancellationRequest(_CamelCaseRecord):
    """Request to cancel a previously authorized payment."""

    payment_id: str
    request_id: str
    authorization_id: str | None = None
    tid: str | None = None
    transaction_id: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CancellationRequest:
        return cls(
            payment_id=str(_require(data, "paymentId", "CancellationRequest")),
            request_id=str(_require(data, "requestId", "CancellationRequest")),
            authorization_id=data.get("authorizationId"),
            tid=data.get("tid"),
            transaction_id=data.get("transactionId"),
        )


@dataclass(frozen=True)
class CancellationResponse(_CamelCaseRecord):
    """Outcome of a cancellation."""

    _nullable_keys: ClassVar[frozenset[str]] = frozenset({"cancellation_id"})

    payment_id: str
    request_id: str
    cancellation_id: str | None
    code: str | None = None
    message: str | None = None


@dataclass(frozen=True)
class RefundRequest(_CamelCaseRecord):
    """Request to refund a settled payment."""

    payment_id: str
    request_id: str
    value: Decimal
    settle_id: str | None = None
    tid: str | None = None
    transaction_id: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RefundRequest:
        return cls(
            payment_id=str(_require(data, "paymentId", "RefundRequest")),
            request_id=str(_require(data, "requestId", "RefundRequest")),
            value=_decimal(data.get("value", 0), "value"),
            settle_id=data.get("settleId"),
            tid=data.get("tid"),
            transaction_id=data.get("transactionId"),
        )


@dataclass(frozen=True)
class RefundResponse(_CamelCaseRecord):
    """Outcome of a refund."""

    _nullable_keys: ClassVar[frozenset[str]] = frozenset({"refund_id"})

    payment_id: str
    request_id: str
    refund_id: str | None
    value: Decimal
    code: str | None = None
    message: str | None = None


@dataclass(frozen=True)
class SettlementRequest(_CamelCaseRecord):
    """Request to settle (capture) an authorized payment."""

    payment_id: str
    request_id: str
    value: Decimal
    authorization_id: str | None = None
    tid: str | None = None
    transaction_id: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SettlementRequest:
        return cls(
            payment_id=str(_require(data, "paymentId", "SettlementRequest")),
            request_id=str(_require(data, "requestId", "SettlementRequest")),
            value=_decimal(data.get("value", 0), "value"),
            authorization_id=data.get("authorizationId"),
            tid=data.get("tid"),
            transaction_id=data.get("transactionId"),
        )


@dataclass(frozen=True)
class SettlementResponse(_CamelCaseRecord):
    """Outcome of a settlement."""

    _nullable_keys: ClassVar[frozenset[str]] = frozenset({"settle_id"})

    payment_id: str
    request_id: str
    settle_id: str | None
    value: Decimal
    code: str | None = None
    message: str | None = None
