"""Pydantic schemas for API request/response models.

Inbound bodies use the platform's camelCase keys. Validated schemas are
converted into domain types with to_domain().
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from web3pago_connector.domain.types import (
    AuthorizationRequest,
    CancellationRequest,
    RefundRequest,
    SettlementRequest,
)


class CamelModel(BaseModel):
    """Base schema accepting camelCase (or snake_case) keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


# ============================================================================
# Authorization schemas
# ============================================================================


class CardExpirationSchema(CamelModel):
    """Card expiration."""

    month: str
    year: str


class CardSchema(CamelModel):
    """Card details. The security code is accepted and discarded."""

    holder: str | None = None
    number: str | None = None
    bin: str | None = None
    csc: str | None = Field(default=None, exclude=True)
    expiration: CardExpirationSchema | None = None
    number_token: str | None = None
    holder_token: str | None = None


class AuthorizationRequestSchema(CamelModel):
    """Schema for POST /payments."""

    payment_id: str = Field(min_length=1)
    value: Decimal = Field(ge=0)
    currency: str | None = None
    payment_method: str | None = None
    payment_method_custom_code: str | None = None
    card: CardSchema | None = None
    transaction_id: str | None = None
    order_id: str | None = None
    reference: str | None = None
    callback_url: str | None = None
    return_url: str | None = None

    def to_domain(self) -> AuthorizationRequest:
        return AuthorizationRequest.from_dict(self.to_payload())


# ============================================================================
# Cancellation / Refund / Settlement schemas
# ============================================================================


class CancellationRequestSchema(CamelModel):
    """Schema for POST /payments/{paymentId}/cancellations."""

    payment_id: str | None = None
    request_id: str = Field(min_length=1)
    authorization_id: str | None = None
    tid: str | None = None
    transaction_id: str | None = None

    def to_domain(self, payment_id: str) -> CancellationRequest:
        return CancellationRequest.from_dict({**self.to_payload(), "paymentId": payment_id})


class RefundRequestSchema(CamelModel):
    """Schema for POST /payments/{paymentId}/refunds."""

    payment_id: str | None = None
    request_id: str = Field(min_length=1)
    value: Decimal = Field(default=Decimal("0"), ge=0)
    settle_id: str | None = None
    tid: str | None = None
    transaction_id: str | None = None

    def to_domain(self, payment_id: str) -> RefundRequest:
        return RefundRequest.from_dict({**self.to_payload(), "paymentId": payment_id})


class SettlementRequestSchema(CamelModel):
    """Schema for POST /payments/{paymentId}/settlements."""

    payment_id: str | None = None
    request_id: str = Field(min_length=1)
    value: Decimal = Field(default=Decimal("0"), ge=0)
    authorization_id: str | None = None
    tid: str | None = None
    transaction_id: str | None = None

    def to_domain(self, payment_id: str) -> SettlementRequest:
        return SettlementRequest.from_dict({**self.to_payload(), "paymentId": payment_id})


# ============================================================================
# Confirmation / error schemas
# ============================================================================


class ConfirmationResponse(BaseModel):
    """Body of a successful approve/deny webhook."""

    success: bool = True


class ErrorResponse(BaseModel):
    """Error body returned by every failing endpoint."""

    error: str
    code: str | None = None
    details: dict[str, Any] | None = None


# ============================================================================
# Manifest
# ============================================================================


class PaymentMethodManifest(BaseModel):
    """One payment method accepted by the connector."""

    name: str
    allows_split: str = Field(default="disabled", serialization_alias="allowsSplit")


class ManifestResponse(BaseModel):
    """Schema for GET /manifest."""

    payment_methods: list[PaymentMethodManifest] = Field(serialization_alias="paymentMethods")
