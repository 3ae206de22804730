"""Response builders.

Every response echoes the payment id of the request it answers. Builders
take explicit identifiers so callers decide how ids are generated.
"""

from __future__ import annotations

from decimal import Decimal

from web3pago_connector.domain.types import (
    AuthorizationRequest,
    AuthorizationResponse,
    AuthorizationStatus,
    CancellationRequest,
    CancellationResponse,
    PaymentAppData,
    RefundRequest,
    RefundResponse,
    SettlementRequest,
    SettlementResponse,
)


# ============================================================================
# Authorizations
# ============================================================================


def approve(
    request: AuthorizationRequest,
    *,
    authorization_id: str,
    nsu: str,
    tid: str,
    delay_to_auto_settle: int | None = None,
) -> AuthorizationResponse:
    """Approved authorization."""
    return AuthorizationResponse(
        payment_id=request.payment_id,
        status=AuthorizationStatus.APPROVED,
        authorization_id=authorization_id,
        nsu=nsu,
        tid=tid,
        delay_to_auto_settle=delay_to_auto_settle,
    )


def deny(
    request: AuthorizationRequest,
    *,
    tid: str,
    code: str | None = None,
    message: str | None = None,
) -> AuthorizationResponse:
    """Denied authorization."""
    return AuthorizationResponse(
        payment_id=request.payment_id,
        status=AuthorizationStatus.DENIED,
        tid=tid,
        code=code,
        message=message,
    )


def pending(
    request: AuthorizationRequest,
    *,
    delay_to_cancel: int,
    tid: str,
    payment_app_data: PaymentAppData | None = None,
) -> AuthorizationResponse:
    """Pending authorization, final outcome arrives later."""
    return AuthorizationResponse(
        payment_id=request.payment_id,
        status=AuthorizationStatus.PENDING,
        tid=tid,
        delay_to_cancel=delay_to_cancel,
        payment_app_data=payment_app_data,
    )


def pending_bank_invoice(
    request: AuthorizationRequest,
    *,
    delay_to_cancel: int,
    payment_url: str,
    tid: str,
) -> AuthorizationResponse:
    """Pending authorization redeemable through a bank invoice."""
    return AuthorizationResponse(
        payment_id=request.payment_id,
        status=AuthorizationStatus.PENDING_BANK_INVOICE,
        tid=tid,
        delay_to_cancel=delay_to_cancel,
        payment_url=payment_url,
    )


def redirect(
    request: AuthorizationRequest,
    *,
    delay_to_cancel: int,
    redirect_url: str,
    tid: str,
) -> AuthorizationResponse:
    """Pending authorization that requires the shopper to be redirected."""
    return AuthorizationResponse(
        payment_id=request.payment_id,
        status=AuthorizationStatus.PENDING_REDIRECT,
        tid=tid,
        delay_to_cancel=delay_to_cancel,
        redirect_url=redirect_url,
    )


# ============================================================================
# Cancellations / Refunds / Settlements
# ============================================================================


def approve_cancellation(
    request: CancellationRequest, *, cancellation_id: str
) -> CancellationResponse:
    return CancellationResponse(
        payment_id=request.payment_id,
        request_id=request.request_id,
        cancellation_id=cancellation_id,
    )


def deny_refund(
    request: RefundRequest,
    *,
    code: str = "refund-manually",
    message: str = "Refund should be performed manually",
) -> RefundResponse:
    return RefundResponse(
        payment_id=request.payment_id,
        request_id=request.request_id,
        refund_id=None,
        value=Decimal("0"),
        code=code,
        message=message,
    )


def deny_settlement(
    request: SettlementRequest,
    *,
    code: str = "settlement-denied",
    message: str = "Settlement is not supported by this connector",
) -> SettlementResponse:
    return SettlementResponse(
        payment_id=request.payment_id,
        request_id=request.request_id,
        settle_id=None,
        value=Decimal("0"),
        code=code,
        message=message,
    )
