"""Payment Provider Protocol endpoints."""

from typing import Annotated, Any

from fastapi import APIRouter, Path, status

from web3pago_connector.api.dependencies import Connector
from web3pago_connector.api.schemas import (
    AuthorizationRequestSchema,
    CancellationRequestSchema,
    ErrorResponse,
    RefundRequestSchema,
    SettlementRequestSchema,
)

router = APIRouter(prefix="/payments", tags=["payments"])

PaymentId = Annotated[str, Path(min_length=1)]


@router.post(
    "",
    status_code=status.HTTP_200_OK,
    responses={400: {"model": ErrorResponse}},
)
async def create_payment(
    connector: Connector,
    payload: AuthorizationRequestSchema,
) -> dict[str, Any]:
    """Authorize a payment. Replays return the persisted response."""
    response = await connector.authorize(payload.to_domain())
    return response.to_dict()


@router.post(
    "/{payment_id}/cancellations",
    status_code=status.HTTP_200_OK,
    responses={400: {"model": ErrorResponse}},
)
async def cancel_payment(
    connector: Connector,
    payment_id: PaymentId,
    payload: CancellationRequestSchema,
) -> dict[str, Any]:
    """Cancel a payment. Always approved."""
    response = await connector.cancel(payload.to_domain(payment_id))
    return response.to_dict()


@router.post(
    "/{payment_id}/refunds",
    status_code=status.HTTP_200_OK,
    responses={400: {"model": ErrorResponse}},
)
async def refund_payment(
    connector: Connector,
    payment_id: PaymentId,
    payload: RefundRequestSchema,
) -> dict[str, Any]:
    """Refund a payment. Always denied; refunds are performed manually."""
    response = await connector.refund(payload.to_domain(payment_id))
    return response.to_dict()


@router.post(
    "/{payment_id}/settlements",
    status_code=status.HTTP_200_OK,
    responses={400: {"model": ErrorResponse}},
)
async def settle_payment(
    connector: Connector,
    payment_id: PaymentId,
    payload: SettlementRequestSchema,
) -> dict[str, Any]:
    """Settle a payment. Always denied."""
    response = await connector.settle(payload.to_domain(payment_id))
    return response.to_dict()
