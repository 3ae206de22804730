"""Payment-app confirmation webhooks.

The payment app calls the approve/deny URL it received in the pending
response. Bodies are ignored; the correlation id in the path is the only
input.
"""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from web3pago_connector.api.dependencies import Connector
from web3pago_connector.api.schemas import ConfirmationResponse, ErrorResponse
from web3pago_connector.services.reconciliation import ConfirmationResult, ConfirmationStatus

router = APIRouter(tags=["confirmations"])

_ERROR_RESPONSES = {
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def confirmation_response(result: ConfirmationResult) -> JSONResponse:
    """Map a confirmation result onto the webhook's HTTP contract."""
    if result.success:
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content=ConfirmationResponse().model_dump(),
        )
    if result.status is ConfirmationStatus.NOT_FOUND:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"error": "Transaction not found"},
        )
    if result.status is ConfirmationStatus.CONFLICT:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={"error": "Transaction already resolved"},
        )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )


@router.post(
    "/approve-payment/{correlation_id}",
    response_model=ConfirmationResponse,
    responses=_ERROR_RESPONSES,
)
async def approve_payment(connector: Connector, correlation_id: str) -> JSONResponse:
    """Approve a pending payment-app transaction."""
    return confirmation_response(await connector.approve_payment(correlation_id))


@router.post(
    "/deny-payment/{correlation_id}",
    response_model=ConfirmationResponse,
    responses=_ERROR_RESPONSES,
)
async def deny_payment(connector: Connector, correlation_id: str) -> JSONResponse:
    """Deny a pending payment-app transaction."""
    return confirmation_response(await connector.deny_payment(correlation_id))
