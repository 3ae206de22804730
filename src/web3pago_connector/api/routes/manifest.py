"""Connector manifest endpoint."""

from fastapi import APIRouter

from web3pago_connector.api.dependencies import Connector
from web3pago_connector.api.schemas import ManifestResponse, PaymentMethodManifest

router = APIRouter(tags=["manifest"])

# Card brands exercised by the certification test cards
CARD_PAYMENT_METHODS = ("Visa", "Mastercard")


@router.get("/manifest", response_model=ManifestResponse)
async def get_manifest(connector: Connector) -> ManifestResponse:
    """List the payment methods this connector accepts."""
    flows = connector.config.flows
    names = [
        *CARD_PAYMENT_METHODS,
        flows.bank_invoice_payment_method,
        *sorted(flows.external_app_payment_methods),
    ]
    return ManifestResponse(
        payment_methods=[PaymentMethodManifest(name=name) for name in names],
    )
