"""Flow registry - named strategies that resolve an authorization.

A flow turns a request into a FlowOutcome: the immediate response returned
to the caller plus, for asynchronous flows, a producer of the superseding
response delivered later through the platform callback.

Flows are pure apart from identifier generation. They never touch storage;
persisting correlation records is the orchestrator's job.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType

from web3pago_connector.domain import builders
from web3pago_connector.domain.ids import random_string, random_url
from web3pago_connector.domain.types import (
    AuthorizationRequest,
    AuthorizationResponse,
    PaymentAppData,
)
from web3pago_connector.flows.config import FlowConfig


class FlowName(str, Enum):
    """Authorization flows."""

    AUTHORIZE = "Authorize"
    DENIED = "Denied"
    CANCEL = "Cancel"
    ASYNC_APPROVED = "AsyncApproved"
    ASYNC_DENIED = "AsyncDenied"
    BANK_INVOICE = "BankInvoice"
    REDIRECT = "Redirect"
    WEB3PAGO_PAYMENT_APP = "Web3PagoPaymentApp"


DeferredResponse = Callable[[], AuthorizationResponse]


@dataclass(frozen=True)
class FlowOutcome:
    """Result of executing a flow.

    `deferred` is None for immediate flows. Otherwise it produces the
    superseding response and is invoked at most once by the orchestrator.
    """

    flow: FlowName
    immediate: AuthorizationResponse
    deferred: DeferredResponse | None = None

    @property
    def is_deferred(self) -> bool:
        return self.deferred is not None


Flow = Callable[[AuthorizationRequest, FlowConfig], FlowOutcome]


def _approved(request: AuthorizationRequest) -> AuthorizationResponse:
    return builders.approve(
        request,
        authorization_id=random_string(),
        nsu=random_string(),
        tid=random_string(),
    )


def _denied(request: AuthorizationRequest) -> AuthorizationResponse:
    return builders.deny(request, tid=random_string())


def authorize_flow(request: AuthorizationRequest, config: FlowConfig) -> FlowOutcome:
    return FlowOutcome(FlowName.AUTHORIZE, _approved(request))


def denied_flow(request: AuthorizationRequest, config: FlowConfig) -> FlowOutcome:
    return FlowOutcome(FlowName.DENIED, _denied(request))


def cancel_flow(request: AuthorizationRequest, config: FlowConfig) -> FlowOutcome:
    """Cancellation is simulated as a successful re-authorization."""
    outcome = authorize_flow(request, config)
    return FlowOutcome(FlowName.CANCEL, outcome.immediate)


def async_approved_flow(request: AuthorizationRequest, config: FlowConfig) -> FlowOutcome:
    return FlowOutcome(
        FlowName.ASYNC_APPROVED,
        builders.pending(
            request,
            delay_to_cancel=config.async_delay_to_cancel_ms,
            tid=random_string(),
        ),
        deferred=lambda: _approved(request),
    )


def async_denied_flow(request: AuthorizationRequest, config: FlowConfig) -> FlowOutcome:
    return FlowOutcome(
        FlowName.ASYNC_DENIED,
        builders.pending(
            request,
            delay_to_cancel=config.async_delay_to_cancel_ms,
            tid=random_string(),
        ),
        deferred=lambda: _denied(request),
    )


def bank_invoice_flow(request: AuthorizationRequest, config: FlowConfig) -> FlowOutcome:
    """Invoice is issued now; payment of the invoice is confirmed later."""
    return FlowOutcome(
        FlowName.BANK_INVOICE,
        builders.pending_bank_invoice(
            request,
            delay_to_cancel=config.async_delay_to_cancel_ms,
            payment_url=random_url(config.checkout_url_base),
            tid=random_string(),
        ),
        deferred=lambda: _approved(request),
    )


def redirect_flow(request: AuthorizationRequest, config: FlowConfig) -> FlowOutcome:
    return FlowOutcome(
        FlowName.REDIRECT,
        builders.redirect(
            request,
            delay_to_cancel=config.async_delay_to_cancel_ms,
            redirect_url=random_url(config.checkout_url_base),
            tid=random_string(),
        ),
        deferred=lambda: _approved(request),
    )


def payment_app_flow(request: AuthorizationRequest, config: FlowConfig) -> FlowOutcome:
    """Hand the payment to the Web3Pago payment app.

    The outcome is decided out of band: the app calls the approve or deny
    URL embedded in the payload, keyed by a fresh correlation id.
    """
    correlation_id = random_string()
    payload = {
        "transactionId": correlation_id,
        "amount": float(request.value),
        "currency": request.currency or config.default_currency,
        "approvePaymentUrl": config.approve_url(correlation_id),
        "denyPaymentUrl": config.deny_url(correlation_id),
        "web3pagoData": {
            "walletAddress": config.wallet_address,
            "cryptoCurrency": config.crypto_currency,
            "networkId": config.network_id,
        },
    }
    return FlowOutcome(
        FlowName.WEB3PAGO_PAYMENT_APP,
        builders.pending(
            request,
            delay_to_cancel=config.payment_app_delay_to_cancel_ms,
            tid=random_string(),
            payment_app_data=PaymentAppData(
                app_name=config.app_name,
                payload=json.dumps(payload),
            ),
        ),
    )


DEFAULT_FLOWS: Mapping[FlowName, Flow] = MappingProxyType({
    FlowName.AUTHORIZE: authorize_flow,
    FlowName.DENIED: denied_flow,
    FlowName.CANCEL: cancel_flow,
    FlowName.ASYNC_APPROVED: async_approved_flow,
    FlowName.ASYNC_DENIED: async_denied_flow,
    FlowName.BANK_INVOICE: bank_invoice_flow,
    FlowName.REDIRECT: redirect_flow,
    FlowName.WEB3PAGO_PAYMENT_APP: payment_app_flow,
})


def build_registry(overrides: Mapping[FlowName, Flow] | None = None) -> Mapping[FlowName, Flow]:
    """Return a read-only registry, optionally replacing some flows."""
    flows = dict(DEFAULT_FLOWS)
    if overrides:
        flows.update(overrides)
    return MappingProxyType(flows)
