"""Flow classifier.

Maps a request's shape onto exactly one flow. The card table reproduces the
certification test suite for payment connectors: specific test card numbers
drive specific outcomes.

Decision order (first match wins):
1. Payment-app payment method or custom code -> WEB3PAGO_PAYMENT_APP
2. Bank invoice payment method -> BANK_INVOICE
3. Card present -> test card table (tokenized or unknown -> REDIRECT)
4. Anything else -> AUTHORIZE
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import MappingProxyType

from web3pago_connector.domain.types import AuthorizationRequest
from web3pago_connector.flows.config import FlowConfig
from web3pago_connector.flows.registry import DEFAULT_FLOWS, Flow, FlowName, FlowOutcome

logger = logging.getLogger(__name__)


TEST_CARD_FLOWS: Mapping[str, FlowName] = MappingProxyType({
    "4444333322221111": FlowName.AUTHORIZE,
    "4444333322221112": FlowName.DENIED,
    "4222222222222224": FlowName.ASYNC_APPROVED,
    "4222222222222225": FlowName.ASYNC_DENIED,
})

# Tokenized cards and numbers outside the table
UNKNOWN_CARD_FLOW = FlowName.REDIRECT


def is_payment_app_authorization(request: AuthorizationRequest, config: FlowConfig) -> bool:
    return (
        request.payment_method in config.external_app_payment_methods
        or request.payment_method_custom_code in config.external_app_custom_codes
    )


def is_bank_invoice_authorization(request: AuthorizationRequest, config: FlowConfig) -> bool:
    return request.payment_method == config.bank_invoice_payment_method


def classify(request: AuthorizationRequest, config: FlowConfig) -> FlowName:
    """Select the flow for a request. Pure and total."""
    if is_payment_app_authorization(request, config):
        return FlowName.WEB3PAGO_PAYMENT_APP

    if is_bank_invoice_authorization(request, config):
        return FlowName.BANK_INVOICE

    if request.card is not None:
        card_number = None if request.card.is_tokenized else request.card.number
        if card_number is None:
            return UNKNOWN_CARD_FLOW
        return TEST_CARD_FLOWS.get(card_number, UNKNOWN_CARD_FLOW)

    return FlowName.AUTHORIZE


def execute_authorization(
    request: AuthorizationRequest,
    config: FlowConfig,
    flows: Mapping[FlowName, Flow] = DEFAULT_FLOWS,
) -> FlowOutcome:
    """Classify the request and run the selected flow."""
    flow_name = classify(request, config)
    logger.debug("Payment %s classified as %s", request.payment_id, flow_name.value)
    return flows[flow_name](request, config)
