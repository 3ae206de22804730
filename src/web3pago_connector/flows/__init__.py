"""Authorization flows: classification and the strategy registry."""

from web3pago_connector.flows.classifier import (
    TEST_CARD_FLOWS,
    classify,
    execute_authorization,
)
from web3pago_connector.flows.config import FlowConfig
from web3pago_connector.flows.registry import (
    DEFAULT_FLOWS,
    Flow,
    FlowName,
    FlowOutcome,
    build_registry,
)

__all__ = [
    "DEFAULT_FLOWS",
    "Flow",
    "FlowConfig",
    "FlowName",
    "FlowOutcome",
    "TEST_CARD_FLOWS",
    "build_registry",
    "classify",
    "execute_authorization",
]
