"""Base protocols and types for outbound clients.

Outbound calls are best-effort side effects. Implementations never raise
for transport or HTTP failures; they return a DeliveryResult and let the
caller decide what a failure means.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from web3pago_connector.domain.types import AuthorizationRequest, AuthorizationResponse


@dataclass(frozen=True)
class DeliveryResult:
    """Result of an outbound delivery."""

    success: bool
    message: str = ""
    status_code: int | None = None

    @classmethod
    def ok(cls, status_code: int | None = None, message: str = "") -> DeliveryResult:
        return cls(success=True, message=message, status_code=status_code)

    @classmethod
    def failed(cls, message: str, status_code: int | None = None) -> DeliveryResult:
        return cls(success=False, message=message, status_code=status_code)


class ProcessorNotifier(Protocol):
    """Forwards inbound operations to the downstream processor (Web3Pago)."""

    async def send(self, operation: str, payload: dict[str, Any]) -> DeliveryResult:
        """Send one operation.

        Args:
            operation: "authorization", "cancellation", "refund" or "settlement"
            payload: camelCase JSON body of the inbound request

        Returns:
            DeliveryResult; failures are reported, never raised.
        """
        ...


class PlatformCallback(Protocol):
    """Informs the checkout platform of a response that supersedes an
    earlier one (async flows and payment-app confirmations)."""

    async def __call__(
        self,
        request: AuthorizationRequest,
        response: AuthorizationResponse,
    ) -> DeliveryResult:
        ...
