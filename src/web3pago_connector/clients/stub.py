"""Stub clients for local development and testing.

Replace with the HTTP clients for anything that talks to a real
processor or checkout platform.
"""

from __future__ import annotations

from typing import Any

from web3pago_connector.clients.base import DeliveryResult
from web3pago_connector.domain.types import AuthorizationRequest, AuthorizationResponse


class NoopProcessorNotifier:
    """Accepts and drops every operation. Used when no processor URL is set."""

    async def send(self, operation: str, payload: dict[str, Any]) -> DeliveryResult:
        return DeliveryResult.ok(message="processor notification disabled")


class RecordingProcessorNotifier:
    """Keeps every operation in memory.

    Args:
        fail: If True, every send reports a failure, simulating an
            unreachable processor.
    """

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: list[tuple[str, dict[str, Any]]] = []

    async def send(self, operation: str, payload: dict[str, Any]) -> DeliveryResult:
        self.sent.append((operation, payload))
        if self.fail:
            return DeliveryResult.failed("processor unreachable (stub)")
        return DeliveryResult.ok()


class RecordingPlatformCallback:
    """Keeps every callback in memory instead of calling the platform."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls: list[tuple[AuthorizationRequest, AuthorizationResponse]] = []

    async def __call__(
        self,
        request: AuthorizationRequest,
        response: AuthorizationResponse,
    ) -> DeliveryResult:
        self.calls.append((request, response))
        if self.fail:
            return DeliveryResult.failed("platform unreachable (stub)")
        return DeliveryResult.ok()

    def responses_for(self, payment_id: str) -> list[AuthorizationResponse]:
        """Responses delivered for one payment, in order."""
        return [resp for req, resp in self.calls if req.payment_id == payment_id]
