"""HTTP implementations of the outbound clients (httpx).

Both clients accept an optional shared httpx.AsyncClient. Without one, a
short-lived client is opened per call.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from web3pago_connector.clients.base import DeliveryResult
from web3pago_connector.domain.types import AuthorizationRequest, AuthorizationResponse

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0


async def post_json(
    url: str,
    body: dict[str, Any],
    *,
    client: httpx.AsyncClient | None = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> DeliveryResult:
    """POST a JSON body and fold every failure into a DeliveryResult."""
    try:
        if client is not None:
            response = await client.post(url, json=body, timeout=timeout)
        else:
            async with httpx.AsyncClient(timeout=timeout) as owned:
                response = await owned.post(url, json=body)
    except httpx.HTTPError as e:
        logger.warning("POST %s failed: %s", url, e)
        return DeliveryResult.failed(f"{type(e).__name__}: {e}")

    if not response.is_success:
        logger.warning("POST %s returned %s", url, response.status_code)
        return DeliveryResult.failed(
            f"Unexpected status {response.status_code}",
            status_code=response.status_code,
        )
    return DeliveryResult.ok(status_code=response.status_code)


class HttpProcessorNotifier:
    """Forwards every inbound operation to the Web3Pago API.

    Bodies are wrapped as {"operation": ..., "data": ...} so the processor
    can route requests that share a shape.
    """

    def __init__(
        self,
        url: str,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self.url = url
        self.client = client
        self.timeout = timeout

    async def send(self, operation: str, payload: dict[str, Any]) -> DeliveryResult:
        body = {"operation": operation, "data": payload}
        return await post_json(self.url, body, client=self.client, timeout=self.timeout)


class HttpPlatformCallback:
    """POSTs superseding authorization responses to the request's callbackUrl."""

    def __init__(
        self,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self.client = client
        self.timeout = timeout

    async def __call__(
        self,
        request: AuthorizationRequest,
        response: AuthorizationResponse,
    ) -> DeliveryResult:
        if not request.callback_url:
            return DeliveryResult.failed(
                f"Payment {request.payment_id} has no callbackUrl"
            )
        return await post_json(
            request.callback_url,
            response.to_dict(),
            client=self.client,
            timeout=self.timeout,
        )
