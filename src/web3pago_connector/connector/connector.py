"""Connector Facade - single integration path for the HTTP layer and CLI.

Usage:
    connector = Web3PagoConnector.create(store, config=config, http_client=client)

    # Payment Provider Protocol
    response = await connector.authorize(request)
    response = await connector.cancel(cancellation)

    # Payment-app confirmations
    result = await connector.approve_payment(correlation_id)

The facade:
- Wires the orchestrator and reconciliation service to one store
- Chooses HTTP or no-op outbound clients from the configuration
- Shares one event emitter between both services
"""

from __future__ import annotations

import logging

import httpx

from web3pago_connector.clients.base import PlatformCallback, ProcessorNotifier
from web3pago_connector.clients.http import HttpPlatformCallback, HttpProcessorNotifier
from web3pago_connector.clients.stub import NoopProcessorNotifier
from web3pago_connector.connector.config import ConnectorConfig
from web3pago_connector.domain.types import (
    AuthorizationRequest,
    AuthorizationResponse,
    CancellationRequest,
    CancellationResponse,
    PendingTransaction,
    RefundRequest,
    RefundResponse,
    SettlementRequest,
    SettlementResponse,
)
from web3pago_connector.events.emitter import AsyncEventEmitter
from web3pago_connector.exceptions import StoreError
from web3pago_connector.services.orchestrator import AuthorizationOrchestrator
from web3pago_connector.services.reconciliation import (
    ConfirmationResult,
    ReconciliationService,
)
from web3pago_connector.store.base import KeyValueStore
from web3pago_connector.store.correlation import CorrelationStore

logger = logging.getLogger(__name__)

# Key probed by health checks; never written
_HEALTH_PROBE_KEY = "__health__"


class Web3PagoConnector:
    """Payment connector between the checkout platform and Web3Pago."""

    def __init__(
        self,
        store: CorrelationStore,
        config: ConnectorConfig,
        *,
        notifier: ProcessorNotifier,
        callback: PlatformCallback,
        emitter: AsyncEventEmitter | None = None,
    ):
        self.store = store
        self.config = config
        self.emitter = emitter or AsyncEventEmitter()
        self.orchestrator = AuthorizationOrchestrator(
            store,
            notifier=notifier,
            callback=callback,
            config=config.flows,
            emitter=self.emitter,
        )
        self.reconciliation = ReconciliationService(store, callback, emitter=self.emitter)

    @classmethod
    def create(
        cls,
        kv: KeyValueStore,
        *,
        config: ConnectorConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
        emitter: AsyncEventEmitter | None = None,
    ) -> Web3PagoConnector:
        """Build a connector with HTTP outbound clients.

        Args:
            kv: Backend for both connector buckets
            config: Connector configuration (defaults apply when omitted)
            http_client: Shared client for outbound calls; one is opened
                per call when omitted
            emitter: Event emitter to publish connector events on
        """
        config = config or ConnectorConfig()
        notifier: ProcessorNotifier
        if config.processor_url:
            notifier = HttpProcessorNotifier(
                config.processor_url,
                client=http_client,
                timeout=config.http_timeout_seconds,
            )
        else:
            logger.info("No processor URL configured, processor notification disabled")
            notifier = NoopProcessorNotifier()

        return cls(
            CorrelationStore(kv),
            config,
            notifier=notifier,
            callback=HttpPlatformCallback(client=http_client, timeout=config.http_timeout_seconds),
            emitter=emitter,
        )

    # =========================================================================
    # Payment Provider Protocol
    # =========================================================================

    async def authorize(self, request: AuthorizationRequest) -> AuthorizationResponse:
        return await self.orchestrator.authorize(request)

    async def cancel(self, request: CancellationRequest) -> CancellationResponse:
        return await self.orchestrator.cancel(request)

    async def refund(self, request: RefundRequest) -> RefundResponse:
        return await self.orchestrator.refund(request)

    async def settle(self, request: SettlementRequest) -> SettlementResponse:
        return await self.orchestrator.settle(request)

    # =========================================================================
    # Payment-app confirmations
    # =========================================================================

    async def approve_payment(self, correlation_id: str) -> ConfirmationResult:
        return await self.reconciliation.approve(correlation_id)

    async def deny_payment(self, correlation_id: str) -> ConfirmationResult:
        return await self.reconciliation.deny(correlation_id)

    # =========================================================================
    # Inspection
    # =========================================================================

    async def get_authorization(self, payment_id: str) -> AuthorizationResponse | None:
        return await self.store.get_authorization(payment_id)

    async def get_pending_transaction(self, correlation_id: str) -> PendingTransaction | None:
        return await self.store.get_pending_transaction(correlation_id)

    async def store_healthy(self) -> bool:
        """True if the backing store answers reads."""
        try:
            await self.store.get_authorization(_HEALTH_PROBE_KEY)
        except StoreError as e:
            logger.warning("Store health probe failed: %s", e)
            return False
        return True
