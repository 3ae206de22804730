"""Authorization Orchestrator - connector-facing entry point.

Orchestrates an authorization through:
1. Best-effort notification of the downstream processor
2. Idempotent replay of an already-persisted response
3. Flow classification and execution
4. Delivery of the deferred response of asynchronous flows
5. Persistence of payment-app correlation records

Also answers cancellations, refunds and settlements with their fixed
simulated outcomes.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from web3pago_connector.clients.base import DeliveryResult, PlatformCallback, ProcessorNotifier
from web3pago_connector.domain import builders
from web3pago_connector.domain.ids import random_string
from web3pago_connector.domain.types import (
    AuthorizationRequest,
    AuthorizationResponse,
    CancellationRequest,
    CancellationResponse,
    PaymentAppData,
    RefundRequest,
    RefundResponse,
    SettlementRequest,
    SettlementResponse,
)
from web3pago_connector.events.emitter import AsyncEventEmitter
from web3pago_connector.events.types import (
    AuthorizationReplayed,
    AuthorizationResolved,
    DeferredResponseDelivered,
    DomainEvent,
    EventMetadata,
    NotificationFailed,
    OperationCompleted,
    PendingTransactionStored,
)
from web3pago_connector.exceptions import InvalidPayloadError, StoreError
from web3pago_connector.flows.classifier import execute_authorization
from web3pago_connector.flows.config import FlowConfig
from web3pago_connector.flows.registry import DEFAULT_FLOWS, Flow, FlowName
from web3pago_connector.store.correlation import CorrelationStore

logger = logging.getLogger(__name__)


async def deliver_to_platform(
    callback: PlatformCallback,
    request: AuthorizationRequest,
    response: AuthorizationResponse,
) -> DeliveryResult:
    """Invoke the platform callback, folding any exception into the result."""
    try:
        return await callback(request, response)
    except Exception as e:
        logger.exception("Platform callback raised for payment %s", request.payment_id)
        return DeliveryResult.failed(f"{type(e).__name__}: {e}")


class AuthorizationOrchestrator:
    """Authorization orchestration service.

    Only the orchestrator touches storage on the authorization path; flows
    stay pure and report what must happen through their FlowOutcome.
    """

    def __init__(
        self,
        store: CorrelationStore,
        *,
        notifier: ProcessorNotifier,
        callback: PlatformCallback,
        config: FlowConfig,
        flows: Mapping[FlowName, Flow] = DEFAULT_FLOWS,
        emitter: AsyncEventEmitter | None = None,
    ):
        self.store = store
        self.notifier = notifier
        self.callback = callback
        self.config = config
        self.flows = flows
        self.emitter = emitter

    # ------------------------------------------------------------------
    # Authorizations
    # ------------------------------------------------------------------

    async def authorize(self, request: AuthorizationRequest) -> AuthorizationResponse:
        """Resolve an authorization request.

        A response already persisted for the payment id is returned
        unchanged, so replays never observe a second outcome. Store read
        failures propagate: answering without the replay check could hand
        out a conflicting outcome.

        Args:
            request: Authorization request from the checkout platform

        Returns:
            The immediate response. Asynchronous flows additionally deliver
            a superseding response through the platform callback.
        """
        await self._notify_processor("authorization", request.payment_id, request.to_dict())

        persisted = await self.store.get_authorization(request.payment_id)
        if persisted is not None:
            logger.info(
                "Replaying persisted %s response for payment %s",
                persisted.status.value,
                request.payment_id,
            )
            await self._emit(AuthorizationReplayed(
                metadata=EventMetadata.create(request.payment_id),
                payment_id=request.payment_id,
                status=persisted.status.value,
            ))
            return persisted

        outcome = execute_authorization(request, self.config, self.flows)
        response = outcome.immediate
        logger.info(
            "Payment %s resolved by flow %s with status %s",
            request.payment_id,
            outcome.flow.value,
            response.status.value,
        )
        await self._emit(AuthorizationResolved(
            metadata=EventMetadata.create(request.payment_id),
            payment_id=request.payment_id,
            flow=outcome.flow.value,
            status=response.status.value,
            has_deferred=outcome.is_deferred,
        ))

        if outcome.deferred is not None:
            deferred = outcome.deferred()
            delivery = await self.save_and_retry(request, deferred)
            await self._emit(DeferredResponseDelivered(
                metadata=EventMetadata.create(request.payment_id),
                payment_id=request.payment_id,
                flow=outcome.flow.value,
                status=deferred.status.value,
                callback_delivered=delivery.success,
            ))

        if response.payment_app_data is not None:
            await self._store_pending_transaction(request, response, response.payment_app_data)
        elif response.is_terminal:
            await self._persist_best_effort(response)

        return response

    async def save_and_retry(
        self,
        request: AuthorizationRequest,
        response: AuthorizationResponse,
    ) -> DeliveryResult:
        """Persist a superseding response and hand it to the platform."""
        await self._persist_best_effort(response)
        delivery = await deliver_to_platform(self.callback, request, response)
        if not delivery.success:
            await self._discard_failure("platform", "callback", request.payment_id, delivery)
        return delivery

    async def _store_pending_transaction(
        self,
        request: AuthorizationRequest,
        response: AuthorizationResponse,
        payment_app_data: PaymentAppData,
    ) -> None:
        """Persist the correlation id -> request mapping of a payment-app response.

        The pending response itself is persisted too, so a replayed
        authorization returns the same correlation id.
        """
        try:
            payload = payment_app_data.parsed_payload()
            correlation_id = payload.get("transactionId")
            if not correlation_id:
                raise InvalidPayloadError(
                    "Payment app payload has no transactionId",
                    details={"payment_id": request.payment_id},
                )
            await self.store.save_pending_transaction(str(correlation_id), request)
            await self.store.save_authorization(response)
        except (InvalidPayloadError, StoreError) as e:
            logger.error(
                "Error storing pending transaction for payment %s: %s",
                request.payment_id,
                e,
            )
            await self._discard_failure(
                "store", "pending-transaction", request.payment_id, DeliveryResult.failed(str(e))
            )
            return

        logger.info(
            "Stored pending transaction %s for payment %s",
            correlation_id,
            request.payment_id,
        )
        await self._emit(PendingTransactionStored(
            metadata=EventMetadata.create(request.payment_id),
            payment_id=request.payment_id,
            correlation_id=str(correlation_id),
        ))

    async def _persist_best_effort(self, response: AuthorizationResponse) -> None:
        try:
            await self.store.save_authorization(response)
        except StoreError as e:
            logger.error("Error persisting response for payment %s: %s", response.payment_id, e)
            await self._discard_failure(
                "store", "authorization", response.payment_id, DeliveryResult.failed(str(e))
            )

    # ------------------------------------------------------------------
    # Cancellations / Refunds / Settlements
    # ------------------------------------------------------------------

    async def cancel(self, request: CancellationRequest) -> CancellationResponse:
        """Cancellations always succeed with a fresh cancellation id."""
        await self._notify_processor("cancellation", request.payment_id, request.to_dict())
        response = builders.approve_cancellation(request, cancellation_id=random_string())
        await self._operation_completed("cancellation", request.payment_id, request.request_id, True)
        return response

    async def refund(self, request: RefundRequest) -> RefundResponse:
        """Refunds are always denied."""
        await self._notify_processor("refund", request.payment_id, request.to_dict())
        response = builders.deny_refund(request)
        await self._operation_completed("refund", request.payment_id, request.request_id, False)
        return response

    async def settle(self, request: SettlementRequest) -> SettlementResponse:
        """Settlements are always denied."""
        await self._notify_processor("settlement", request.payment_id, request.to_dict())
        response = builders.deny_settlement(request)
        await self._operation_completed("settlement", request.payment_id, request.request_id, False)
        return response

    # ------------------------------------------------------------------
    # Side effects
    # ------------------------------------------------------------------

    async def _notify_processor(
        self,
        operation: str,
        payment_id: str,
        payload: dict[str, Any],
    ) -> DeliveryResult:
        """Forward an operation to the processor. Failures are logged and discarded."""
        try:
            result = await self.notifier.send(operation, payload)
        except Exception as e:
            logger.exception("Processor notifier raised for payment %s", payment_id)
            result = DeliveryResult.failed(f"{type(e).__name__}: {e}")

        if not result.success:
            await self._discard_failure("processor", operation, payment_id, result)
        return result

    async def _discard_failure(
        self,
        target: str,
        operation: str,
        payment_id: str,
        result: DeliveryResult,
    ) -> None:
        logger.warning(
            "Discarding failed %s %s for payment %s: %s",
            target,
            operation,
            payment_id,
            result.message,
        )
        await self._emit(NotificationFailed(
            metadata=EventMetadata.create(payment_id),
            target=target,
            operation=operation,
            message=result.message,
        ))

    async def _operation_completed(
        self,
        operation: str,
        payment_id: str,
        request_id: str,
        approved: bool,
    ) -> None:
        logger.info(
            "%s %s for payment %s",
            operation.capitalize(),
            "approved" if approved else "denied",
            payment_id,
        )
        await self._emit(OperationCompleted(
            metadata=EventMetadata.create(payment_id),
            payment_id=payment_id,
            operation=operation,
            request_id=request_id,
            approved=approved,
        ))

    async def _emit(self, event: DomainEvent) -> None:
        if self.emitter is not None:
            await self.emitter.emit(event)
