"""Reconciliation Service - resolves pending payment-app transactions.

The payment app confirms or rejects a payment out of band, quoting the
correlation id it received in the pending response. This service:
1. Claims the matching correlation record (at most once)
2. Persists the synthesized terminal response under the payment id
3. Hands the terminal response to the checkout platform

A confirmation for a record that is already resolved changes nothing and
never reaches the platform a second time, unless the earlier call claimed
the record without getting the response to the platform. A retry with the
same outcome then finishes that delivery.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from web3pago_connector.clients.base import PlatformCallback
from web3pago_connector.domain import builders
from web3pago_connector.domain.ids import random_string
from web3pago_connector.domain.types import (
    AuthorizationRequest,
    AuthorizationResponse,
    PendingStatus,
    PendingTransaction,
)
from web3pago_connector.events.emitter import AsyncEventEmitter
from web3pago_connector.events.types import (
    ConfirmationRejected,
    DomainEvent,
    EventMetadata,
    NotificationFailed,
    PaymentConfirmed,
)
from web3pago_connector.exceptions import InvalidPayloadError
from web3pago_connector.services.orchestrator import deliver_to_platform
from web3pago_connector.store.correlation import ClaimStatus, CorrelationStore

logger = logging.getLogger(__name__)


class ConfirmationStatus(str, Enum):
    """Outcome of a confirmation."""

    PROCESSED = "processed"
    DUPLICATE = "duplicate"  # Already resolved with the same outcome
    CONFLICT = "conflict"  # Already resolved with the opposite outcome
    NOT_FOUND = "not_found"
    ERROR = "error"


@dataclass(frozen=True)
class ConfirmationResult:
    """Result of approving or denying a pending transaction."""

    status: ConfirmationStatus
    correlation_id: str
    payment_id: str | None = None
    response: AuthorizationResponse | None = None
    message: str = ""

    @property
    def success(self) -> bool:
        """Processed and duplicate confirmations both leave the payment resolved as asked."""
        return self.status in (ConfirmationStatus.PROCESSED, ConfirmationStatus.DUPLICATE)


def _approved_response(request: AuthorizationRequest) -> AuthorizationResponse:
    return builders.approve(
        request,
        authorization_id=random_string(),
        nsu=random_string(),
        tid=random_string(),
    )


def _denied_response(request: AuthorizationRequest) -> AuthorizationResponse:
    return builders.deny(request, tid=random_string())


class ReconciliationService:
    """Service for payment-app confirmations.

    Usage:
        service = ReconciliationService(store, callback)
        result = await service.approve(correlation_id)
        if result.status == ConfirmationStatus.NOT_FOUND:
            ...
    """

    def __init__(
        self,
        store: CorrelationStore,
        callback: PlatformCallback,
        emitter: AsyncEventEmitter | None = None,
    ):
        self.store = store
        self.callback = callback
        self.emitter = emitter

    async def approve(self, correlation_id: str) -> ConfirmationResult:
        """Approve the pending transaction behind correlation_id."""
        return await self._confirm(correlation_id, PendingStatus.APPROVED)

    async def deny(self, correlation_id: str) -> ConfirmationResult:
        """Deny the pending transaction behind correlation_id."""
        return await self._confirm(correlation_id, PendingStatus.DENIED)

    async def _confirm(
        self,
        correlation_id: str,
        outcome: PendingStatus,
    ) -> ConfirmationResult:
        try:
            return await self._resolve(correlation_id, outcome)
        except Exception as e:
            logger.exception(
                "Error processing %s confirmation for %s",
                outcome.value,
                correlation_id,
            )
            await self._reject(correlation_id, outcome, ConfirmationStatus.ERROR)
            return ConfirmationResult(
                status=ConfirmationStatus.ERROR,
                correlation_id=correlation_id,
                message=str(e),
            )

    async def _resolve(
        self,
        correlation_id: str,
        outcome: PendingStatus,
    ) -> ConfirmationResult:
        build_response = _approved_response if outcome is PendingStatus.APPROVED else _denied_response
        claim = await self.store.claim_pending_transaction(correlation_id, outcome, build_response)

        if claim.status is ClaimStatus.NOT_FOUND or claim.record is None:
            logger.warning("Pending transaction %s not found", correlation_id)
            await self._reject(correlation_id, outcome, ConfirmationStatus.NOT_FOUND)
            return ConfirmationResult(
                status=ConfirmationStatus.NOT_FOUND,
                correlation_id=correlation_id,
                message="Transaction not found",
            )

        if claim.status is ClaimStatus.ALREADY_RESOLVED:
            return await self._already_resolved(claim.record, outcome)

        return await self._complete(claim.record)

    async def _complete(self, record: PendingTransaction) -> ConfirmationResult:
        """Persist the terminal response of a resolved record and notify the platform."""
        response = record.response
        if response is None:
            raise InvalidPayloadError(
                "Resolved transaction has no stored response",
                details={"correlation_id": record.correlation_id},
            )
        await self.store.save_authorization(response)

        delivery = await deliver_to_platform(self.callback, record.request, response)
        if delivery.success:
            await self.store.mark_notified(record.correlation_id)
        else:
            logger.warning(
                "Platform callback failed for payment %s: %s",
                response.payment_id,
                delivery.message,
            )
            await self._emit(NotificationFailed(
                metadata=EventMetadata.create(response.payment_id),
                target="platform",
                operation="callback",
                message=delivery.message,
            ))

        logger.info(
            "Pending transaction %s %s for payment %s",
            record.correlation_id,
            record.status.value,
            response.payment_id,
        )
        await self._emit(PaymentConfirmed(
            metadata=EventMetadata.create(response.payment_id),
            payment_id=response.payment_id,
            correlation_id=record.correlation_id,
            outcome=record.status.value,
            callback_delivered=delivery.success,
        ))
        return ConfirmationResult(
            status=ConfirmationStatus.PROCESSED,
            correlation_id=record.correlation_id,
            payment_id=response.payment_id,
            response=response,
        )

    async def _already_resolved(
        self,
        record: PendingTransaction,
        outcome: PendingStatus,
    ) -> ConfirmationResult:
        """Answer a confirmation for a record resolved by an earlier call."""
        if (
            record.status is outcome
            and record.notified_at is None
            and record.response is not None
        ):
            # An earlier call claimed the record but never got the
            # response to the platform.
            logger.info(
                "Pending transaction %s already %s but platform not notified, resuming",
                record.correlation_id,
                record.status.value,
            )
            return await self._complete(record)

        status = (
            ConfirmationStatus.DUPLICATE
            if record.status is outcome
            else ConfirmationStatus.CONFLICT
        )
        logger.info(
            "Pending transaction %s already %s, ignoring %s confirmation",
            record.correlation_id,
            record.status.value,
            outcome.value,
        )

        # The stored response is the one the resolving call would have written.
        if record.response is not None:
            persisted = await self.store.get_authorization(record.request.payment_id)
            if persisted is None or not persisted.is_terminal:
                await self.store.save_authorization(record.response)

        await self._reject(record.correlation_id, outcome, status)
        return ConfirmationResult(
            status=status,
            correlation_id=record.correlation_id,
            payment_id=record.request.payment_id,
            response=record.response,
            message=f"Transaction already {record.status.value}",
        )

    async def _reject(
        self,
        correlation_id: str,
        outcome: PendingStatus,
        status: ConfirmationStatus,
    ) -> None:
        await self._emit(ConfirmationRejected(
            metadata=EventMetadata.create(correlation_id),
            correlation_id=correlation_id,
            requested_outcome=outcome.value,
            reason=status.value,
        ))

    async def _emit(self, event: DomainEvent) -> None:
        if self.emitter is not None:
            await self.emitter.emit(event)
