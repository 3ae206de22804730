"""Correlation store - typed access to the connector buckets.

Buckets:
- authorizations: payment id -> latest AuthorizationResponse
- pending-transactions: correlation id -> PendingTransaction

Pending transactions are resolved with a versioned compare-and-set, so a
confirmation delivered twice (or approve racing deny) resolves the record
exactly once. A second versioned write records that the platform was
notified, so an interrupted confirmation can be finished by a retry.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum

from web3pago_connector.domain.types import (
    AuthorizationRequest,
    AuthorizationResponse,
    PendingStatus,
    PendingTransaction,
)
from web3pago_connector.store.base import Bucket, KeyValueStore

logger = logging.getLogger(__name__)

# Attempts before giving up on a contended claim
MAX_CLAIM_ATTEMPTS = 3


class ClaimStatus(str, Enum):
    """Result of claiming a pending transaction."""

    CLAIMED = "claimed"  # This caller resolved the record
    NOT_FOUND = "not_found"  # Unknown correlation id
    ALREADY_RESOLVED = "already_resolved"  # Resolved earlier (or by a concurrent caller)


@dataclass(frozen=True)
class ClaimResult:
    """Outcome of claim_pending_transaction."""

    status: ClaimStatus
    record: PendingTransaction | None = None


class CorrelationStore:
    """Typed facade over a KeyValueStore."""

    def __init__(self, kv: KeyValueStore) -> None:
        self._kv = kv

    # ------------------------------------------------------------------
    # Authorizations
    # ------------------------------------------------------------------

    async def get_authorization(self, payment_id: str) -> AuthorizationResponse | None:
        stored = await self._kv.get(Bucket.AUTHORIZATIONS, payment_id)
        if stored is None or not stored.value:
            return None
        return AuthorizationResponse.from_dict(stored.value)

    async def save_authorization(self, response: AuthorizationResponse) -> None:
        await self._kv.put(Bucket.AUTHORIZATIONS, response.payment_id, response.to_dict())

    # ------------------------------------------------------------------
    # Pending transactions
    # ------------------------------------------------------------------

    async def get_pending_transaction(self, correlation_id: str) -> PendingTransaction | None:
        stored = await self._kv.get(Bucket.PENDING_TRANSACTIONS, correlation_id)
        if stored is None:
            return None
        return PendingTransaction.from_dict(stored.value)

    async def save_pending_transaction(
        self,
        correlation_id: str,
        request: AuthorizationRequest,
    ) -> PendingTransaction:
        """Record that correlation_id awaits confirmation for request."""
        record = PendingTransaction(
            correlation_id=correlation_id,
            request=request,
            status=PendingStatus.PENDING,
            created_at=datetime.now(timezone.utc),
        )
        await self._kv.put(Bucket.PENDING_TRANSACTIONS, correlation_id, record.to_dict())
        return record

    async def claim_pending_transaction(
        self,
        correlation_id: str,
        outcome: PendingStatus,
        build_response: Callable[[AuthorizationRequest], AuthorizationResponse],
    ) -> ClaimResult:
        """Move a pending transaction to outcome, at most once.

        The terminal response is built once, by the caller that wins the
        claim, and stored in the record so later readers see the same ids.

        Args:
            correlation_id: Key of the pending transaction
            outcome: PendingStatus.APPROVED or PendingStatus.DENIED
            build_response: Synthesizes the terminal response from the
                stored request

        Returns:
            ClaimResult. On CLAIMED the record is the resolved one; on
            ALREADY_RESOLVED it is the record as resolved earlier.
        """
        if outcome is PendingStatus.PENDING:
            raise ValueError("outcome must be approved or denied")

        for _ in range(MAX_CLAIM_ATTEMPTS):
            stored = await self._kv.get(Bucket.PENDING_TRANSACTIONS, correlation_id)
            if stored is None:
                return ClaimResult(status=ClaimStatus.NOT_FOUND)

            record = PendingTransaction.from_dict(stored.value)
            if record.is_resolved:
                return ClaimResult(status=ClaimStatus.ALREADY_RESOLVED, record=record)

            resolved = replace(
                record,
                status=outcome,
                resolved_at=datetime.now(timezone.utc),
                response=build_response(record.request),
            )
            written = await self._kv.replace(
                Bucket.PENDING_TRANSACTIONS,
                correlation_id,
                resolved.to_dict(),
                expected_version=stored.version,
            )
            if written:
                return ClaimResult(status=ClaimStatus.CLAIMED, record=resolved)

            logger.info(
                "Pending transaction %s changed while claiming, re-reading",
                correlation_id,
            )

        stored = await self._kv.get(Bucket.PENDING_TRANSACTIONS, correlation_id)
        if stored is None:
            return ClaimResult(status=ClaimStatus.NOT_FOUND)
        return ClaimResult(
            status=ClaimStatus.ALREADY_RESOLVED,
            record=PendingTransaction.from_dict(stored.value),
        )

    async def mark_notified(self, correlation_id: str) -> bool:
        """Record that the platform accepted the terminal response.

        Returns:
            True if this call set notified_at, False if the record is
            missing, still pending or was already marked.
        """
        for _ in range(MAX_CLAIM_ATTEMPTS):
            stored = await self._kv.get(Bucket.PENDING_TRANSACTIONS, correlation_id)
            if stored is None:
                return False

            record = PendingTransaction.from_dict(stored.value)
            if not record.is_resolved or record.notified_at is not None:
                return False

            notified = replace(record, notified_at=datetime.now(timezone.utc))
            written = await self._kv.replace(
                Bucket.PENDING_TRANSACTIONS,
                correlation_id,
                notified.to_dict(),
                expected_version=stored.version,
            )
            if written:
                return True

        logger.warning("Could not mark pending transaction %s as notified", correlation_id)
        return False
