"""Tests for payment-app confirmation reconciliation.

Tests verify:
1. Approve/deny resolve a pending transaction and notify the platform
2. Unknown correlation ids are reported without mutating anything
3. Duplicate and opposite confirmations never reach the platform again
4. Unexpected failures are reported as errors, not raised
5. A retry finishes a confirmation whose platform notification never happened
"""

import asyncio

import pytest

from web3pago_connector.domain.types import AuthorizationStatus, PendingStatus
from web3pago_connector.events.types import ConfirmationRejected, PaymentConfirmed
from web3pago_connector.exceptions import StoreError
from web3pago_connector.services.reconciliation import (
    ConfirmationResult,
    ConfirmationStatus,
    ReconciliationService,
)
from web3pago_connector.store.base import Bucket
from web3pago_connector.store.correlation import CorrelationStore
from web3pago_connector.store.memory import InMemoryKeyValueStore

pytestmark = pytest.mark.asyncio


async def _pending_payment(orchestrator, make_payment_app_request, payment_id="p-app"):
    """Authorize through the payment app and return (request, correlation id)."""
    request = make_payment_app_request(payment_id)
    response = await orchestrator.authorize(request)
    return request, response.payment_app_data.parsed_payload()["transactionId"]


class BrokenStore(InMemoryKeyValueStore):
    async def get(self, bucket, key):
        raise RuntimeError("store offline")


class FlakyAuthorizationWrites(InMemoryKeyValueStore):
    """Fails the next `failures` writes to the authorizations bucket."""

    def __init__(self):
        super().__init__()
        self.failures = 0

    async def put(self, bucket, key, value):
        if bucket is Bucket.AUTHORIZATIONS and self.failures:
            self.failures -= 1
            raise StoreError(bucket.value, key, "database is locked")
        return await super().put(bucket, key, value)


class TestApprove:
    """Test approving a pending transaction."""

    async def test_approve(
        self, orchestrator, reconciliation, store, callback, make_payment_app_request
    ):
        request, correlation_id = await _pending_payment(orchestrator, make_payment_app_request)

        result = await reconciliation.approve(correlation_id)

        assert result.status is ConfirmationStatus.PROCESSED
        assert result.success
        assert result.payment_id == "p-app"
        assert result.response.status is AuthorizationStatus.APPROVED
        assert result.response.authorization_id
        assert result.response.nsu
        assert result.response.tid

        assert callback.calls == [(request, result.response)]
        assert await store.get_authorization("p-app") == result.response

        record = await store.get_pending_transaction(correlation_id)
        assert record.status is PendingStatus.APPROVED
        assert record.resolved_at is not None
        assert record.response == result.response

    async def test_replayed_authorize_after_approve(
        self, orchestrator, reconciliation, make_payment_app_request
    ):
        """The confirmed outcome answers later replays of the authorization."""
        request, correlation_id = await _pending_payment(orchestrator, make_payment_app_request)
        result = await reconciliation.approve(correlation_id)

        replay = await orchestrator.authorize(request)

        assert replay == result.response

    async def test_emits_confirmed_event(
        self, orchestrator, reconciliation, events, make_payment_app_request
    ):
        _, correlation_id = await _pending_payment(orchestrator, make_payment_app_request)
        await reconciliation.approve(correlation_id)

        confirmed = [e for e in events if isinstance(e, PaymentConfirmed)]
        assert len(confirmed) == 1
        assert confirmed[0].correlation_id == correlation_id
        assert confirmed[0].outcome == "approved"
        assert confirmed[0].callback_delivered is True


class TestDeny:
    """Test denying a pending transaction."""

    async def test_deny(self, orchestrator, reconciliation, store, callback, make_payment_app_request):
        _, correlation_id = await _pending_payment(orchestrator, make_payment_app_request)

        result = await reconciliation.deny(correlation_id)

        assert result.status is ConfirmationStatus.PROCESSED
        assert result.response.status is AuthorizationStatus.DENIED
        assert result.response.tid
        assert result.response.authorization_id is None
        assert callback.responses_for("p-app") == [result.response]
        assert (await store.get_authorization("p-app")).status is AuthorizationStatus.DENIED

    async def test_deny_unknown_id(self, reconciliation, kv, callback, events):
        """deny("unknown-id") reports not found and changes nothing."""
        result = await reconciliation.deny("unknown-id")

        assert result.status is ConfirmationStatus.NOT_FOUND
        assert not result.success
        assert result.message == "Transaction not found"
        assert len(kv) == 0
        assert callback.calls == []
        rejected = [e for e in events if isinstance(e, ConfirmationRejected)]
        assert rejected[0].reason == "not_found"

    async def test_approve_unknown_id(self, reconciliation, kv):
        result = await reconciliation.approve("unknown-id")

        assert result.status is ConfirmationStatus.NOT_FOUND
        assert kv.keys(Bucket.AUTHORIZATIONS) == []


class TestDuplicates:
    """Test confirmations for already-resolved transactions."""

    async def test_duplicate_approve(
        self, orchestrator, reconciliation, store, callback, make_payment_app_request
    ):
        _, correlation_id = await _pending_payment(orchestrator, make_payment_app_request)
        first = await reconciliation.approve(correlation_id)

        second = await reconciliation.approve(correlation_id)

        assert second.status is ConfirmationStatus.DUPLICATE
        assert second.success
        assert second.response == first.response
        assert len(callback.calls) == 1
        assert await store.get_authorization("p-app") == first.response

    async def test_deny_after_approve_conflicts(
        self, orchestrator, reconciliation, store, callback, events, make_payment_app_request
    ):
        _, correlation_id = await _pending_payment(orchestrator, make_payment_app_request)
        first = await reconciliation.approve(correlation_id)

        second = await reconciliation.deny(correlation_id)

        assert second.status is ConfirmationStatus.CONFLICT
        assert not second.success
        assert len(callback.calls) == 1
        assert (await store.get_authorization("p-app")) == first.response
        record = await store.get_pending_transaction(correlation_id)
        assert record.status is PendingStatus.APPROVED
        rejected = [e for e in events if isinstance(e, ConfirmationRejected)]
        assert [r.reason for r in rejected] == ["conflict"]

    async def test_concurrent_confirmations_resolve_once(
        self, orchestrator, reconciliation, callback, make_payment_app_request
    ):
        """Approve racing deny resolves the transaction exactly once."""
        _, correlation_id = await _pending_payment(orchestrator, make_payment_app_request)

        results = await asyncio.gather(
            reconciliation.approve(correlation_id),
            reconciliation.deny(correlation_id),
            reconciliation.approve(correlation_id),
        )

        processed = [r for r in results if r.status is ConfirmationStatus.PROCESSED]
        assert len(processed) == 1
        assert len(callback.calls) == 1

    async def test_duplicate_repairs_missing_authorization(
        self, kv, store, reconciliation, callback, orchestrator, make_payment_app_request
    ):
        """A resolved record whose response never reached the authorizations bucket is repaired."""
        _, correlation_id = await _pending_payment(orchestrator, make_payment_app_request)
        first = await reconciliation.approve(correlation_id)
        await kv.put(Bucket.AUTHORIZATIONS, "p-app", {})

        second = await reconciliation.approve(correlation_id)

        assert second.status is ConfirmationStatus.DUPLICATE
        assert await store.get_authorization("p-app") == first.response
        assert len(callback.calls) == 1


class TestFailures:
    """Test failure handling."""

    async def test_callback_failure_still_processed(
        self, orchestrator, store, events, emitter, make_payment_app_request
    ):
        from web3pago_connector.clients.stub import RecordingPlatformCallback

        failing = RecordingPlatformCallback(fail=True)
        service = ReconciliationService(store, failing, emitter=emitter)
        _, correlation_id = await _pending_payment(orchestrator, make_payment_app_request)

        result = await service.approve(correlation_id)

        assert result.status is ConfirmationStatus.PROCESSED
        assert len(failing.calls) == 1
        confirmed = [e for e in events if isinstance(e, PaymentConfirmed)]
        assert confirmed[0].callback_delivered is False

    async def test_unexpected_error_reported(self, callback):
        service = ReconciliationService(CorrelationStore(BrokenStore()), callback)

        result = await service.approve("c1")

        assert result == ConfirmationResult(
            status=ConfirmationStatus.ERROR,
            correlation_id="c1",
            message="store offline",
        )
        assert callback.calls == []


class TestInterruptedConfirmation:
    """Test retries of confirmations that stopped before the platform was notified."""

    async def test_retry_after_failed_authorization_write(
        self, callback, notifier, flow_config, make_payment_app_request
    ):
        from web3pago_connector.services.orchestrator import AuthorizationOrchestrator

        kv = FlakyAuthorizationWrites()
        store = CorrelationStore(kv)
        orchestrator = AuthorizationOrchestrator(
            store, notifier=notifier, callback=callback, config=flow_config
        )
        service = ReconciliationService(store, callback)
        _, correlation_id = await _pending_payment(orchestrator, make_payment_app_request)
        kv.failures = 1

        first = await service.approve(correlation_id)
        second = await service.approve(correlation_id)

        assert first.status is ConfirmationStatus.ERROR
        assert second.status is ConfirmationStatus.PROCESSED
        assert callback.responses_for("p-app") == [second.response]
        assert await store.get_authorization("p-app") == second.response
        record = await store.get_pending_transaction(correlation_id)
        assert record.notified_at is not None

    async def test_retry_after_failed_callback(
        self, orchestrator, store, make_payment_app_request
    ):
        from web3pago_connector.clients.stub import RecordingPlatformCallback

        flaky = RecordingPlatformCallback(fail=True)
        service = ReconciliationService(store, flaky)
        _, correlation_id = await _pending_payment(orchestrator, make_payment_app_request)

        first = await service.approve(correlation_id)
        assert (await store.get_pending_transaction(correlation_id)).notified_at is None

        flaky.fail = False
        second = await service.approve(correlation_id)
        third = await service.approve(correlation_id)

        assert first.status is ConfirmationStatus.PROCESSED
        assert second.status is ConfirmationStatus.PROCESSED
        assert second.response == first.response
        assert third.status is ConfirmationStatus.DUPLICATE
        assert len(flaky.calls) == 2
        assert (await store.get_pending_transaction(correlation_id)).notified_at is not None

    async def test_opposite_outcome_does_not_resume(
        self, orchestrator, store, make_payment_app_request
    ):
        from web3pago_connector.clients.stub import RecordingPlatformCallback

        flaky = RecordingPlatformCallback(fail=True)
        service = ReconciliationService(store, flaky)
        _, correlation_id = await _pending_payment(orchestrator, make_payment_app_request)
        await service.approve(correlation_id)
        flaky.fail = False

        result = await service.deny(correlation_id)

        assert result.status is ConfirmationStatus.CONFLICT
        assert len(flaky.calls) == 1
