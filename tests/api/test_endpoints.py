"""API endpoint tests.

Tests the FastAPI endpoints for the Payment Provider Protocol, the
payment-app confirmation webhooks and the operational routes.
"""

import json
from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from web3pago_connector.api.app import create_app, lifespan
from web3pago_connector.config import get_settings
from web3pago_connector.connector import ConnectorConfig, Web3PagoConnector
from web3pago_connector.store.correlation import CorrelationStore
from web3pago_connector.store.memory import InMemoryKeyValueStore
from web3pago_connector.store.sql import SqlKeyValueStore

pytestmark = pytest.mark.asyncio


@pytest.fixture
def app(connector):
    return create_app(connector)


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


def _authorization(payment_id: str, **fields) -> dict:
    body = {
        "paymentId": payment_id,
        "value": 100.0,
        "currency": "USD",
        "paymentMethod": "Visa",
        "transactionId": f"tx-{payment_id}",
        "callbackUrl": f"https://platform.test/callbacks/{payment_id}",
    }
    body.update(fields)
    return body


def _card(number: str) -> dict:
    return {
        "holder": "Ada Lovelace",
        "number": number,
        "csc": "123",
        "expiration": {"month": "12", "year": "2030"},
    }


async def _pending_correlation_id(client: AsyncClient, payment_id: str = "p-app") -> str:
    response = await client.post(
        "/payments",
        json=_authorization(payment_id, paymentMethod="Promissories"),
    )
    assert response.status_code == 200, response.text
    payload = response.json()["paymentAppData"]["payload"]
    return json.loads(payload)["transactionId"]


class TestHealthEndpoints:
    """Test health check endpoints."""

    async def test_health_check(self, client: AsyncClient):
        """Health endpoint should return 200."""
        response = await client.get("/health")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "healthy"
        assert data["store"] == "healthy"
        assert "timestamp" in data

    async def test_readiness_check(self, client: AsyncClient):
        response = await client.get("/ready")
        assert response.status_code == 200
        assert response.json()["status"] == "ready"

    async def test_liveness_check(self, client: AsyncClient):
        response = await client.get("/live")
        assert response.status_code == 200
        assert response.json()["status"] == "alive"


class TestManifest:
    """Test GET /manifest."""

    async def test_lists_payment_methods(self, client: AsyncClient):
        response = await client.get("/manifest")
        assert response.status_code == 200

        names = [m["name"] for m in response.json()["paymentMethods"]]
        assert "Promissories" in names
        assert "BankInvoice" in names
        assert "Visa" in names


class TestAuthorize:
    """Test POST /payments."""

    async def test_approved_card(self, client: AsyncClient):
        response = await client.post(
            "/payments", json=_authorization("p1", card=_card("4444333322221111"))
        )

        assert response.status_code == 200, response.text
        data = response.json()
        assert data["paymentId"] == "p1"
        assert data["status"] == "approved"
        assert data["authorizationId"]

    async def test_async_approved_card(self, client: AsyncClient, callback):
        response = await client.post(
            "/payments", json=_authorization("p2", card=_card("4222222222222224"))
        )

        assert response.status_code == 200
        assert response.json()["status"] == "pending"
        assert response.json()["delayToCancel"] == 1000
        assert callback.responses_for("p2")[0].status.value == "approved"

    async def test_replay_returns_persisted_response(self, client: AsyncClient):
        body = _authorization("p1", card=_card("4444333322221111"))
        first = await client.post("/payments", json=body)
        second = await client.post("/payments", json=body)

        assert second.json() == first.json()

    async def test_payment_app(self, client: AsyncClient, store):
        correlation_id = await _pending_correlation_id(client)

        record = await store.get_pending_transaction(correlation_id)
        assert record is not None
        assert record.request.payment_id == "p-app"

    async def test_security_code_not_forwarded(self, client: AsyncClient, notifier):
        await client.post("/payments", json=_authorization("p1", card=_card("4444333322221111")))

        operation, payload = notifier.sent[0]
        assert operation == "authorization"
        assert "csc" not in payload["card"]

    async def test_missing_payment_id_is_rejected(self, client: AsyncClient):
        response = await client.post("/payments", json={"value": 10})
        assert response.status_code == 422


class TestOperations:
    """Test cancellation, refund and settlement routes."""

    async def test_cancellation(self, client: AsyncClient):
        response = await client.post(
            "/payments/p1/cancellations",
            json={"paymentId": "p1", "requestId": "r1", "authorizationId": "a1"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["paymentId"] == "p1"
        assert data["requestId"] == "r1"
        assert data["cancellationId"]

    async def test_refund(self, client: AsyncClient):
        response = await client.post(
            "/payments/p1/refunds",
            json={"requestId": "r2", "value": 50, "settleId": "s1"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["paymentId"] == "p1"
        assert data["refundId"] is None
        assert data["value"] == 0
        assert data["code"] == "refund-manually"

    async def test_settlement(self, client: AsyncClient):
        response = await client.post(
            "/payments/p1/settlements",
            json={"requestId": "r3", "value": 100},
        )

        assert response.status_code == 200
        assert response.json()["settleId"] is None
        assert response.json()["value"] == 0

    async def test_path_payment_id_wins(self, client: AsyncClient):
        response = await client.post(
            "/payments/p1/cancellations",
            json={"paymentId": "other", "requestId": "r1"},
        )
        assert response.json()["paymentId"] == "p1"


class TestConfirmations:
    """Test the payment-app webhooks."""

    async def test_approve(self, client: AsyncClient, callback, store):
        correlation_id = await _pending_correlation_id(client)

        response = await client.post(f"/approve-payment/{correlation_id}")

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert callback.responses_for("p-app")[0].status.value == "approved"
        assert (await store.get_authorization("p-app")).status.value == "approved"

    async def test_deny(self, client: AsyncClient, callback):
        correlation_id = await _pending_correlation_id(client)

        response = await client.post(f"/deny-payment/{correlation_id}")

        assert response.status_code == 200
        assert callback.responses_for("p-app")[0].status.value == "denied"

    async def test_unknown_id(self, client: AsyncClient):
        response = await client.post("/deny-payment/unknown-id")

        assert response.status_code == 404
        assert response.json() == {"error": "Transaction not found"}

    async def test_duplicate_approve(self, client: AsyncClient, callback):
        correlation_id = await _pending_correlation_id(client)
        await client.post(f"/approve-payment/{correlation_id}")

        response = await client.post(f"/approve-payment/{correlation_id}")

        assert response.status_code == 200
        assert len(callback.calls) == 1

    async def test_opposite_outcome_conflicts(self, client: AsyncClient, callback):
        correlation_id = await _pending_correlation_id(client)
        await client.post(f"/approve-payment/{correlation_id}")

        response = await client.post(f"/deny-payment/{correlation_id}")

        assert response.status_code == 409
        assert response.json() == {"error": "Transaction already resolved"}
        assert len(callback.calls) == 1

    async def test_store_failure(self, callback, notifier, flow_config):
        class BrokenStore(InMemoryKeyValueStore):
            async def get(self, bucket, key):
                raise RuntimeError("store offline")

        connector = Web3PagoConnector(
            CorrelationStore(BrokenStore()),
            ConnectorConfig(flows=flow_config),
            notifier=notifier,
            callback=callback,
        )
        transport = ASGITransport(app=create_app(connector), raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.post("/approve-payment/c1")

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}


class TestUnknownEndpoints:
    """Test the catch-all behaviour."""

    async def test_unknown_path(self, client: AsyncClient):
        response = await client.get("/nothing-here")

        assert response.status_code == 404
        assert response.json() == {"error": "Endpoint not found"}

    async def test_wrong_method(self, client: AsyncClient):
        response = await client.get("/approve-payment/c1")

        assert response.status_code == 404
        assert response.json() == {"error": "Endpoint not found"}


class TestErrorMapping:
    """Test exception handlers."""

    async def test_unexpected_error_is_500(self, callback, flow_config):
        class ExplodingNotifier:
            async def send(self, operation, payload):
                raise RuntimeError("boom")

        class ExplodingReadsStore(InMemoryKeyValueStore):
            async def get(self, bucket, key):
                raise RuntimeError("boom")

        connector = Web3PagoConnector(
            CorrelationStore(ExplodingReadsStore()),
            ConnectorConfig(flows=flow_config),
            notifier=ExplodingNotifier(),
            callback=callback,
        )
        transport = ASGITransport(app=create_app(connector), raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.post("/payments", json=_authorization("p1"))

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}

    async def test_store_error_is_500(self, callback, notifier, flow_config):
        from web3pago_connector.exceptions import StoreError

        class FailingReadsStore(InMemoryKeyValueStore):
            async def get(self, bucket, key):
                raise StoreError(bucket.value, key, "connection refused")

        connector = Web3PagoConnector(
            CorrelationStore(FailingReadsStore()),
            ConnectorConfig(flows=flow_config),
            notifier=notifier,
            callback=callback,
        )
        async with AsyncClient(
            transport=ASGITransport(app=create_app(connector)), base_url="http://test"
        ) as client:
            response = await client.post("/payments", json=_authorization("p1"))
            health = await client.get("/health")

        assert response.status_code == 500
        assert response.json()["code"] == "store_error"
        assert health.json()["status"] == "degraded"

    async def test_uninitialized_connector_is_500(self):
        transport = ASGITransport(app=create_app(), raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.post("/approve-payment/c1")

        assert response.status_code == 500
        assert response.json() == {
            "error": "Internal server error",
            "code": "configuration_error",
        }


class TestLifespan:
    """Test the SQL-backed wiring built from settings."""

    async def test_lifespan_wires_sql_connector(self, monkeypatch, tmp_path):
        monkeypatch.setattr("web3pago_connector.config.load_dotenv", lambda: False)
        monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path}/connector.db")
        monkeypatch.delenv("WEB3PAGO_API_URL", raising=False)
        get_settings.cache_clear()

        app = create_app()
        try:
            async with lifespan(app):
                assert isinstance(app.state.connector.store._kv, SqlKeyValueStore)

                transport = ASGITransport(app=app)
                async with AsyncClient(transport=transport, base_url="http://test") as client:
                    body = _authorization("p1", card=_card("4444333322221111"))
                    first = await client.post("/payments", json=body)
                    second = await client.post("/payments", json=body)
                    health = await client.get("/health")

            assert first.json()["status"] == "approved"
            assert second.json() == first.json()
            assert health.json()["store"] == "healthy"
            assert app.state.connector is None
        finally:
            get_settings.cache_clear()
