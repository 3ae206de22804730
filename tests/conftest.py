"""Pytest fixtures for connector tests."""

from __future__ import annotations

from collections.abc import AsyncGenerator, Callable
from decimal import Decimal
from typing import Any

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

from web3pago_connector.clients.stub import RecordingPlatformCallback, RecordingProcessorNotifier
from web3pago_connector.connector import ConnectorConfig, Web3PagoConnector
from web3pago_connector.database import create_session_factory, create_tables
from web3pago_connector.domain.types import AuthorizationRequest, Card, CardExpiration
from web3pago_connector.events.emitter import AsyncEventEmitter
from web3pago_connector.events.types import DomainEvent
from web3pago_connector.flows.config import FlowConfig
from web3pago_connector.services.orchestrator import AuthorizationOrchestrator
from web3pago_connector.services.reconciliation import ReconciliationService
from web3pago_connector.store.correlation import CorrelationStore
from web3pago_connector.store.memory import InMemoryKeyValueStore
from web3pago_connector.store.sql import SqlKeyValueStore

# Use in-memory SQLite for tests (with async support)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

CONNECTOR_BASE_URL = "https://connector.test"

# Certification test cards
APPROVED_CARD = "4444333322221111"
DENIED_CARD = "4444333322221112"
ASYNC_APPROVED_CARD = "4222222222222224"
ASYNC_DENIED_CARD = "4222222222222225"
UNKNOWN_CARD = "5555555555554444"


def card(number: str | None = APPROVED_CARD, **overrides: Any) -> Card:
    """Card with a fixed holder and expiration."""
    fields: dict[str, Any] = {
        "holder": "Ada Lovelace",
        "number": number,
        "bin": number[:6] if number else None,
        "expiration": CardExpiration(month="12", year="2030"),
    }
    fields.update(overrides)
    return Card(**fields)


def authorization_request(
    payment_id: str = "p1",
    *,
    value: str = "100.00",
    **overrides: Any,
) -> AuthorizationRequest:
    """AuthorizationRequest with platform defaults."""
    fields: dict[str, Any] = {
        "payment_id": payment_id,
        "value": Decimal(value),
        "currency": "USD",
        "payment_method": "Visa",
        "transaction_id": f"tx-{payment_id}",
        "order_id": f"order-{payment_id}",
        "reference": f"ref-{payment_id}",
        "callback_url": f"https://platform.test/callbacks/{payment_id}",
    }
    fields.update(overrides)
    return AuthorizationRequest(**fields)


def payment_app_request(payment_id: str = "p-app", **overrides: Any) -> AuthorizationRequest:
    """Authorization routed to the payment app."""
    overrides.setdefault("payment_method", "Promissories")
    return authorization_request(payment_id, **overrides)


@pytest.fixture
def make_request() -> Callable[..., AuthorizationRequest]:
    return authorization_request


@pytest.fixture
def make_payment_app_request() -> Callable[..., AuthorizationRequest]:
    return payment_app_request


@pytest.fixture
def make_card() -> Callable[..., Card]:
    return card


@pytest.fixture
def flow_config() -> FlowConfig:
    return FlowConfig(callback_base_url=CONNECTOR_BASE_URL)


@pytest.fixture
def kv() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def store(kv: InMemoryKeyValueStore) -> CorrelationStore:
    return CorrelationStore(kv)


@pytest.fixture
def notifier() -> RecordingProcessorNotifier:
    return RecordingProcessorNotifier()


@pytest.fixture
def callback() -> RecordingPlatformCallback:
    return RecordingPlatformCallback()


@pytest.fixture
def events() -> list[DomainEvent]:
    """Every event published on the emitter fixture."""
    return []


@pytest.fixture
def emitter(events: list[DomainEvent]) -> AsyncEventEmitter:
    emitter = AsyncEventEmitter()

    async def record(event: DomainEvent) -> None:
        events.append(event)

    emitter.on_all(record)
    return emitter


@pytest.fixture
def orchestrator(
    store: CorrelationStore,
    notifier: RecordingProcessorNotifier,
    callback: RecordingPlatformCallback,
    flow_config: FlowConfig,
    emitter: AsyncEventEmitter,
) -> AuthorizationOrchestrator:
    return AuthorizationOrchestrator(
        store,
        notifier=notifier,
        callback=callback,
        config=flow_config,
        emitter=emitter,
    )


@pytest.fixture
def reconciliation(
    store: CorrelationStore,
    callback: RecordingPlatformCallback,
    emitter: AsyncEventEmitter,
) -> ReconciliationService:
    return ReconciliationService(store, callback, emitter=emitter)


@pytest.fixture
def connector(
    store: CorrelationStore,
    notifier: RecordingProcessorNotifier,
    callback: RecordingPlatformCallback,
    flow_config: FlowConfig,
    emitter: AsyncEventEmitter,
) -> Web3PagoConnector:
    return Web3PagoConnector(
        store,
        ConnectorConfig(flows=flow_config),
        notifier=notifier,
        callback=callback,
        emitter=emitter,
    )


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create test database engine with the connector tables."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await create_tables(engine)

    yield engine

    await engine.dispose()


@pytest.fixture
def sql_kv(engine: AsyncEngine) -> SqlKeyValueStore:
    return SqlKeyValueStore(create_session_factory(engine))
