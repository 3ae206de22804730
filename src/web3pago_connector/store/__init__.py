"""Connector persistence: key-value backends and the correlation store."""

from web3pago_connector.store.base import Bucket, KeyValueStore, StoredValue
from web3pago_connector.store.correlation import (
    ClaimResult,
    ClaimStatus,
    CorrelationStore,
)
from web3pago_connector.store.memory import InMemoryKeyValueStore
from web3pago_connector.store.sql import SqlKeyValueStore

__all__ = [
    "Bucket",
    "ClaimResult",
    "ClaimStatus",
    "CorrelationStore",
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "SqlKeyValueStore",
    "StoredValue",
]
