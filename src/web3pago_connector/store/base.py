"""Base protocol and types for key-value store backends.

All backends must implement the KeyValueStore protocol. Values are JSON
documents (dicts); every write bumps a per-key version that callers can
use for optimistic compare-and-set.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

from web3pago_connector.exceptions import StoreError


class Bucket(str, Enum):
    """Logical buckets of the connector store."""

    AUTHORIZATIONS = "authorizations"  # payment id -> AuthorizationResponse
    PENDING_TRANSACTIONS = "pending-transactions"  # correlation id -> PendingTransaction


@dataclass(frozen=True)
class StoredValue:
    """A JSON document and the version it was read at."""

    value: dict[str, Any]
    version: int


class KeyValueStore(Protocol):
    """Protocol for durable key-value backends.

    Individual key reads and writes are serialized by the backend. There
    are no cross-key transactions.
    """

    async def get(self, bucket: Bucket, key: str) -> StoredValue | None:
        """Read a document. Returns None when the key is absent."""
        ...

    async def put(self, bucket: Bucket, key: str, value: dict[str, Any]) -> int:
        """Create or overwrite a document.

        Returns:
            The new version.
        """
        ...

    async def replace(
        self,
        bucket: Bucket,
        key: str,
        value: dict[str, Any],
        *,
        expected_version: int,
    ) -> bool:
        """Overwrite a document only if it is still at expected_version.

        Returns:
            True if written, False if the key is absent or was changed.
        """
        ...


def dumps_value(bucket: Bucket, key: str, value: dict[str, Any]) -> str:
    """Serialize a document, raising StoreError for non-JSON values."""
    try:
        return json.dumps(value)
    except (TypeError, ValueError) as e:
        raise StoreError(bucket.value, key, f"value is not JSON serializable: {e}")
