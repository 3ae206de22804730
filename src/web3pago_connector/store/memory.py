"""In-memory key-value store for local development and testing.

Documents are kept as JSON text so callers observe the same copy
semantics as with a durable backend.
"""

from __future__ import annotations

import json
from typing import Any

from web3pago_connector.store.base import Bucket, StoredValue, dumps_value


class InMemoryKeyValueStore:
    """Dictionary-backed KeyValueStore.

    Each operation completes without yielding to the event loop, so
    single-key reads and writes are atomic within one process.
    """

    def __init__(self) -> None:
        self._entries: dict[tuple[str, str], tuple[str, int]] = {}

    async def get(self, bucket: Bucket, key: str) -> StoredValue | None:
        entry = self._entries.get((bucket.value, key))
        if entry is None:
            return None
        value_json, version = entry
        return StoredValue(value=json.loads(value_json), version=version)

    async def put(self, bucket: Bucket, key: str, value: dict[str, Any]) -> int:
        value_json = dumps_value(bucket, key, value)
        current = self._entries.get((bucket.value, key))
        version = current[1] + 1 if current else 1
        self._entries[(bucket.value, key)] = (value_json, version)
        return version

    async def replace(
        self,
        bucket: Bucket,
        key: str,
        value: dict[str, Any],
        *,
        expected_version: int,
    ) -> bool:
        current = self._entries.get((bucket.value, key))
        if current is None or current[1] != expected_version:
            return False
        self._entries[(bucket.value, key)] = (dumps_value(bucket, key, value), expected_version + 1)
        return True

    def keys(self, bucket: Bucket) -> list[str]:
        """Keys stored in a bucket (test helper)."""
        return sorted(k for b, k in self._entries if b == bucket.value)

    def __len__(self) -> int:
        return len(self._entries)
