"""SQL key-value store backed by the connector_kv_entry table.

Usage:
    _, session_factory = init_db()
    store = SqlKeyValueStore(session_factory)

    version = await store.put(Bucket.AUTHORIZATIONS, payment_id, response.to_dict())
    stored = await store.get(Bucket.AUTHORIZATIONS, payment_id)

Each operation runs in its own session and commits before returning.
"""

from __future__ import annotations

import json
from typing import Any

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from web3pago_connector.exceptions import StoreError
from web3pago_connector.models.kv import KeyValueEntry
from web3pago_connector.store.base import Bucket, StoredValue, dumps_value


class SqlKeyValueStore:
    """KeyValueStore over an async SQLAlchemy session factory."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get(self, bucket: Bucket, key: str) -> StoredValue | None:
        try:
            async with self._session_factory() as session:
                entry = await session.get(KeyValueEntry, (bucket.value, key))
                if entry is None:
                    return None
                value_json, version = entry.value_json, entry.version
        except SQLAlchemyError as e:
            raise StoreError(bucket.value, key, str(e))

        try:
            value = json.loads(value_json)
        except ValueError as e:
            raise StoreError(bucket.value, key, f"stored value is not valid JSON: {e}")
        return StoredValue(value=value, version=version)

    async def put(self, bucket: Bucket, key: str, value: dict[str, Any]) -> int:
        value_json = dumps_value(bucket, key, value)
        try:
            async with self._session_factory() as session:
                entry = await session.get(KeyValueEntry, (bucket.value, key))
                if entry is None:
                    entry = KeyValueEntry(
                        bucket=bucket.value,
                        key=key,
                        value_json=value_json,
                        version=1,
                    )
                    session.add(entry)
                else:
                    entry.value_json = value_json
                    entry.version = entry.version + 1
                version = entry.version
                await session.commit()
        except SQLAlchemyError as e:
            raise StoreError(bucket.value, key, str(e))
        return version

    async def replace(
        self,
        bucket: Bucket,
        key: str,
        value: dict[str, Any],
        *,
        expected_version: int,
    ) -> bool:
        value_json = dumps_value(bucket, key, value)
        stmt = (
            update(KeyValueEntry)
            .where(
                KeyValueEntry.bucket == bucket.value,
                KeyValueEntry.key == key,
                KeyValueEntry.version == expected_version,
            )
            .values(value_json=value_json, version=expected_version + 1)
        )
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                await session.commit()
        except SQLAlchemyError as e:
            raise StoreError(bucket.value, key, str(e))
        return result.rowcount == 1
