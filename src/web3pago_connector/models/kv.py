"""Key-value entry model backing the connector store."""

from __future__ import annotations

from sqlalchemy import CheckConstraint, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from web3pago_connector.models.base import Base, TimestampMixin


class KeyValueEntry(Base, TimestampMixin):
    """One JSON document per (bucket, key).

    `version` starts at 1 and increments on every write; compare-and-set
    updates match on it.
    """

    __tablename__ = "connector_kv_entry"

    bucket: Mapped[str] = mapped_column(String(64), primary_key=True)
    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value_json: Mapped[str] = mapped_column(Text, nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    __table_args__ = (
        CheckConstraint("version >= 1", name="kv_entry_version_check"),
    )
