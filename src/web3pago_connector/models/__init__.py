"""SQLAlchemy ORM models."""

from web3pago_connector.models.base import Base, TimestampMixin
from web3pago_connector.models.kv import KeyValueEntry

__all__ = ["Base", "KeyValueEntry", "TimestampMixin"]
