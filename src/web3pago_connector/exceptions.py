"""Connector exception hierarchy."""

from __future__ import annotations

from typing import Any


class ConnectorError(Exception):
    """Base exception for connector errors.

    Carries a stable error code so the API layer can render a uniform
    error body.
    """

    code = "connector_error"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API error response format."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class InvalidPayloadError(ConnectorError):
    """Request or stored payload could not be decoded."""

    code = "invalid_payload"


class StoreError(ConnectorError):
    """Key-value store read or write failed."""

    code = "store_error"

    def __init__(
        self,
        bucket: str,
        key: str,
        reason: str,
        details: dict[str, Any] | None = None,
    ):
        self.bucket = bucket
        self.key = key
        super().__init__(
            f"Store operation on {bucket}/{key} failed: {reason}",
            details={"bucket": bucket, "key": key, **(details or {})},
        )


class ConfigurationError(ConnectorError):
    """Connector was wired with an unusable configuration."""

    code = "configuration_error"
