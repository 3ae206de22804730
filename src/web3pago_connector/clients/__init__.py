"""Outbound clients: downstream processor notification and platform callback."""

from web3pago_connector.clients.base import (
    DeliveryResult,
    PlatformCallback,
    ProcessorNotifier,
)
from web3pago_connector.clients.http import HttpPlatformCallback, HttpProcessorNotifier
from web3pago_connector.clients.stub import (
    NoopProcessorNotifier,
    RecordingPlatformCallback,
    RecordingProcessorNotifier,
)

__all__ = [
    "DeliveryResult",
    "HttpPlatformCallback",
    "HttpProcessorNotifier",
    "NoopProcessorNotifier",
    "PlatformCallback",
    "ProcessorNotifier",
    "RecordingPlatformCallback",
    "RecordingProcessorNotifier",
]
