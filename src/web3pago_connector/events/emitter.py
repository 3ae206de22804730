"""Event emitter for publishing connector domain events.

The emitter provides:
- Handler registration with type and category filtering
- Async and sync handlers on the same emitter
- Error isolation (handler failures don't break other handlers or the
  operation that emitted)
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol, TypeVar, runtime_checkable

from web3pago_connector.events.types import DomainEvent, EventCategory

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=DomainEvent)


@runtime_checkable
class EventHandler(Protocol):
    """Protocol for synchronous event handlers."""

    def __call__(self, event: DomainEvent) -> None:
        ...


@runtime_checkable
class AsyncEventHandler(Protocol):
    """Protocol for asynchronous event handlers."""

    async def __call__(self, event: DomainEvent) -> None:
        ...


@dataclass
class HandlerRegistration:
    """Registration of an event handler."""

    handler: EventHandler | AsyncEventHandler
    event_types: set[str] | None  # None = all events
    categories: set[EventCategory] | None  # None = all categories
    is_async: bool


class AsyncEventEmitter:
    """Asynchronous event emitter.

    Usage:
        emitter = AsyncEventEmitter()

        async def forward(event: PaymentConfirmed) -> None:
            await audit_log.write(event.to_dict())

        emitter.on(PaymentConfirmed, forward)
        emitter.on_sync(NotificationFailed, alerts.append)
        await emitter.emit(event)
    """

    def __init__(self) -> None:
        self._handlers: list[HandlerRegistration] = []

    def on(
        self,
        event_type: type[T] | list[type[T]],
        handler: AsyncEventHandler,
    ) -> None:
        """Register async handler for specific event type(s)."""
        self._handlers.append(
            HandlerRegistration(
                handler=handler,
                event_types=_type_names(event_type),
                categories=None,
                is_async=True,
            )
        )

    def on_sync(
        self,
        event_type: type[T] | list[type[T]],
        handler: EventHandler,
    ) -> None:
        """Register sync handler for specific event type(s)."""
        self._handlers.append(
            HandlerRegistration(
                handler=handler,
                event_types=_type_names(event_type),
                categories=None,
                is_async=False,
            )
        )

    def on_category(
        self,
        category: EventCategory | list[EventCategory],
        handler: AsyncEventHandler,
    ) -> None:
        """Register async handler for event category(ies)."""
        cats = set(category) if isinstance(category, list) else {category}
        self._handlers.append(
            HandlerRegistration(
                handler=handler,
                event_types=None,
                categories=cats,
                is_async=True,
            )
        )

    def on_all(self, handler: AsyncEventHandler) -> None:
        """Register async handler for all events."""
        self._handlers.append(
            HandlerRegistration(
                handler=handler,
                event_types=None,
                categories=None,
                is_async=True,
            )
        )

    def off(self, handler: AsyncEventHandler | EventHandler) -> None:
        """Unregister a handler."""
        self._handlers = [
            reg for reg in self._handlers if reg.handler is not handler
        ]

    async def emit(self, event: DomainEvent) -> list[Exception]:
        """Emit an event to all matching handlers.

        Returns list of any exceptions raised by handlers.
        """
        errors: list[Exception] = []
        event_type = event.event_type
        event_category = event.category

        tasks: list[asyncio.Task[None]] = []

        for reg in self._handlers:
            if reg.event_types and event_type not in reg.event_types:
                continue
            if reg.categories and event_category not in reg.categories:
                continue

            if reg.is_async:
                tasks.append(
                    asyncio.create_task(
                        self._call_async_handler(reg.handler, event)  # type: ignore[arg-type]
                    )
                )
            else:
                try:
                    reg.handler(event)  # type: ignore[call-arg]
                except Exception as e:
                    logger.exception(
                        "Handler %s failed for event %s",
                        reg.handler,
                        event_type,
                    )
                    errors.append(e)

        if tasks:
            results = await asyncio.gather(*tasks, return_exceptions=True)
            for result in results:
                if isinstance(result, Exception):
                    errors.append(result)

        return errors

    async def _call_async_handler(
        self,
        handler: AsyncEventHandler,
        event: DomainEvent,
    ) -> None:
        """Call async handler with error logging."""
        try:
            await handler(event)
        except Exception:
            logger.exception(
                "Async handler %s failed for event %s",
                handler,
                event.event_type,
            )
            raise

    @property
    def handler_count(self) -> int:
        return len(self._handlers)


def _type_names(event_type: type[DomainEvent] | list[type[DomainEvent]]) -> set[str]:
    if isinstance(event_type, list):
        return {t.__name__ for t in event_type}
    return {event_type.__name__}
