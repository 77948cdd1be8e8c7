"""
In-process domain event bus.

Services emit events after a state change has been persisted. Handlers run
concurrently and fire-and-forget: a handler that raises is logged and never
affects the emitting service call or the other handlers.
"""

from __future__ import annotations

import asyncio
from collections import defaultdict
from typing import Any, Awaitable, Callable, DefaultDict, Dict, List

from ..core.logging_config import get_logger
from ..core.models.domain import DomainEventType

logger = get_logger(__name__)

EventPayload = Dict[str, Any]
EventHandler = Callable[[DomainEventType, EventPayload], Awaitable[None]]


class EventBus:
    """Registry of async handlers keyed by event type."""

    def __init__(self) -> None:
        self._handlers: DefaultDict[DomainEventType, List[EventHandler]] = defaultdict(list)

    def on(self, event_type: DomainEventType, handler: EventHandler) -> None:
        """Register ``handler`` for ``event_type``."""
        self._handlers[DomainEventType(event_type)].append(handler)

    def off(self, event_type: DomainEventType, handler: EventHandler) -> None:
        handlers = self._handlers.get(DomainEventType(event_type), [])
        if handler in handlers:
            handlers.remove(handler)

    def handlers(self, event_type: DomainEventType) -> List[EventHandler]:
        return list(self._handlers.get(DomainEventType(event_type), []))

    async def emit(self, event_type: DomainEventType, payload: EventPayload) -> None:
        """
        Deliver an event to every handler registered for its type.

        Args:
            event_type: The event being published.
            payload: Event data, typically the affected record and ``user_id``.
        """
        event_type = DomainEventType(event_type)
        handlers = self.handlers(event_type)
        if not handlers:
            return

        results = await asyncio.gather(
            *(handler(event_type, payload) for handler in handlers),
            return_exceptions=True,
        )
        for handler, result in zip(handlers, results):
            if isinstance(result, BaseException):
                logger.error(
                    f"Event handler {getattr(handler, '__name__', handler)!r} failed for {event_type.value}: {result}",
                    exc_info=result,
                )


event_bus = EventBus()
