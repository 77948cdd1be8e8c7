"""Domain events emitted by the service layer."""

from .event_bus import EventBus, EventHandler, EventPayload, event_bus
from .handlers import audit_log_handler, register_default_handlers

__all__ = [
    "EventBus",
    "EventHandler",
    "EventPayload",
    "audit_log_handler",
    "event_bus",
    "register_default_handlers",
]
