"""Registry routing tagged events to their handlers."""

from __future__ import annotations

from typing import Any, Dict, Type

from .events import PodUpdate, WorkloadDelete, WorkloadUpdate

Event = PodUpdate | WorkloadUpdate | WorkloadDelete


class EventRegistry:
    """Dispatch route events to the single handler registered per event type."""

    def __init__(self) -> None:
        self._handlers: Dict[Type, Any] = {}

    def register(self, event_type: Type, handler: Any) -> None:
        if event_type in self._handlers:
            raise ValueError(f"handler for '{event_type.__name__}' already registered")
        if not isinstance(handler, event_type.handler_interface):
            raise TypeError(
                f"{type(handler).__name__!r} does not implement "
                f"{event_type.handler_interface.__name__}"
            )
        self._handlers[event_type] = handler

    def unregister(self, event_type: Type) -> None:
        self._handlers.pop(event_type, None)

    def handle(self, event: Event) -> None:
        handler = self._handlers.get(type(event))
        if handler is None:
            raise TypeError(f"Unsupported event type: {type(event)!r}")
        event.deliver(handler)
