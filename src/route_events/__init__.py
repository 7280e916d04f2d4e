"""Tagged route events and the registry that dispatches them.

Watchers translate cluster watch notifications into one of three events
(:class:`PodUpdate`, :class:`WorkloadUpdate`, :class:`WorkloadDelete`).  Each
event type is routed to exactly one handler implementing the matching
single-method interface from :mod:`route_events.handlers`.
"""

from .events import PodUpdate, WorkloadDelete, WorkloadUpdate  # noqa: F401
from .registry import EventRegistry  # noqa: F401

__all__ = [
    "EventRegistry",
    "PodUpdate",
    "WorkloadDelete",
    "WorkloadUpdate",
]
