"""Handler interfaces exposed to the event registry."""

from .base import (  # noqa: F401
    PodUpdateEventHandler,
    WorkloadDeleteEventHandler,
    WorkloadUpdateEventHandler,
)

__all__ = [
    "PodUpdateEventHandler",
    "WorkloadDeleteEventHandler",
    "WorkloadUpdateEventHandler",
]
