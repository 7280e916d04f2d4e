"""Abstract interfaces for route event handlers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class PodUpdateEventHandler(ABC):
    """Base class for handlers reacting to a single pod transition."""

    @abstractmethod
    def handle(self, old_pod: Any, new_pod: Any, deleted: bool = False) -> None:
        """React to ``old_pod`` becoming ``new_pod``.

        ``deleted`` tells that ``new_pod`` is the last state of a removed pod.
        """


class WorkloadUpdateEventHandler(ABC):
    """Base class for handlers reacting to workload changes."""

    @abstractmethod
    def handle(self, old_workload: Any, new_workload: Any) -> None:
        """React to ``old_workload`` becoming ``new_workload``."""


class WorkloadDeleteEventHandler(ABC):
    """Base class for handlers reacting to workload removal."""

    @abstractmethod
    def handle(self, workload: Any) -> None:
        """Remove any state associated with ``workload``."""
