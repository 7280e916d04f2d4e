"""Event primitives consumed by the event registry."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Type

from .handlers.base import (
    PodUpdateEventHandler,
    WorkloadDeleteEventHandler,
    WorkloadUpdateEventHandler,
)


@dataclass(frozen=True)
class PodUpdate:
    """A pod changed between two observed states.

    Both objects are kubernetes ``V1Pod`` models as delivered by the watch.
    ``deleted`` is set when the pod was removed from the cluster.
    """

    old: Any
    new: Any
    deleted: bool = False

    handler_interface: ClassVar[Type] = PodUpdateEventHandler

    def deliver(self, handler: PodUpdateEventHandler) -> None:
        handler.handle(self.old, self.new, deleted=self.deleted)


@dataclass(frozen=True)
class WorkloadUpdate:
    """A workload (StatefulSet) changed between two observed states."""

    old: Any
    new: Any

    handler_interface: ClassVar[Type] = WorkloadUpdateEventHandler

    def deliver(self, handler: WorkloadUpdateEventHandler) -> None:
        handler.handle(self.old, self.new)


@dataclass(frozen=True)
class WorkloadDelete:
    """Signals that a workload has been removed from the cluster."""

    workload: Any

    handler_interface: ClassVar[Type] = WorkloadDeleteEventHandler

    def deliver(self, handler: WorkloadDeleteEventHandler) -> None:
        handler.handle(self.workload)
