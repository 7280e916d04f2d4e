"""Workload informer: route annotation changes and deletions."""

from __future__ import annotations

import logging
from typing import Any, List

from route_events import WorkloadDelete, WorkloadUpdate

from .base import Informer, object_key, resource_version

LOG = logging.getLogger(__name__)


class WorkloadInformer(Informer):
    kind = "statefulset"

    def translate(self, event_type: str, obj: Any) -> List[Any]:
        key = object_key(obj)

        if event_type == "DELETED":
            self._cache.pop(key, None)
            return [WorkloadDelete(workload=obj)]

        if event_type not in ("ADDED", "MODIFIED"):
            LOG.debug("ignoring %s event for statefulset %s", event_type, key)
            return []

        old = self._cache.get(key)
        self._cache[key] = obj
        if old is None:
            if event_type == "MODIFIED":
                LOG.debug("no previous state for statefulset %s, skipping diff", key)
            return []
        if resource_version(old) == resource_version(obj):
            return []
        return [WorkloadUpdate(old=old, new=obj)]

    def on_vanished(self, obj: Any) -> List[Any]:
        return [WorkloadDelete(workload=obj)]
