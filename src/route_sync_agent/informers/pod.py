"""Pod informer: readiness and deletion changes of app instances."""

from __future__ import annotations

import logging
from typing import Any, List

from route_events import PodUpdate

from .base import Informer, object_key, resource_version

LOG = logging.getLogger(__name__)


class PodInformer(Informer):
    kind = "pod"

    def translate(self, event_type: str, obj: Any) -> List[Any]:
        key = object_key(obj)

        if event_type == "DELETED":
            old = self._cache.pop(key, None)
            return [PodUpdate(old=old if old is not None else obj, new=obj, deleted=True)]

        if event_type not in ("ADDED", "MODIFIED"):
            LOG.debug("ignoring %s event for pod %s", event_type, key)
            return []

        old = self._cache.get(key)
        self._cache[key] = obj

        if old is None:
            # First sighting of a newly created pod; nothing is routable yet.
            if event_type == "ADDED":
                return []
            old = obj
        elif resource_version(old) == resource_version(obj):
            return []

        return [PodUpdate(old=old, new=obj)]

    def on_vanished(self, obj: Any) -> List[Any]:
        return [PodUpdate(old=obj, new=obj, deleted=True)]
