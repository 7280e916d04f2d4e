"""Watch-driven informers feeding route events to the registry."""

from __future__ import annotations

import logging
import queue
import random
from abc import ABC, abstractmethod
from threading import Event, Thread
from typing import Any, Callable, Dict, List, Optional

from kubernetes import watch
from kubernetes.client.rest import ApiException

from route_events import EventRegistry

LOG = logging.getLogger(__name__)

MAX_BACKOFF = 30


def object_key(obj: Any) -> str:
    return f"{obj.metadata.namespace}/{obj.metadata.name}"


def resource_version(obj: Any) -> Optional[str]:
    return getattr(obj.metadata, "resource_version", None)


class EventWorker(Thread):
    """Drain one kind's event queue into the registry, one event at a time."""

    def __init__(
        self,
        kind: str,
        events: "queue.Queue",
        registry: EventRegistry,
        stop_event: Event,
        poll_interval: float = 0.5,
    ) -> None:
        super().__init__(daemon=True, name=f"{kind}-worker")
        self._kind = kind
        self._events = events
        self._registry = registry
        self._stop_event = stop_event
        self._poll_interval = poll_interval

    def run(self) -> None:
        while not self._stop_event.is_set():
            try:
                event = self._events.get(timeout=self._poll_interval)
            except queue.Empty:
                continue
            self.process(event)

    def process(self, event: Any) -> None:
        try:
            self._registry.handle(event)
        except Exception:
            LOG.exception("%s handler failed for %s", self._kind, type(event).__name__)
        finally:
            self._events.task_done()


class Informer(Thread, ABC):
    """List, then watch, one object kind and publish tagged events.

    The informer keeps the last observed version of every object so that
    handlers receive ``(old, new)`` pairs.  Translated events are put on a
    bounded queue; a full queue blocks the watch loop, which slows
    consumption of the watch stream instead of growing memory.
    """

    kind = "object"

    def __init__(
        self,
        list_func: Callable[..., Any],
        events: "queue.Queue",
        *,
        namespace: str,
        stop_event: Event,
        label_selector: str = "",
        watch_timeout: int = 60,
    ) -> None:
        super().__init__(daemon=True, name=f"{self.kind}-informer")
        self._list_func = list_func
        self._events = events
        self._namespace = namespace
        self._label_selector = label_selector
        self._stop_event = stop_event
        self._watch_timeout = watch_timeout
        self._cache: Dict[str, Any] = {}
        self._resource_version: Optional[str] = None
        self._watch: Optional[watch.Watch] = None

    # ------------------------------------------------------------------
    # Event translation
    # ------------------------------------------------------------------
    @abstractmethod
    def translate(self, event_type: str, obj: Any) -> List[Any]:
        """Turn one watch event into route events, updating the cache."""

    def on_vanished(self, obj: Any) -> List[Any]:
        """Events for an object that disappeared while the watch was down."""
        return []

    def handle_watch_event(self, event_type: str, obj: Any) -> None:
        for event in self.translate(event_type, obj):
            self._enqueue(event)

    def _enqueue(self, event: Any) -> None:
        while not self._stop_event.is_set():
            try:
                self._events.put(event, timeout=0.5)
                return
            except queue.Full:
                LOG.debug("%s event queue full, waiting", self.kind)

    # ------------------------------------------------------------------
    # List / watch loop
    # ------------------------------------------------------------------
    def relist(self) -> None:
        """Resynchronise the cache with a fresh list of objects."""

        result = self._list_func(self._namespace, label_selector=self._label_selector)
        seen = set()
        for obj in result.items:
            seen.add(object_key(obj))
            self.handle_watch_event("ADDED", obj)

        for key in [k for k in self._cache if k not in seen]:
            vanished = self._cache.pop(key)
            LOG.debug("%s %s vanished while not watching", self.kind, key)
            for event in self.on_vanished(vanished):
                self._enqueue(event)

        self._resource_version = result.metadata.resource_version
        LOG.info(
            "%s informer listed %d objects at resourceVersion %s",
            self.kind,
            len(result.items),
            self._resource_version,
        )

    def run(self) -> None:
        LOG.info(
            "Starting %s informer (namespace=%s, selector=%s)",
            self.kind,
            self._namespace,
            self._label_selector or "none",
        )
        backoff = 1
        while not self._stop_event.is_set():
            try:
                if self._resource_version is None:
                    self.relist()
                self._watch_once()
                backoff = 1
            except ApiException as exc:
                if exc.status == 410:
                    LOG.warning("%s watch resource version expired, re-listing", self.kind)
                    self._resource_version = None
                    continue
                LOG.exception("%s watch failed", self.kind)
                backoff = self._back_off(backoff)
            except Exception:
                LOG.exception("unexpected %s watch error", self.kind)
                backoff = self._back_off(backoff)
        LOG.info("Stopping %s informer", self.kind)

    def _back_off(self, backoff: int) -> int:
        self._stop_event.wait(backoff * (0.5 + random.random()))
        return min(backoff * 2, MAX_BACKOFF)

    def _watch_once(self) -> None:
        self._watch = watch.Watch()
        stream = self._watch.stream(
            self._list_func,
            self._namespace,
            label_selector=self._label_selector,
            resource_version=self._resource_version,
            timeout_seconds=self._watch_timeout,
        )
        for item in stream:
            if self._stop_event.is_set():
                break
            obj = item.get("object")
            if obj is None:
                continue
            version = resource_version(obj)
            if version:
                self._resource_version = version
            self.handle_watch_event(str(item.get("type", "")), obj)

    def shutdown(self) -> None:
        self._stop_event.set()
        if self._watch is not None:
            self._watch.stop()
