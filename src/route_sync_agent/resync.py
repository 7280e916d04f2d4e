"""Periodic re-registration of every desired route."""

from __future__ import annotations

import logging
from threading import Event, Thread

from kube_routes import Emitter, RouteCollector
from kube_routes.errors import CollectError

LOG = logging.getLogger(__name__)


class ResyncLoop(Thread):
    """Re-emit the full desired state every ``interval`` seconds.

    Handlers only react to edges, so a missed watch event or a restart would
    leave the registry stale.  Re-registering everything on a timer bounds
    that staleness to one interval.  Unregistration is never derived here.
    """

    def __init__(
        self,
        collector: RouteCollector,
        emitter: Emitter,
        interval: float,
        stop_event: Event,
    ) -> None:
        super().__init__(daemon=True, name="route-resync")
        self._collector = collector
        self._emitter = emitter
        self._interval = interval
        self._stop_event = stop_event

    def run(self) -> None:
        while not self._stop_event.wait(self._interval):
            try:
                self.run_once()
            except Exception:
                LOG.exception("route resync encountered an error")

    def run_once(self) -> int:
        try:
            messages = self._collector.collect()
        except CollectError as exc:
            LOG.warning("skipping route resync: %s", exc)
            return 0

        emitted = sum(1 for message in messages if self._emitter.emit(message))
        LOG.debug("resync emitted %d of %d route messages", emitted, len(messages))
        return emitted
