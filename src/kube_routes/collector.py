"""Collect the full desired routing state of a namespace."""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from .errors import CollectError, DecodeError, OwnerResolutionError
from .handlers import pods_messages
from .message import Message, group_routes_by_port
from .route import RouteSet, decode_route_set
from .workload import PodLister, WorkloadLister, app_selector, is_ready, owner_name

LOG = logging.getLogger(__name__)


class RouteCollector:
    """Build register messages for every ready app instance.

    The collector is used by the periodic resync and only ever produces
    registrations: it re-asserts what should be routed and leaves removal to
    the event handlers.
    """

    def __init__(
        self,
        pods: PodLister,
        workloads: WorkloadLister,
        namespace: str,
    ) -> None:
        self._pods = pods
        self._workloads = workloads
        self._namespace = namespace

    def collect(self) -> List[Message]:
        selector = app_selector()
        try:
            pods = self._pods.list(self._namespace, selector)
        except Exception as exc:
            raise CollectError(f"failed to list pods: {exc}") from exc

        try:
            workloads = self._workloads.list(self._namespace, selector)
        except Exception as exc:
            raise CollectError(f"failed to list statefulsets: {exc}") from exc

        by_name: Dict[str, Any] = {w.metadata.name: w for w in workloads}
        messages: List[Message] = []
        for pod in pods:
            if not is_ready(pod):
                continue
            try:
                routes = self._routes_for(pod, by_name)
            except (OwnerResolutionError, DecodeError) as exc:
                LOG.debug("failed to get routes for pod %s: %s", pod.metadata.name, exc)
                continue
            grouped = group_routes_by_port(to_add=routes, to_remove=RouteSet())
            messages.extend(pods_messages([pod], grouped, skip_deleted=True))

        return messages

    @staticmethod
    def _routes_for(pod: Any, workloads: Dict[str, Any]) -> RouteSet:
        workload = workloads.get(owner_name(pod))
        if workload is None:
            raise OwnerResolutionError(f"statefulset for pod {pod.metadata.name} not found")
        return decode_route_set(workload)
