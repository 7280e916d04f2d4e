"""Route handlers for pod and workload events.

Each handler rebuilds the desired routes from the workload annotation on
every call and keeps nothing between invocations.  The message-building
parts are plain functions so they can be reasoned about without the
collaborators:

* :func:`pod_update_messages` - one pod transition against the owner's routes;
* :func:`workload_update_messages` - an annotation change fanned out to pods;
* :func:`workload_delete_messages` - unregistering everything for all pods.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, List

from route_events.handlers import (
    PodUpdateEventHandler,
    WorkloadDeleteEventHandler,
    WorkloadUpdateEventHandler,
)

from .emitter import Emitter
from .errors import ChildListError, DecodeError, OwnerResolutionError
from .message import Message, PortGroup, create_route_messages, group_routes_by_port
from .route import RouteSet, decode_route_set
from .workload import (
    PodLister,
    WorkloadGetter,
    annotations_of,
    child_selector,
    is_ready,
    marked_for_deletion,
    owner_name,
    pod_conditions,
    process_guid,
)

LOG = logging.getLogger(__name__)


def pod_update_messages(
    old_pod: Any, new_pod: Any, routes: RouteSet, deleted: bool = False
) -> List[Message]:
    """Translate a pod transition into register or unregister messages."""

    removed = deleted or marked_for_deletion(new_pod)
    if removed or (is_ready(old_pod) and not is_ready(new_pod)):
        LOG.debug(
            "pod %s not ready (guid=%s, statuses=%s, deletion-timestamp=%s)",
            new_pod.metadata.name,
            process_guid(new_pod),
            [(c.type, c.status) for c in pod_conditions(new_pod)],
            new_pod.metadata.deletion_timestamp,
        )
        grouped = group_routes_by_port(to_add=RouteSet(), to_remove=routes)
        return create_route_messages(new_pod, grouped)

    if is_ready(new_pod):
        grouped = group_routes_by_port(to_add=routes, to_remove=RouteSet())
        return create_route_messages(new_pod, grouped)

    return []


def pods_messages(
    pods: Iterable[Any], grouped: PortGroup, *, skip_deleted: bool
) -> List[Message]:
    messages: List[Message] = []
    for pod in pods:
        if skip_deleted and marked_for_deletion(pod):
            LOG.debug("skipping pod %s marked for deletion", pod.metadata.name)
            continue
        messages.extend(create_route_messages(pod, grouped))
    return messages


def workload_update_messages(
    old_routes: RouteSet, new_routes: RouteSet, pods: Iterable[Any]
) -> List[Message]:
    """Unregister removed routes on every pod and re-assert the rest on ready ones.

    Pods that are not ready only receive the unregistrations; they are
    registered once their own readiness changes.
    """

    removed = old_routes - new_routes
    ready_group = group_routes_by_port(to_add=new_routes, to_remove=removed)
    not_ready_group = group_routes_by_port(to_add=RouteSet(), to_remove=removed)

    messages: List[Message] = []
    for pod in pods:
        if marked_for_deletion(pod):
            LOG.debug("skipping pod %s marked for deletion", pod.metadata.name)
            continue
        grouped = ready_group if is_ready(pod) else not_ready_group
        messages.extend(create_route_messages(pod, grouped))
    return messages


def workload_delete_messages(routes: RouteSet, pods: Iterable[Any]) -> List[Message]:
    grouped = group_routes_by_port(to_add=RouteSet(), to_remove=routes)
    return pods_messages(pods, grouped, skip_deleted=False)


class PodUpdateHandler(PodUpdateEventHandler):
    """Register or unregister a pod's routes as its readiness changes."""

    def __init__(self, workloads: WorkloadGetter, emitter: Emitter) -> None:
        self._workloads = workloads
        self._emitter = emitter

    def handle(self, old_pod: Any, new_pod: Any, deleted: bool = False) -> None:
        try:
            routes = self._desired_routes(new_pod)
        except (OwnerResolutionError, DecodeError) as exc:
            LOG.debug(
                "failed to get user-defined routes for pod %s (guid=%s): %s",
                new_pod.metadata.name,
                process_guid(new_pod),
                exc,
            )
            return

        for message in pod_update_messages(old_pod, new_pod, routes, deleted):
            self._emitter.emit(message)

    def _desired_routes(self, pod: Any) -> RouteSet:
        workload = self._workloads.get(pod.metadata.namespace, owner_name(pod))
        return decode_route_set(workload)


class WorkloadUpdateHandler(WorkloadUpdateEventHandler):
    """Fan route annotation changes out to every child pod."""

    def __init__(self, pods: PodLister, emitter: Emitter) -> None:
        self._pods = pods
        self._emitter = emitter

    def handle(self, old_workload: Any, new_workload: Any) -> None:
        if annotations_of(old_workload) == annotations_of(new_workload):
            return

        guid = process_guid(new_workload)
        try:
            new_routes = decode_route_set(new_workload)
        except DecodeError as exc:
            LOG.error(
                "failed to decode updated user-defined routes (guid=%s): %s", guid, exc
            )
            return

        try:
            old_routes = decode_route_set(old_workload)
        except DecodeError as exc:
            LOG.error("failed to decode old user-defined routes (guid=%s): %s", guid, exc)
            old_routes = RouteSet()

        try:
            pods = self._pods.list(
                new_workload.metadata.namespace, child_selector(new_workload)
            )
        except ChildListError as exc:
            LOG.error("failed to get child pods (guid=%s): %s", guid, exc)
            return

        for message in workload_update_messages(old_routes, new_routes, pods):
            self._emitter.emit(message)


class WorkloadDeleteHandler(WorkloadDeleteEventHandler):
    """Unregister every route of a deleted workload from all its pods."""

    def __init__(self, pods: PodLister, emitter: Emitter) -> None:
        self._pods = pods
        self._emitter = emitter

    def handle(self, workload: Any) -> None:
        guid = process_guid(workload)
        try:
            routes = decode_route_set(workload)
        except DecodeError as exc:
            LOG.error(
                "failed to decode deleted user-defined routes (guid=%s): %s", guid, exc
            )
            return

        try:
            pods = self._pods.list(workload.metadata.namespace, child_selector(workload))
        except ChildListError as exc:
            LOG.error("failed to get child pods (guid=%s): %s", guid, exc)
            return

        for message in workload_delete_messages(routes, pods):
            self._emitter.emit(message)
