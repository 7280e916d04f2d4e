"""Route messages and per-port grouping."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List

from .errors import MessageConstructionError
from .route import Route
from .workload import LABEL_GUID, labels_of, pod_ip, process_guid

LOG = logging.getLogger(__name__)

MAX_PORT = 65535


@dataclass
class Routes:
    """Hostnames to register and unregister on a single port."""

    registered: List[str] = field(default_factory=list)
    unregistered: List[str] = field(default_factory=list)


@dataclass
class Message:
    """One routing event for one pod instance on one port."""

    name: str
    instance_id: str
    address: str
    port: int
    routes: Routes
    tls_port: int = 0


PortGroup = Dict[int, Routes]


def group_routes_by_port(
    *, to_add: Iterable[Route], to_remove: Iterable[Route]
) -> PortGroup:
    """Merge route additions and removals into one :class:`Routes` per port.

    A route present in both inputs is only registered, so the registered and
    unregistered lists of a port never overlap.
    """

    group: PortGroup = {}
    added = set()

    for route in to_add:
        added.add(route)
        group.setdefault(route.port, Routes()).registered.append(route.hostname)

    for route in to_remove:
        if route in added:
            continue
        group.setdefault(route.port, Routes()).unregistered.append(route.hostname)

    return group


def build_message(pod: Any, port: int, routes: Routes) -> Message:
    address = pod_ip(pod)
    if not address:
        raise MessageConstructionError("missing ip address")
    if not 0 < port <= MAX_PORT:
        raise MessageConstructionError(f"invalid port {port}")

    return Message(
        name=labels_of(pod).get(LABEL_GUID, ""),
        instance_id=pod.metadata.name,
        address=address,
        port=port,
        routes=Routes(
            registered=list(routes.registered),
            unregistered=list(routes.unregistered),
        ),
    )


def create_route_messages(pod: Any, group: PortGroup) -> List[Message]:
    """Build a message per port for ``pod``, skipping ports that fail."""

    messages: List[Message] = []
    for port, routes in group.items():
        try:
            messages.append(build_message(pod, port, routes))
        except MessageConstructionError as exc:
            LOG.debug(
                "failed to construct a route message for pod %s (guid=%s, port=%s): %s",
                pod.metadata.name,
                process_guid(pod),
                port,
                exc,
            )
    return messages
