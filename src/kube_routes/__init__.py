"""Route synchronization core.

This package keeps an external routing registry in step with which app
instances should receive which hostnames.  Desired routes live as a JSON
annotation on the app's StatefulSet while addresses and readiness live on the
child pods, so every decision is made by combining the two:

* decoding the route annotation into a :class:`~kube_routes.route.RouteSet`;
* grouping route additions/removals into one message per pod and port;
* reacting to pod readiness and workload annotation/deletion events; and
* handing messages to an :class:`~kube_routes.emitter.Emitter` that publishes
  them on the registry's register/unregister subjects.

The package has no dependency on a live cluster: collaborators that read pods
and workloads are injected, which keeps the handlers testable in isolation.
"""

from .collector import RouteCollector  # noqa: F401
from .emitter import Emitter, Publisher  # noqa: F401
from .handlers import (  # noqa: F401
    PodUpdateHandler,
    WorkloadDeleteHandler,
    WorkloadUpdateHandler,
)
from .message import Message, Routes  # noqa: F401
from .route import Route, RouteSet  # noqa: F401

__all__ = [
    "Emitter",
    "Message",
    "PodUpdateHandler",
    "Publisher",
    "Route",
    "RouteCollector",
    "RouteSet",
    "Routes",
    "WorkloadDeleteHandler",
    "WorkloadUpdateHandler",
]
