"""Route annotation codec."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from typing import Any, Iterable, Iterator, List, Optional

from .errors import DecodeError
from .workload import ANNOTATION_REGISTERED_ROUTES, annotations_of


@dataclass(frozen=True)
class Route:
    """A hostname that should be routed to ``port`` on every app instance."""

    hostname: str
    port: int


class RouteSet:
    """Set of :class:`Route` values.

    Equality and difference have set semantics. Iteration follows the order
    in which routes were first seen so emitted hostname lists are stable.
    """

    def __init__(self, routes: Iterable[Route] = ()) -> None:
        self._routes = dict.fromkeys(routes)

    def __iter__(self) -> Iterator[Route]:
        return iter(self._routes)

    def __len__(self) -> int:
        return len(self._routes)

    def __contains__(self, route: object) -> bool:
        return route in self._routes

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RouteSet):
            return NotImplemented
        return self._routes.keys() == other._routes.keys()

    def __sub__(self, other: "RouteSet") -> "RouteSet":
        return RouteSet(r for r in self if r not in other)

    def __repr__(self) -> str:
        return f"RouteSet({list(self._routes)!r})"


def _parse_route(entry: Any) -> Route:
    if not isinstance(entry, dict):
        raise DecodeError(f"failed to unmarshal routes: expected an object, got {entry!r}")
    hostname = entry.get("hostname")
    port = entry.get("port")
    if not isinstance(hostname, str):
        raise DecodeError(f"failed to unmarshal routes: invalid hostname {hostname!r}")
    if isinstance(port, bool) or not isinstance(port, int):
        raise DecodeError(f"failed to unmarshal routes: invalid port {port!r}")
    return Route(hostname=hostname, port=port)


def decode_routes(annotation: Optional[str]) -> List[Route]:
    """Decode a route annotation into a list of routes.

    An empty or missing annotation means no routes. Anything that is not a
    JSON array of ``{"hostname": str, "port": int}`` objects raises
    :class:`DecodeError`; no partial result is returned.
    """

    if not annotation:
        return []

    try:
        payload = json.loads(annotation)
    except json.JSONDecodeError as exc:
        raise DecodeError(f"failed to unmarshal routes: {exc}") from exc

    if not isinstance(payload, list):
        raise DecodeError("failed to unmarshal routes: expected a JSON array")

    return [_parse_route(entry) for entry in payload]


def encode_routes(routes: Iterable[Route]) -> str:
    return json.dumps([asdict(route) for route in routes])


def decode_route_set(workload: Any) -> RouteSet:
    """Return the routes desired by ``workload`` as a :class:`RouteSet`."""

    annotation = annotations_of(workload).get(ANNOTATION_REGISTERED_ROUTES)
    return RouteSet(decode_routes(annotation))
