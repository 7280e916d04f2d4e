"""ZeroMQ publisher for route registry events."""

from __future__ import annotations

import logging
from threading import Lock

import zmq

from kube_routes.emitter import Publisher

LOG = logging.getLogger(__name__)


class ZmqPublisher(Publisher):
    """Publish ``[subject, payload]`` frames on a PUB socket.

    Subscribers filter on the subject frame (``router.register`` or
    ``router.unregister``).
    """

    def __init__(self, endpoint: str, context: zmq.Context | None = None) -> None:
        self.endpoint = endpoint
        self._context = context or zmq.Context.instance()
        self._socket = self._context.socket(zmq.PUB)
        self._socket.setsockopt(zmq.LINGER, 0)
        self._lock = Lock()
        try:
            self._socket.bind(endpoint)
        except zmq.ZMQError as exc:
            self._socket.close()
            raise ValueError(f"cannot bind route publisher to {endpoint}: {exc}") from exc
        LOG.info("Route publisher bound to %s", endpoint)

    def publish(self, subject: str, data: bytes) -> None:
        with self._lock:
            self._socket.send_multipart([subject.encode("utf-8"), data])

    def close(self) -> None:
        with self._lock:
            self._socket.close()
