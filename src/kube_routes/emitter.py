"""Asynchronous hand-off of route messages to the routing registry."""

from __future__ import annotations

import json
import logging
import queue
import time
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from threading import Event, Thread
from typing import List, Optional

from .message import Message

LOG = logging.getLogger(__name__)

REGISTER_SUBJECT = "router.register"
UNREGISTER_SUBJECT = "router.unregister"

ON_FULL_BLOCK = "block"
ON_FULL_DROP = "drop"


class Publisher(ABC):
    """Transport used by the emitter to reach the routing registry."""

    @abstractmethod
    def publish(self, subject: str, data: bytes) -> None:
        """Send ``data`` on ``subject``."""


@dataclass
class RegistryMessage:
    """Body of a register/unregister publish as understood by the router."""

    host: str
    port: int
    tls_port: int
    uris: List[str]
    app: str
    private_instance_id: str

    def to_json(self) -> bytes:
        return json.dumps(asdict(self)).encode("utf-8")


def registry_message(message: Message, uris: List[str]) -> RegistryMessage:
    return RegistryMessage(
        host=message.address,
        port=message.port,
        tls_port=message.tls_port,
        uris=list(uris),
        app=message.name,
        private_instance_id=message.instance_id,
    )


class Emitter(Thread):
    """Buffer route messages and publish them from a background thread.

    :meth:`emit` never publishes itself; it only places the message in a
    bounded buffer.  What happens when the buffer is full depends on
    ``on_full``: ``"block"`` waits (up to ``put_timeout`` seconds when set)
    and ``"drop"`` discards the message with a warning.
    """

    def __init__(
        self,
        publisher: Publisher,
        stop_event: Event,
        *,
        buffer_size: int = 1024,
        on_full: str = ON_FULL_BLOCK,
        put_timeout: Optional[float] = None,
        poll_interval: float = 0.5,
    ) -> None:
        super().__init__(daemon=True, name="route-emitter")
        if on_full not in (ON_FULL_BLOCK, ON_FULL_DROP):
            raise ValueError(f"unsupported on_full policy '{on_full}'")
        self._publisher = publisher
        self._stop_event = stop_event
        self._queue: "queue.Queue[Message]" = queue.Queue(maxsize=buffer_size)
        self._on_full = on_full
        self._put_timeout = put_timeout
        self._poll_interval = poll_interval

    def emit(self, message: Message) -> bool:
        """Queue ``message`` for dispatch; return ``False`` if it was dropped.

        A blocked call gives up and returns ``False`` once the stop event is set.
        """

        try:
            if self._on_full == ON_FULL_DROP:
                self._queue.put_nowait(message)
            elif not self._put_until_stopped(message):
                LOG.debug(
                    "emitter stopped, discarding message for instance %s port %s",
                    message.instance_id,
                    message.port,
                )
                return False
        except queue.Full:
            LOG.warning(
                "route buffer full, dropping message for instance %s port %s",
                message.instance_id,
                message.port,
            )
            return False
        return True

    def _put_until_stopped(self, message: Message) -> bool:
        deadline = None
        if self._put_timeout is not None:
            deadline = time.monotonic() + self._put_timeout
        while not self._stop_event.is_set():
            wait = self._poll_interval
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise queue.Full
                wait = min(wait, remaining)
            try:
                self._queue.put(message, timeout=wait)
                return True
            except queue.Full:
                continue
        return False

    def pending(self) -> int:
        return self._queue.qsize()

    def run(self) -> None:
        while not self._stop_event.is_set():
            try:
                message = self._queue.get(timeout=self._poll_interval)
            except queue.Empty:
                continue
            try:
                self.dispatch(message)
            except Exception:
                LOG.exception(
                    "failed to publish routes for instance %s", message.instance_id
                )
            finally:
                self._queue.task_done()

    def dispatch(self, message: Message) -> None:
        """Publish ``message`` as register and/or unregister events."""

        if message.routes.registered:
            self._publisher.publish(
                REGISTER_SUBJECT,
                registry_message(message, message.routes.registered).to_json(),
            )
        if message.routes.unregistered:
            self._publisher.publish(
                UNREGISTER_SUBJECT,
                registry_message(message, message.routes.unregistered).to_json(),
            )
