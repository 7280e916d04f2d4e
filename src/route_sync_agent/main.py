"""Entry point for the route sync agent."""

from __future__ import annotations

import argparse
import logging
import queue
import signal
import sys
from pathlib import Path
from threading import Event

from kube_routes import (
    Emitter,
    PodUpdateHandler,
    RouteCollector,
    WorkloadDeleteHandler,
    WorkloadUpdateHandler,
)
from kube_routes.workload import app_selector
from route_events import EventRegistry, PodUpdate, WorkloadDelete, WorkloadUpdate

from .config import AgentConfig, load_config
from .informers import EventWorker, PodInformer, WorkloadInformer
from .kube import PodClient, StatefulSetClient, build_apis, load_kube_config
from .opts import load_oslo_config
from .resync import ResyncLoop
from .transport import ZmqPublisher

LOG = logging.getLogger(__name__)

OSLO_SUFFIXES = (".conf", ".ini")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )


def read_config(path: Path) -> AgentConfig:
    if path.suffix in OSLO_SUFFIXES:
        return load_oslo_config(path)
    return load_config(path)


def build_registry(statefulsets: StatefulSetClient, pods: PodClient, emitter: Emitter) -> EventRegistry:
    registry = EventRegistry()
    registry.register(PodUpdate, PodUpdateHandler(statefulsets, emitter))
    registry.register(WorkloadUpdate, WorkloadUpdateHandler(pods, emitter))
    registry.register(WorkloadDelete, WorkloadDeleteHandler(pods, emitter))
    return registry


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run the route sync agent")
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("/etc/route-sync-agent/config.yaml"),
        help="Path to the agent configuration file (YAML, or oslo ini with .conf/.ini)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    config = read_config(args.config)
    namespace = config.kube.namespace

    load_kube_config(config.kube.config_path)
    apps_api, core_api = build_apis()
    statefulsets = StatefulSetClient(apps_api)
    pods = PodClient(core_api)

    stop_event = Event()
    publisher = ZmqPublisher(config.transport.endpoint)
    emitter = Emitter(
        publisher,
        stop_event,
        buffer_size=config.emitter.buffer_size,
        on_full=config.emitter.on_full,
        put_timeout=config.emitter.put_timeout,
    )
    registry = build_registry(statefulsets, pods, emitter)

    emitter.start()
    threads = [emitter]
    informers = []
    for informer_cls, list_func in (
        (PodInformer, core_api.list_namespaced_pod),
        (WorkloadInformer, apps_api.list_namespaced_stateful_set),
    ):
        events: queue.Queue = queue.Queue(maxsize=config.informers.queue_size)
        informer = informer_cls(
            list_func,
            events,
            namespace=namespace,
            stop_event=stop_event,
            label_selector=app_selector(),
            watch_timeout=config.informers.watch_timeout,
        )
        informers.append(informer)
        threads.append(EventWorker(informer.kind, events, registry, stop_event))
        threads.append(informer)

    resync = ResyncLoop(
        RouteCollector(pods, statefulsets, namespace),
        emitter,
        config.resync.interval,
        stop_event,
    )
    # Initial registration before the first resync interval elapses
    try:
        resync.run_once()
    except Exception:  # pragma: no cover
        LOG.exception("initial route resync failed")
    threads.append(resync)

    for thread in threads[1:]:
        thread.start()

    def _shutdown(signum, frame):  # pragma: no cover - signal handler
        LOG.info("received signal %s, shutting down", signum)
        for informer in informers:
            informer.shutdown()
        stop_event.set()

    signal.signal(signal.SIGINT, _shutdown)
    signal.signal(signal.SIGTERM, _shutdown)

    try:
        while not stop_event.is_set():
            stop_event.wait(1.0)
    except KeyboardInterrupt:  # pragma: no cover - fallback if signal not set
        stop_event.set()

    for thread in threads:
        thread.join()
    publisher.close()

    LOG.info("route sync agent stopped")
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
