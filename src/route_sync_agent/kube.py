"""Kubernetes API adapters for the route handlers."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, List, Optional, Tuple

from kubernetes import client, config
from kubernetes.client.rest import ApiException

from kube_routes.errors import ChildListError, OwnerResolutionError
from kube_routes.workload import PodLister, WorkloadGetter, WorkloadLister

LOG = logging.getLogger(__name__)


def load_kube_config(config_path: Optional[Path] = None) -> None:
    """Load in-cluster configuration, falling back to a kubeconfig file."""

    try:
        config.load_incluster_config()
        LOG.info("Loaded in-cluster Kubernetes config")
    except config.ConfigException:
        config.load_kube_config(config_file=str(config_path) if config_path else None)
        LOG.info("Loaded kubeconfig %s", config_path or "(default)")


def build_apis() -> Tuple[client.AppsV1Api, client.CoreV1Api]:
    return client.AppsV1Api(), client.CoreV1Api()


class StatefulSetClient(WorkloadGetter, WorkloadLister):
    """Read StatefulSets through ``AppsV1Api``."""

    def __init__(self, apps_api: client.AppsV1Api) -> None:
        self._api = apps_api

    def get(self, namespace: str, name: str) -> Any:
        try:
            return self._api.read_namespaced_stateful_set(name, namespace)
        except ApiException as exc:
            if exc.status == 404:
                raise OwnerResolutionError(f"statefulset {namespace}/{name} not found") from exc
            raise OwnerResolutionError(
                f"failed to get statefulset {namespace}/{name}: {exc.reason}"
            ) from exc

    def list(self, namespace: str, label_selector: str) -> List[Any]:
        result = self._api.list_namespaced_stateful_set(
            namespace, label_selector=label_selector
        )
        return list(result.items)


class PodClient(PodLister):
    """List pods through ``CoreV1Api``."""

    def __init__(self, core_api: client.CoreV1Api) -> None:
        self._api = core_api

    def list(self, namespace: str, label_selector: str) -> List[Any]:
        try:
            result = self._api.list_namespaced_pod(namespace, label_selector=label_selector)
        except ApiException as exc:
            raise ChildListError(
                f"failed to list pods with selector '{label_selector}': {exc.reason}"
            ) from exc
        return list(result.items)
