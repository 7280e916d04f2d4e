"""Helpers for reading workload and pod objects.

The functions here operate on kubernetes client models (``V1Pod``,
``V1StatefulSet``) and tolerate the ``None`` values the API leaves in unset
fields.  The collaborator interfaces at the bottom of the module describe the
cluster reads the handlers and the collector depend on.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional

from .errors import OwnerResolutionError

ANNOTATION_REGISTERED_ROUTES = "routes"
ANNOTATION_PROCESS_GUID = "cloudfoundry.org/process_guid"
LABEL_GUID = "cloudfoundry.org/guid"
LABEL_SOURCE_TYPE = "cloudfoundry.org/source_type"
APP_SOURCE_TYPE = "APP"

WORKLOAD_KIND = "StatefulSet"
POD_READY = "Ready"


def annotations_of(obj: Any) -> Dict[str, str]:
    metadata = getattr(obj, "metadata", None)
    return dict(getattr(metadata, "annotations", None) or {})


def labels_of(obj: Any) -> Dict[str, str]:
    metadata = getattr(obj, "metadata", None)
    return dict(getattr(metadata, "labels", None) or {})


def pod_conditions(pod: Any) -> List[Any]:
    status = getattr(pod, "status", None)
    return list(getattr(status, "conditions", None) or [])


def is_ready(pod: Any) -> bool:
    """Return ``True`` when the pod reports a ``Ready=True`` condition."""

    return any(
        condition.type == POD_READY and condition.status == "True"
        for condition in pod_conditions(pod)
    )


def marked_for_deletion(pod: Any) -> bool:
    return pod.metadata.deletion_timestamp is not None


def pod_ip(pod: Any) -> str:
    status = getattr(pod, "status", None)
    return getattr(status, "pod_ip", None) or ""


def owner_name(pod: Any) -> str:
    """Return the name of the workload owning ``pod``.

    Raises :class:`OwnerResolutionError` when the pod has no owners at all or
    none of them is a workload.
    """

    owners = pod.metadata.owner_references or []
    if not owners:
        raise OwnerResolutionError(f"there are no owners for pod {pod.metadata.name}")

    for owner in owners:
        if owner.kind == WORKLOAD_KIND:
            return owner.name

    raise OwnerResolutionError(
        f"there are no statefulset owners for pod {pod.metadata.name}"
    )


def format_selector(labels: Mapping[str, str]) -> str:
    return ",".join(f"{key}={value}" for key, value in sorted(labels.items()))


def child_selector(workload: Any) -> str:
    """Build the label selector matching the pods of ``workload``."""

    selector = getattr(workload.spec, "selector", None)
    match_labels = getattr(selector, "match_labels", None) or {}
    return format_selector(match_labels)


def app_selector() -> str:
    return format_selector({LABEL_SOURCE_TYPE: APP_SOURCE_TYPE})


def process_guid(obj: Any) -> Optional[str]:
    return annotations_of(obj).get(ANNOTATION_PROCESS_GUID)


class WorkloadGetter(ABC):
    """Fetch a single workload by name."""

    @abstractmethod
    def get(self, namespace: str, name: str) -> Any:
        """Return the workload or raise :class:`OwnerResolutionError`."""


class WorkloadLister(ABC):
    """List the workloads matching a label selector."""

    @abstractmethod
    def list(self, namespace: str, label_selector: str) -> List[Any]:
        """Return the matching workloads."""


class PodLister(ABC):
    """List the pods matching a label selector."""

    @abstractmethod
    def list(self, namespace: str, label_selector: str) -> List[Any]:
        """Return the matching pods or raise :class:`ChildListError`."""
