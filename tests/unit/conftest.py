from datetime import datetime, timezone

import pytest
from kubernetes.client import (
    V1LabelSelector,
    V1ObjectMeta,
    V1OwnerReference,
    V1Pod,
    V1PodCondition,
    V1PodStatus,
    V1PodTemplateSpec,
    V1StatefulSet,
    V1StatefulSetSpec,
)

from kube_routes.workload import (
    ANNOTATION_PROCESS_GUID,
    ANNOTATION_REGISTERED_ROUTES,
    APP_SOURCE_TYPE,
    LABEL_GUID,
    LABEL_SOURCE_TYPE,
)

NAMESPACE = "test-ns"


class RecordingEmitter:
    def __init__(self):
        self.messages = []

    def emit(self, message):
        self.messages.append(message)
        return True


def build_pod(
    name,
    ip="10.20.30.40",
    *,
    ready=True,
    owner="mr-stateful",
    owner_kind="StatefulSet",
    deleted=False,
    version="1",
):
    owners = []
    if owner is not None:
        owners.append(
            V1OwnerReference(
                api_version="apps/v1", kind=owner_kind, name=owner, uid=f"{owner}-uid"
            )
        )
    return V1Pod(
        metadata=V1ObjectMeta(
            name=name,
            namespace=NAMESPACE,
            labels={LABEL_GUID: f"{name}-guid", LABEL_SOURCE_TYPE: APP_SOURCE_TYPE},
            annotations={ANNOTATION_PROCESS_GUID: f"{name}-anno"},
            owner_references=owners,
            deletion_timestamp=datetime.now(timezone.utc) if deleted else None,
            resource_version=version,
        ),
        status=V1PodStatus(
            pod_ip=ip,
            conditions=[
                V1PodCondition(type="Ready", status="True" if ready else "False")
            ],
        ),
    )


def build_statefulset(name="mr-stateful", routes=None, *, version="1", extra=None):
    annotations = {ANNOTATION_PROCESS_GUID: f"{name}-process"}
    if routes is not None:
        annotations[ANNOTATION_REGISTERED_ROUTES] = routes
    annotations.update(extra or {})
    return V1StatefulSet(
        metadata=V1ObjectMeta(
            name=name,
            namespace=NAMESPACE,
            annotations=annotations,
            resource_version=version,
        ),
        spec=V1StatefulSetSpec(
            selector=V1LabelSelector(match_labels={LABEL_GUID: f"{name}-guid"}),
            service_name=name,
            template=V1PodTemplateSpec(),
        ),
    )


def _summarize(messages):
    """Order-insensitive view of route messages."""
    return {
        (
            m.name,
            m.instance_id,
            m.address,
            m.port,
            m.tls_port,
            frozenset(m.routes.registered),
            frozenset(m.routes.unregistered),
        )
        for m in messages
    }


@pytest.fixture
def emitter():
    return RecordingEmitter()


@pytest.fixture
def make_pod():
    return build_pod


@pytest.fixture
def make_statefulset():
    return build_statefulset


@pytest.fixture
def summarize():
    return _summarize
