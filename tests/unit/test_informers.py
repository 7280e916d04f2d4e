import logging
import queue
from threading import Event
from types import SimpleNamespace

import pytest
from kubernetes.client.rest import ApiException

from route_events import EventRegistry, PodUpdate, WorkloadDelete, WorkloadUpdate
from route_events.handlers import PodUpdateEventHandler
from route_sync_agent.informers import EventWorker, Informer, PodInformer, WorkloadInformer
from route_sync_agent.informers import base


class FakeList:
    def __init__(self, *results):
        self.results = list(results)
        self.calls = []

    def __call__(self, namespace, label_selector=""):
        self.calls.append((namespace, label_selector))
        items, version = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        return SimpleNamespace(
            items=items, metadata=SimpleNamespace(resource_version=version)
        )


def drain(events):
    collected = []
    while not events.empty():
        collected.append(events.get_nowait())
    return collected


def build_informer(cls, list_func=None, **kwargs):
    events = queue.Queue(maxsize=16)
    informer = cls(
        list_func or FakeList(([], "1")),
        events,
        namespace="test-ns",
        stop_event=Event(),
        label_selector="cloudfoundry.org/source_type=APP",
        **kwargs,
    )
    return informer, events


def test_pod_informer_emits_update_for_modified_pod(make_pod):
    informer, events = build_informer(PodInformer)
    old = make_pod("pod-1", version="1")
    new = make_pod("pod-1", ready=False, version="2")

    informer.handle_watch_event("ADDED", old)
    informer.handle_watch_event("MODIFIED", new)

    assert drain(events) == [PodUpdate(old=old, new=new)]


def test_pod_informer_ignores_unchanged_versions(make_pod):
    informer, events = build_informer(PodInformer)

    informer.handle_watch_event("ADDED", make_pod("pod-1", version="1"))
    informer.handle_watch_event("MODIFIED", make_pod("pod-1", version="1"))

    assert drain(events) == []


def test_pod_informer_without_cached_state_compares_with_itself(make_pod):
    informer, events = build_informer(PodInformer)
    pod = make_pod("pod-1", version="3")

    informer.handle_watch_event("MODIFIED", pod)

    assert drain(events) == [PodUpdate(old=pod, new=pod)]


def test_pod_informer_reports_deleted_pods(make_pod):
    informer, events = build_informer(PodInformer)
    added = make_pod("pod-1", version="1")
    modified = make_pod("pod-1", version="2")
    gone = make_pod("pod-1", version="3")

    informer.handle_watch_event("ADDED", added)
    informer.handle_watch_event("MODIFIED", modified)
    informer.handle_watch_event("DELETED", gone)

    assert drain(events) == [
        PodUpdate(old=added, new=modified),
        PodUpdate(old=modified, new=gone, deleted=True),
    ]


def test_pod_informer_reports_deletion_without_cached_state(make_pod):
    informer, events = build_informer(PodInformer)
    pod = make_pod("pod-1", version="7")

    informer.handle_watch_event("DELETED", pod)
    informer.handle_watch_event("ADDED", make_pod("pod-1", version="8"))

    assert drain(events) == [PodUpdate(old=pod, new=pod, deleted=True)]


def test_relist_reports_pods_that_vanished(make_pod):
    gone = make_pod("pod-2", version="1")
    list_func = FakeList(([make_pod("pod-1"), gone], "10"), ([make_pod("pod-1")], "20"))
    informer, events = build_informer(PodInformer, list_func)

    informer.relist()
    informer.relist()

    assert drain(events) == [PodUpdate(old=gone, new=gone, deleted=True)]


def test_workload_informer_emits_update_and_delete(make_statefulset):
    informer, events = build_informer(WorkloadInformer)
    old = make_statefulset(routes="[]", version="1")
    new = make_statefulset(routes='[{"hostname": "a.com", "port": 8080}]', version="2")

    informer.handle_watch_event("ADDED", old)
    informer.handle_watch_event("MODIFIED", new)
    informer.handle_watch_event("DELETED", new)

    assert drain(events) == [
        WorkloadUpdate(old=old, new=new),
        WorkloadDelete(workload=new),
    ]


def test_relist_reports_workloads_that_vanished(make_statefulset):
    kept = make_statefulset("kept", version="1")
    gone = make_statefulset("gone", version="1")
    list_func = FakeList(([kept, gone], "10"), ([kept], "20"))
    informer, events = build_informer(WorkloadInformer, list_func)

    informer.relist()
    informer.relist()

    assert drain(events) == [WorkloadDelete(workload=gone)]
    assert list_func.calls == [("test-ns", "cloudfoundry.org/source_type=APP")] * 2


def test_relist_turns_missed_pod_changes_into_updates(make_pod):
    before = make_pod("pod-1", version="1")
    after = make_pod("pod-1", ready=False, version="5")
    informer, events = build_informer(PodInformer, FakeList(([before], "10"), ([after], "20")))

    informer.relist()
    informer.relist()

    assert drain(events) == [PodUpdate(old=before, new=after)]


class FakeWatch:
    streams = []

    def __init__(self):
        self.stopped = False

    def stream(self, func, namespace, **kwargs):
        behaviour = FakeWatch.streams.pop(0)
        return behaviour(kwargs)

    def stop(self):
        self.stopped = True


def test_watch_tracks_resource_version(monkeypatch, make_pod):
    received = []

    def stream(kwargs):
        received.append(kwargs)
        yield {"type": "MODIFIED", "object": make_pod("pod-1", version="11")}
        yield {"type": "BOOKMARK"}

    monkeypatch.setattr(base.watch, "Watch", FakeWatch)
    FakeWatch.streams = [stream]
    informer, events = build_informer(PodInformer, FakeList(([], "10")), watch_timeout=5)

    informer.relist()
    informer._watch_once()

    assert received == [
        {
            "label_selector": "cloudfoundry.org/source_type=APP",
            "resource_version": "10",
            "timeout_seconds": 5,
        }
    ]
    assert informer._resource_version == "11"
    assert [type(e) for e in drain(events)] == [PodUpdate]


def test_expired_resource_version_triggers_relist(monkeypatch):
    informer, _ = build_informer(WorkloadInformer, FakeList(([], "10")))
    list_func = informer._list_func

    def expired(kwargs):
        raise ApiException(status=410, reason="Gone")

    def stop(kwargs):
        informer._stop_event.set()
        return iter(())

    monkeypatch.setattr(base.watch, "Watch", FakeWatch)
    FakeWatch.streams = [expired, stop]

    informer.run()

    assert len(list_func.calls) == 2


class FailingHandler(PodUpdateEventHandler):
    def handle(self, old_pod, new_pod, deleted=False):
        raise RuntimeError("boom")


def test_event_worker_logs_handler_failures(caplog):
    caplog.set_level(logging.ERROR)
    registry = EventRegistry()
    registry.register(PodUpdate, FailingHandler())
    events = queue.Queue()
    worker = EventWorker("pod", events, registry, Event())
    events.put(PodUpdate(old=None, new=None))

    worker.process(events.get())

    assert "pod handler failed for PodUpdate" in caplog.text
    assert events.unfinished_tasks == 0


def test_informer_requires_translation():
    with pytest.raises(TypeError):
        build_informer(Informer)
