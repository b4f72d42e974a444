import queue
import threading

from oteloperator.collector_watch import (
    CLOSED,
    NO_EVENT,
    TIMED_OUT,
    CollectorWatcher,
    EventType,
    PodEvent,
)


def test_watch_pod_addition_and_deletion():
    received = []
    updates = queue.Queue(maxsize=3)
    events = queue.Queue()
    watcher = CollectorWatcher(received.append, updates=updates)
    result = {}
    thread = threading.Thread(target=lambda: result.setdefault("reason", watcher.run(events)))
    thread.start()

    collectors = []
    for name in ["test-pod1", "test-pod2", "test-pod3"]:
        events.put(PodEvent(EventType.ADDED, name))
        collectors = updates.get(timeout=5)
    assert len(collectors) == 3
    assert sorted(collectors) == ["test-pod1", "test-pod2", "test-pod3"]

    for name in ["test-pod2", "test-pod3"]:
        events.put(PodEvent(EventType.DELETED, name))
        collectors = updates.get(timeout=5)
    assert len(collectors) == 1
    assert sorted(collectors) == ["test-pod1"]

    watcher.close()
    thread.join(5)
    assert result["reason"] == CLOSED
    assert received[-1] == ["test-pod1"]


def test_iterable_source_ends_with_no_event_and_calls_back_twice():
    received = []
    watcher = CollectorWatcher(received.append)
    reason = watcher.run([PodEvent(EventType.ADDED, "a")])
    assert reason == NO_EVENT
    assert received == [["a"], ["a"]]


def test_invalid_event_stops_run():
    received = []
    watcher = CollectorWatcher(received.append)
    assert watcher.run(["not an event"]) == NO_EVENT
    assert received == []


def test_idle_queue_times_out():
    watcher = CollectorWatcher(lambda names: None, watch_timeout=0.05)
    assert watcher.run(queue.Queue()) == TIMED_OUT


def test_closed_before_run():
    watcher = CollectorWatcher(lambda names: None)
    watcher.close()
    assert watcher.run([PodEvent(EventType.ADDED, "a")]) == CLOSED
    assert watcher.collectors == []


def test_full_updates_queue_falls_back_to_callback():
    received = []
    updates = queue.Queue(maxsize=1)
    watcher = CollectorWatcher(received.append, updates=updates)
    watcher.run([PodEvent(EventType.ADDED, "a"), PodEvent(EventType.ADDED, "b")])
    assert updates.get_nowait() == ["a"]
    assert received == [["a"], ["a", "b"], ["a", "b"]]


def test_initial_skips_pods_being_deleted():
    received = []
    watcher = CollectorWatcher(received.append)
    pods = [
        {"metadata": {"name": "keep"}},
        {"metadata": {"name": "gone", "deletionTimestamp": "2021-01-01T00:00:00Z"}},
    ]
    assert watcher.initial(pods) == ["keep"]
    assert received == [["keep"]]


def test_state_persists_across_runs():
    watcher = CollectorWatcher(lambda names: None)
    watcher.initial([{"metadata": {"name": "x"}}])
    watcher.run([PodEvent(EventType.ADDED, "y")])
    watcher.run([PodEvent(EventType.DELETED, "x"), PodEvent(EventType.MODIFIED, "y")])
    assert watcher.collectors == ["y"]