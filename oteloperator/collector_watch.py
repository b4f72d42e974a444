"""Tracking of the collector pods that targets may be allocated to."""

from __future__ import annotations

import logging
import queue
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable, Mapping

WATCHER_TIMEOUT = 15 * 60.0
CLOSED = "kubernetes client closed"
NO_EVENT = "no event"
TIMED_OUT = ""

_POLL_INTERVAL = 0.05
_END = object()
_TIMEOUT = object()
_CLOSED = object()


class EventType(str, Enum):
    """Kind of change reported by a pod watch."""

    ADDED = "ADDED"
    MODIFIED = "MODIFIED"
    DELETED = "DELETED"
    BOOKMARK = "BOOKMARK"
    ERROR = "ERROR"


@dataclass(frozen=True)
class PodEvent:
    """A change to a collector pod."""

    type: EventType
    name: str


class CollectorWatcher:
    """Keeps the set of live collector pods and reports it after every change.

    The callback receives the current collector names. When ``updates`` is
    given the names are also offered to it; if it is full, or absent, the
    callback is invoked a second time instead.
    """

    def __init__(
        self,
        callback: Callable[[list[str]], Any],
        updates: queue.Queue | None = None,
        watch_timeout: float = WATCHER_TIMEOUT,
        log: logging.Logger | None = None,
    ) -> None:
        self.callback = callback
        self.updates = updates
        self.watch_timeout = watch_timeout
        self.log = log if log is not None else logging.getLogger("oteloperator.collector_watch")
        self._collectors: dict[str, bool] = {}
        self._closed = threading.Event()

    @property
    def collectors(self) -> list[str]:
        return list(self._collectors)

    def initial(self, pods: Iterable[Mapping[str, Any]]) -> list[str]:
        """Record the listed pods that are not being deleted and report them."""
        for pod in pods:
            meta = pod.get("metadata") or {}
            if meta.get("deletionTimestamp") is None:
                self._collectors[str(meta.get("name", ""))] = True
        names = self.collectors
        self.callback(names)
        return names

    def _next_from_queue(self, events: queue.Queue) -> Any:
        deadline = time.monotonic() + self.watch_timeout
        while not self._closed.is_set():
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return _TIMEOUT
            try:
                return events.get(timeout=min(remaining, _POLL_INTERVAL))
            except queue.Empty:
                continue
        return _CLOSED

    def run(self, events: Iterable[PodEvent] | queue.Queue) -> str:
        """Apply pod events until the source ends, is closed or times out.

        Returns why the run stopped: CLOSED, NO_EVENT, or TIMED_OUT (an empty
        string, meaning the watch should be restarted). A queue source ends on
        a None item; an idle queue times out after ``watch_timeout`` seconds.
        """
        from_queue = isinstance(events, queue.Queue)
        iterator = None if from_queue else iter(events)
        while True:
            if self._closed.is_set():
                return CLOSED
            event = self._next_from_queue(events) if from_queue else next(iterator, _END)
            if event is _CLOSED:
                return CLOSED
            if event is _TIMEOUT:
                self.log.info("Restarting watch routine")
                return TIMED_OUT
            if event is _END or event is None or not isinstance(event, PodEvent):
                self.log.info("False")
                return NO_EVENT

            if event.type is EventType.ADDED:
                self._collectors[event.name] = True
            elif event.type is EventType.DELETED:
                self._collectors.pop(event.name, None)

            names = self.collectors
            self.callback(names)
            if self.updates is None:
                self.callback(names)
                continue
            try:
                self.updates.put_nowait(names)
            except queue.Full:
                self.callback(names)

    def close(self) -> None:
        """Stop any running watch."""
        self._closed.set()