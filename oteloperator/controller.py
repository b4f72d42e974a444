"""Reconciliation of OpenTelemetryCollector resources."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Protocol

from .api import OpenTelemetryCollector
from .config import Config


class NotFoundError(LookupError):
    """The requested resource does not exist."""


class CollectorClient(Protocol):
    """Reads collector resources; raises NotFoundError for missing ones."""

    def get(self, namespace: str, name: str) -> OpenTelemetryCollector: ...


@dataclass
class ReconcileParams:
    """Everything a reconciliation task needs."""

    config: Config | None = None
    client: Any = None
    instance: OpenTelemetryCollector = field(default_factory=OpenTelemetryCollector)
    log: logging.Logger = field(
        default_factory=lambda: logging.getLogger("oteloperator.controller")
    )
    recorder: Any = None


@dataclass
class Task:
    """One reconciliation step; when bail_on_error is set its failure stops the run."""

    name: str
    do: Callable[[ReconcileParams], None]
    bail_on_error: bool = False


class Reconciler:
    """Brings the objects owned by a collector in line with its desired state."""

    def __init__(
        self,
        client: CollectorClient | None = None,
        log: logging.Logger | None = None,
        config: Config | None = None,
        tasks: Iterable[Task] = (),
        recorder: Any = None,
    ) -> None:
        self.client = client
        self.log = log if log is not None else logging.getLogger("oteloperator.controller")
        self.config = config
        self.tasks = list(tasks)
        self.recorder = recorder

    def reconcile(self, namespace: str, name: str) -> None:
        """Reconcile the named collector; a missing collector is silently skipped."""
        if self.client is None:
            raise RuntimeError("the reconciler has no client")
        try:
            instance = self.client.get(namespace, name)
        except NotFoundError:
            # Deleted resources can't be fixed by a retry; wait for the next event.
            return
        except Exception:
            self.log.exception(
                "unable to fetch OpenTelemetryCollector %s/%s", namespace, name
            )
            raise

        params = ReconcileParams(
            config=self.config,
            client=self.client,
            instance=instance,
            log=self.log.getChild(f"{namespace}.{name}"),
            recorder=self.recorder,
        )
        self.run_tasks(params)

    def run_tasks(self, params: ReconcileParams) -> None:
        """Run every task in order; re-raise the error of a failing bailing task."""
        for task in self.tasks:
            try:
                task.do(params)
            except Exception:
                self.log.exception("failed to reconcile %s", task.name)
                if task.bail_on_error:
                    raise