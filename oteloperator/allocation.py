"""Least-loaded distribution of scrape targets among collector instances."""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

_log = logging.getLogger("oteloperator.allocation")


def label_set_string(labels: Mapping[str, str]) -> str:
    """Render a label set as ``{name="value", ...}`` with names in sorted order."""
    parts = sorted(
        f"{name}={json.dumps(str(value), ensure_ascii=False)}"
        for name, value in labels.items()
    )
    return "{" + ", ".join(parts) + "}"


@dataclass(eq=False)
class CollectorInstance:
    """A collector and the number of targets currently assigned to it."""

    name: str
    num_targets: int = 0


@dataclass
class TargetItem:
    """A scrape target of a job, with the collector it is assigned to."""

    job_name: str
    target_url: str
    label: dict[str, str] = field(default_factory=dict)
    link: str = ""
    collector: CollectorInstance | None = None

    @property
    def key(self) -> str:
        return self.job_name + self.target_url


class Allocator:
    """Assigns targets to collectors, always picking the least loaded one.

    New targets are staged with set_waiting_targets() and only served after
    allocate_targets() has processed them.
    """

    def __init__(self, log: logging.Logger | None = None) -> None:
        self.log = log if log is not None else _log
        self.lock = threading.RLock()
        self.targets_waiting: dict[str, TargetItem] = {}
        self.collectors: dict[str, CollectorInstance] = {}
        self.target_items: dict[str, TargetItem] = {}

    def find_next_collector(self) -> CollectorInstance | None:
        """Return the collector with the fewest targets, or None if there is none."""
        best: CollectorInstance | None = None
        for candidate in self.collectors.values():
            if best is None or candidate.num_targets < best.num_targets:
                best = candidate
        return best

    def set_waiting_targets(self, targets: Iterable[TargetItem]) -> None:
        """Replace the staged targets with the given ones."""
        with self.lock:
            self.targets_waiting = {target.key: target for target in targets}

    def set_collectors(self, collectors: Iterable[str]) -> None:
        """Replace the set of collectors; an empty set is ignored."""
        names = list(collectors)
        with self.lock:
            if not names:
                self.log.info("No collector instances present")
                return
            self.collectors = {name: CollectorInstance(name) for name in names}

    def allocate_targets(self) -> None:
        """Drop targets no longer staged and assign the new ones."""
        with self.lock:
            self._remove_outdated_targets()
            self._process_waiting_targets()

    def reallocate_collectors(self) -> None:
        """Forget every assignment and distribute the staged targets anew."""
        with self.lock:
            self.target_items = {}
            self._process_waiting_targets()

    def _remove_outdated_targets(self) -> None:
        for key in list(self.target_items):
            if key in self.targets_waiting:
                continue
            item = self.target_items.pop(key)
            if item.collector is not None:
                owner = self.collectors.get(item.collector.name)
                if owner is not None:
                    owner.num_targets -= 1

    def _process_waiting_targets(self) -> None:
        for key, waiting in self.targets_waiting.items():
            if key in self.target_items:
                continue
            chosen = self.find_next_collector()
            if chosen is None:
                raise RuntimeError("no collector instances available to allocate targets to")
            chosen.num_targets += 1
            self.target_items[key] = TargetItem(
                job_name=waiting.job_name,
                target_url=waiting.target_url,
                label=waiting.label,
                link=f"/jobs/{waiting.job_name}/targets",
                collector=chosen,
            )


def _group(targets: list[str], label_by_url: Mapping[str, Mapping[str, str]]) -> dict[str, Any]:
    return {"targets": targets, "labels": dict(label_by_url[targets[0]])}


def targets_by_job(
    job: str,
    compare_map: Mapping[str, list[TargetItem]],
    allocator: Allocator,
) -> dict[str, dict[str, Any]]:
    """Targets of a job keyed by collector name, grouped by label set.

    ``compare_map`` maps collector name + job name to the items assigned there.
    """
    display: dict[str, dict[str, Any]] = {}
    for item in allocator.target_items.values():
        if item.job_name != job or item.collector is None:
            continue
        name = item.collector.name
        groups: dict[str, list[TargetItem]] = {}
        for target in compare_map.get(name + item.job_name, []):
            groups.setdefault(target.job_name + label_set_string(target.label), []).append(target)

        label_by_url: dict[str, Mapping[str, str]] = {}
        target_groups = []
        for members in groups.values():
            urls = []
            for target in members:
                label_by_url[target.target_url] = target.label
                urls.append(target.target_url)
            target_groups.append(_group(urls, label_by_url))

        display[name] = {
            "_link": f"/jobs/{item.job_name}/targets?collector_id={name}",
            "targets": target_groups,
        }
    return display


def targets_by_collector_and_job(
    collector: str,
    job: str,
    compare_map: Mapping[str, list[TargetItem]],
    allocator: Allocator,
) -> list[dict[str, Any]]:
    """Targets of a job assigned to one collector, grouped by label set."""
    if not any(col.name == collector for col in allocator.collectors.values()):
        return []
    grouped: dict[str, list[str]] = {}
    label_by_url: dict[str, Mapping[str, str]] = {}
    for items in compare_map.values():
        for item in items:
            if item.collector is None:
                continue
            if item.collector.name == collector and item.job_name == job:
                grouped.setdefault(label_set_string(item.label), []).append(item.target_url)
                label_by_url[item.target_url] = item.label
    return [_group(urls, label_by_url) for urls in grouped.values()]