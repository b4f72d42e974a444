"""HTTP service that exposes how scrape targets are allocated to collectors."""

from __future__ import annotations

import argparse
import json
import logging
import os
import re
import signal
import threading
from typing import Any, Callable, Iterable
from urllib.parse import parse_qs
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

from .allocation import (
    Allocator,
    TargetItem,
    targets_by_collector_and_job,
    targets_by_job,
)
from .allocator_config import AllocatorConfig, ConfigError, load

CONFIG_FILE_NAME = "targetallocator.yaml"

_log = logging.getLogger("oteloperator.allocator")
_TARGETS_PATH = re.compile(r"/jobs/([^/]+)/targets")


class AllocatorApp:
    """WSGI application serving /jobs and /jobs/{job_id}/targets."""

    def __init__(self, allocator: Allocator) -> None:
        self.allocator = allocator

    def _compare_map(self) -> dict[str, list[TargetItem]]:
        result: dict[str, list[TargetItem]] = {}
        for item in self.allocator.target_items.values():
            if item.collector is not None:
                result.setdefault(item.collector.name + item.job_name, []).append(item)
        return result

    def jobs(self) -> dict[str, dict[str, str]]:
        """Every known job with the link to its targets."""
        with self.allocator.lock:
            return {
                item.job_name: {"_link": item.link}
                for item in self.allocator.target_items.values()
            }

    def targets(self, job_id: str, collector_id: str | None = None) -> Any:
        """Targets of a job, per collector, or only those of one collector."""
        with self.allocator.lock:
            compare_map = self._compare_map()
            if collector_id is None:
                return targets_by_job(job_id, compare_map, self.allocator)
            return targets_by_collector_and_job(
                collector_id, job_id, compare_map, self.allocator
            )

    def __call__(self, environ: dict[str, Any], start_response: Callable) -> Iterable[bytes]:
        method = str(environ.get("REQUEST_METHOD", "GET")).upper()
        path = environ.get("PATH_INFO", "") or "/"

        handler: Callable[[], Any] | None = None
        if path == "/jobs":
            handler = self.jobs
        else:
            match = _TARGETS_PATH.fullmatch(path)
            if match is not None:
                job_id = match.group(1)
                values = parse_qs(environ.get("QUERY_STRING", ""), keep_blank_values=True)
                collector = values.get("collector_id")
                collector_id = collector[0] if collector else None
                handler = lambda: self.targets(job_id, collector_id)  # noqa: E731

        if handler is None:
            body = b"404 page not found\n"
            start_response("404 Not Found", [
                ("Content-Type", "text/plain; charset=utf-8"),
                ("Content-Length", str(len(body))),
            ])
            return [body]
        if method != "GET":
            start_response("405 Method Not Allowed", [("Content-Length", "0")])
            return [b""]

        body = (json.dumps(handler()) + "\n").encode("utf-8")
        start_response("200 OK", [
            ("Content-Type", "application/json"),
            ("Content-Length", str(len(body))),
        ])
        return [body]


class _AppHolder:
    """Lets the served application be swapped while the server keeps running."""

    def __init__(self, app: AllocatorApp) -> None:
        self.app = app

    def __call__(self, environ: dict[str, Any], start_response: Callable) -> Iterable[bytes]:
        return self.app(environ, start_response)


class _QuietHandler(WSGIRequestHandler):
    def log_message(self, format: str, *args: Any) -> None:  # noqa: A002
        _log.debug(format, *args)


def _static_targets(cfg: AllocatorConfig) -> list[TargetItem]:
    targets = []
    for scrape in cfg.scrape_configs:
        job = str(scrape.get("job_name", ""))
        for group in scrape.get("static_configs") or []:
            labels = {str(k): str(v) for k, v in (group.get("labels") or {}).items()}
            for address in group.get("targets") or []:
                targets.append(TargetItem(job_name=job, target_url=str(address), label=dict(labels)))
    return targets


def _new_app(config_file: str, collectors: list[str]) -> AllocatorApp:
    cfg = load(config_file)
    allocator = Allocator(_log)
    allocator.set_waiting_targets(_static_targets(cfg))
    if collectors:
        allocator.set_collectors(collectors)
        allocator.reallocate_collectors()
    return AllocatorApp(allocator)


def _split_addr(addr: str) -> tuple[str, int]:
    host, _, port = addr.rpartition(":")
    return host, int(port)


def _dir_entries(path: str) -> set[str]:
    try:
        return set(os.listdir(path))
    except OSError:
        return set()


def main(argv: list[str] | None = None) -> int:
    """Serve the allocation until interrupted; reload when the config directory changes."""
    parser = argparse.ArgumentParser(prog="target-allocator")
    parser.add_argument("--listen-addr", default=":8080",
                        help="The address where this service serves.")
    parser.add_argument("--config-dir", default="/conf/",
                        help="The directory for the config file.")
    parser.add_argument("--collector", action="append", default=[],
                        help="Name of a collector instance to allocate targets to.")
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO)
    _log.info("Starting the Target Allocator")

    config_file = os.path.join(args.config_dir, CONFIG_FILE_NAME)
    try:
        holder = _AppHolder(_new_app(config_file, args.collector))
        host, port = _split_addr(args.listen_addr)
        server = make_server(host, port, holder, server_class=WSGIServer,
                             handler_class=_QuietHandler)
    except (OSError, ConfigError, RuntimeError, ValueError) as err:
        _log.error("Can't start the server: %s", err)
        return 1

    stop = threading.Event()
    previous = None
    if threading.current_thread() is threading.main_thread():
        previous = signal.signal(signal.SIGTERM, lambda *_: stop.set())
    serving = threading.Thread(target=server.serve_forever, daemon=True)
    serving.start()
    _log.info("Starting server...")

    seen = _dir_entries(args.config_dir)
    try:
        while not stop.wait(1.0):
            current = _dir_entries(args.config_dir)
            if current - seen:
                _log.info("ConfigMap updated!")
                try:
                    holder.app = _new_app(config_file, args.collector)
                except (OSError, ConfigError, RuntimeError) as err:
                    _log.error("Error restarting the server with new config: %s", err)
            seen = current
    except KeyboardInterrupt:
        pass
    finally:
        _log.info("Shutting down server...")
        server.shutdown()
        server.server_close()
        if previous is not None:
            signal.signal(signal.SIGTERM, previous)
    return 0