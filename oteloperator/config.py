"""Runtime configuration of the operator."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Iterable, Protocol

from . import version as _version
from .autodetect import Platform

DEFAULT_AUTO_DETECT_FREQUENCY = 5.0
DEFAULT_COLLECTOR_CONFIG_MAP_ENTRY = "collector.yaml"
DEFAULT_TARGET_ALLOCATOR_CONFIG_MAP_ENTRY = "targetallocator.yaml"


class PlatformDetector(Protocol):
    """Anything that can tell which platform the operator runs on."""

    def platform(self) -> Platform: ...


class Config:
    """The operator's configuration, with optional periodic platform detection.

    ``on_change`` callbacks run whenever auto-detection changes a value; a
    failing callback is logged and does not fail the detection.
    """

    def __init__(
        self,
        *,
        detector: PlatformDetector | None = None,
        auto_detect_frequency: float = DEFAULT_AUTO_DETECT_FREQUENCY,
        collector_image: str = "",
        collector_config_map_entry: str = DEFAULT_COLLECTOR_CONFIG_MAP_ENTRY,
        target_allocator_image: str = "",
        target_allocator_config_map_entry: str = DEFAULT_TARGET_ALLOCATOR_CONFIG_MAP_ENTRY,
        logger: logging.Logger | None = None,
        on_change: Iterable[Callable[[], None]] = (),
        platform: Platform = Platform.UNKNOWN,
        version: _version.Version | None = None,
    ) -> None:
        self.detector = detector
        self.auto_detect_frequency = auto_detect_frequency
        self.collector_image = collector_image
        self.collector_config_map_entry = collector_config_map_entry
        self.target_allocator_image = target_allocator_image
        self.target_allocator_config_map_entry = target_allocator_config_map_entry
        self.logger = logger if logger is not None else logging.getLogger("oteloperator.config")
        self.on_change = list(on_change)
        self.platform = platform
        self.version = version if version is not None else _version.get()
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def start_auto_detect(self) -> None:
        """Detect once now, then keep detecting in the background until stop().

        The background routine is started even when the first run fails; the
        first run's error is then raised.
        """
        try:
            self.auto_detect()
        finally:
            self._start_periodic()

    def _start_periodic(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._periodic_auto_detect, name="config-auto-detect", daemon=True
        )
        self._thread.start()

    def _periodic_auto_detect(self) -> None:
        while not self._stop.wait(self.auto_detect_frequency):
            try:
                self.auto_detect()
            except Exception as err:  # noqa: BLE001 - keep the loop alive
                self.logger.info("auto-detection failed: %s", err)

    def stop(self) -> None:
        """Stop the background detection, if it runs."""
        self._stop.set()
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join()

    def auto_detect(self) -> None:
        """Detect the platform if still unknown and notify callbacks on change."""
        self.logger.debug("auto-detecting the configuration based on the environment")
        changed = False

        if self.platform is Platform.UNKNOWN:
            if self.detector is None:
                raise RuntimeError("no auto-detection routine is configured")
            detected = self.detector.platform()
            if detected != self.platform:
                self.logger.debug("platform detected: %s", detected)
                self.platform = detected
                changed = True

        if changed:
            for callback in self.on_change:
                try:
                    callback()
                except Exception:  # noqa: BLE001 - detection itself succeeded
                    self.logger.exception("configuration change notification failed for callback")