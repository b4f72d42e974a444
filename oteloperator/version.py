"""Versions of the operator and of the components it deploys."""

from __future__ import annotations

import platform
from dataclasses import dataclass

_FALLBACK = "0.0.0"


@dataclass
class BuildInfo:
    """Values stamped in at build time; empty when not set."""

    version: str = ""
    build_date: str = ""
    otel_col: str = ""
    target_allocator: str = ""
    auto_instrumentation_java: str = ""


BUILD_INFO = BuildInfo()


@dataclass(frozen=True)
class Version:
    """The operator's version and the versions of some components it uses."""

    operator: str
    build_date: str
    opentelemetry_collector: str
    python: str
    target_allocator: str
    java_auto_instrumentation: str

    def to_dict(self) -> dict[str, str]:
        return {
            "opentelemetry-operator": self.operator,
            "build-date": self.build_date,
            "opentelemetry-collector-version": self.opentelemetry_collector,
            "python-version": self.python,
            "target-allocator-version": self.target_allocator,
            "auto-instrumentation-java": self.java_auto_instrumentation,
        }

    def __str__(self) -> str:
        return (
            f"Version(Operator='{self.operator}', BuildDate='{self.build_date}', "
            f"OpenTelemetryCollector='{self.opentelemetry_collector}', "
            f"Python='{self.python}', TargetAllocator='{self.target_allocator}')"
        )


def opentelemetry_collector() -> str:
    """Default collector version, falling back to 0.0.0 when not set at build."""
    return BUILD_INFO.otel_col or _FALLBACK


def target_allocator() -> str:
    """Default target allocator version, falling back to 0.0.0 when not set at build."""
    return BUILD_INFO.target_allocator or _FALLBACK


def java_auto_instrumentation() -> str:
    """Default Java auto-instrumentation version, falling back to 0.0.0."""
    return BUILD_INFO.auto_instrumentation_java or _FALLBACK


def get() -> Version:
    """Return the current version information."""
    return Version(
        operator=BUILD_INFO.version,
        build_date=BUILD_INFO.build_date,
        opentelemetry_collector=opentelemetry_collector(),
        python=platform.python_version(),
        target_allocator=target_allocator(),
        java_auto_instrumentation=java_auto_instrumentation(),
    )