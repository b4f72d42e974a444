"""Labels and annotations placed on objects owned by a collector."""

from __future__ import annotations

import hashlib

from .api import OpenTelemetryCollector


def labels(instance: OpenTelemetryCollector) -> dict[str, str]:
    """Common labels for every object that belongs to a managed collector."""
    base = dict(instance.metadata.labels)
    base["app.kubernetes.io/managed-by"] = "opentelemetry-operator"
    base["app.kubernetes.io/instance"] = (
        f"{instance.metadata.namespace}.{instance.metadata.name}"
    )
    base["app.kubernetes.io/part-of"] = "opentelemetry"
    base["app.kubernetes.io/component"] = "opentelemetry-collector"
    return base


def annotations(instance: OpenTelemetryCollector) -> dict[str, str]:
    """Annotations for a collector pod, including the config's SHA-256."""
    result = {
        "prometheus.io/scrape": "true",
        "prometheus.io/port": "8888",
        "prometheus.io/path": "/metrics",
    }
    result.update(instance.metadata.annotations)
    result["opentelemetry-operator-config/sha256"] = hashlib.sha256(
        instance.spec.config.encode("utf-8")
    ).hexdigest()
    return result