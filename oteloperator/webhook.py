"""Defaulting and validation of OpenTelemetryCollector resources."""

from __future__ import annotations

import logging

from .adapters import InvalidYAMLError, config_from_string
from .api import Mode, OpenTelemetryCollector

_log = logging.getLogger("oteloperator.opentelemetrycollector-resource")

MANAGED_BY_LABEL = "app.kubernetes.io/managed-by"
MANAGED_BY_VALUE = "opentelemetry-operator"


class ValidationError(ValueError):
    """Raised when a collector's spec holds a combination that is not allowed."""


def _mode_name(collector: OpenTelemetryCollector) -> str:
    mode = collector.spec.mode
    return mode.value if mode is not None else ""


def apply_defaults(collector: OpenTelemetryCollector) -> None:
    """Fill in the default mode and the managed-by label, in place."""
    if not collector.spec.mode:
        collector.spec.mode = Mode.DEPLOYMENT
    if not collector.metadata.labels.get(MANAGED_BY_LABEL):
        collector.metadata.labels[MANAGED_BY_LABEL] = MANAGED_BY_VALUE
    _log.info("default name=%s", collector.metadata.name)


def _validate_spec(collector: OpenTelemetryCollector) -> None:
    spec = collector.spec
    mode = _mode_name(collector)

    if spec.mode is not Mode.STATEFULSET and spec.volume_claim_templates:
        raise ValidationError(
            f"the OpenTelemetry Collector mode is set to {mode}, which does not "
            "support the attribute 'volumeClaimTemplates'"
        )

    if spec.mode in (Mode.SIDECAR, Mode.DAEMONSET) and spec.replicas is not None:
        raise ValidationError(
            f"the OpenTelemetry Collector mode is set to {mode}, which does not "
            "support the attribute 'replicas'"
        )

    if spec.mode is Mode.SIDECAR and spec.tolerations:
        raise ValidationError(
            f"the OpenTelemetry Collector mode is set to {mode}, which does not "
            "support the attribute 'tolerations'"
        )

    if spec.target_allocator.enabled and spec.mode is not Mode.STATEFULSET:
        raise ValidationError(
            f"the OpenTelemetry Collector mode is set to {mode}, which does not "
            "support the target allocation deployment"
        )

    if spec.target_allocator.enabled:
        try:
            config_from_string(spec.config)
        except InvalidYAMLError as err:
            raise ValidationError(
                "the OpenTelemetry Spec Prometheus configuration is incorrect, "
                f"{err}"
            ) from err


def validate_create(collector: OpenTelemetryCollector) -> None:
    """Validate a collector about to be created; raise ValidationError if invalid."""
    _log.info("validate create name=%s", collector.metadata.name)
    _validate_spec(collector)


def validate_update(collector: OpenTelemetryCollector, old: OpenTelemetryCollector) -> None:
    """Validate the new state of an updated collector; raise ValidationError if invalid."""
    _log.info("validate update name=%s", collector.metadata.name)
    _validate_spec(collector)


def validate_delete(collector: OpenTelemetryCollector) -> None:
    """Deletion is always allowed."""
    _log.info("validate delete name=%s", collector.metadata.name)