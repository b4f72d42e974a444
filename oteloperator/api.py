"""Resource types of the opentelemetry.io/v1alpha1 API group and their dict forms."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

GROUP = "opentelemetry.io"
VERSION = "v1alpha1"
API_VERSION = f"{GROUP}/{VERSION}"
COLLECTOR_KIND = "OpenTelemetryCollector"
INSTRUMENTATION_KIND = "Instrumentation"


class _StrEnum(str, Enum):
    def __str__(self) -> str:
        return self.value


class Mode(_StrEnum):
    """How the collector is deployed."""

    DAEMONSET = "daemonset"
    DEPLOYMENT = "deployment"
    SIDECAR = "sidecar"
    STATEFULSET = "statefulset"


class Propagator(_StrEnum):
    """Inter-process context propagation format."""

    TRACE_CONTEXT = "tracecontext"
    BAGGAGE = "baggage"
    B3 = "b3"
    B3_MULTI = "b3multi"
    JAEGER = "jaeger"
    XRAY = "xray"
    OTTRACE = "ottrace"
    NONE = "none"


class SamplerType(_StrEnum):
    """Sampler used by instrumented applications."""

    ALWAYS_ON = "always_on"
    ALWAYS_OFF = "always_off"
    TRACE_ID_RATIO = "traceidratio"
    PARENT_BASED_ALWAYS_ON = "parentbased_always_on"
    PARENT_BASED_ALWAYS_OFF = "parentbased_always_off"
    PARENT_BASED_TRACE_ID_RATIO = "parentbased_traceidratio"
    JAEGER_REMOTE = "jaeger_remote"
    XRAY = "xray"


@dataclass
class ObjectMeta:
    """Identifying metadata of a resource."""

    name: str = ""
    namespace: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)


@dataclass
class Exporter:
    """OTLP exporter configuration."""

    endpoint: str = ""


@dataclass
class Sampler:
    """Sampling configuration; the argument's meaning depends on the type."""

    type: SamplerType | None = None
    argument: str = ""


@dataclass
class JavaSpec:
    """Java agent configuration."""

    image: str = ""


@dataclass
class NodeJSSpec:
    """NodeJS SDK configuration."""

    image: str = ""


@dataclass
class InstrumentationSpec:
    """Desired state of the SDK and auto-instrumentation."""

    exporter: Exporter = field(default_factory=Exporter)
    resource_attributes: dict[str, str] = field(default_factory=dict)
    propagators: list[Propagator] = field(default_factory=list)
    sampler: Sampler = field(default_factory=Sampler)
    java: JavaSpec = field(default_factory=JavaSpec)
    nodejs: NodeJSSpec = field(default_factory=NodeJSSpec)


@dataclass
class Instrumentation:
    """An Instrumentation resource."""

    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: InstrumentationSpec = field(default_factory=InstrumentationSpec)


@dataclass
class TargetAllocatorSpec:
    """Settings for the Prometheus target allocator."""

    enabled: bool = False
    image: str = ""


@dataclass
class OpenTelemetryCollectorSpec:
    """Desired state of a collector. Kubernetes core objects are kept as plain dicts."""

    config: str = ""
    args: dict[str, str] = field(default_factory=dict)
    replicas: int | None = None
    image_pull_policy: str = ""
    image: str = ""
    target_allocator: TargetAllocatorSpec = field(default_factory=TargetAllocatorSpec)
    mode: Mode | None = None
    service_account: str = ""
    security_context: dict[str, Any] | None = None
    host_network: bool = False
    volume_claim_templates: list[dict[str, Any]] = field(default_factory=list)
    volume_mounts: list[dict[str, Any]] = field(default_factory=list)
    volumes: list[dict[str, Any]] = field(default_factory=list)
    ports: list[dict[str, Any]] = field(default_factory=list)
    env: list[dict[str, Any]] = field(default_factory=list)
    env_from: list[dict[str, Any]] = field(default_factory=list)
    resources: dict[str, Any] = field(default_factory=dict)
    tolerations: list[dict[str, Any]] = field(default_factory=list)
    pod_annotations: dict[str, str] = field(default_factory=dict)


@dataclass
class OpenTelemetryCollectorStatus:
    """Observed state of a collector."""

    replicas: int = 0
    version: str = ""
    messages: list[str] = field(default_factory=list)


@dataclass
class OpenTelemetryCollector:
    """An OpenTelemetryCollector resource."""

    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: OpenTelemetryCollectorSpec = field(default_factory=OpenTelemetryCollectorSpec)
    status: OpenTelemetryCollectorStatus = field(
        default_factory=OpenTelemetryCollectorStatus
    )


# --- serialisation helpers -------------------------------------------------

_SPEC_FIELDS = {
    "config": "config",
    "args": "args",
    "image_pull_policy": "imagePullPolicy",
    "image": "image",
    "service_account": "serviceAccount",
    "security_context": "securityContext",
    "host_network": "hostNetwork",
    "volume_claim_templates": "volumeClaimTemplates",
    "volume_mounts": "volumeMounts",
    "volumes": "volumes",
    "ports": "ports",
    "env": "env",
    "env_from": "envFrom",
    "tolerations": "tolerations",
    "pod_annotations": "podAnnotations",
}

_LIST_FIELDS = {"volume_claim_templates", "volume_mounts", "volumes", "ports",
                "env", "env_from", "tolerations"}
_MAP_FIELDS = {"args", "pod_annotations"}


def _is_empty(value: Any) -> bool:
    if value is None or value is False:
        return True
    if isinstance(value, (str, list, dict)) and not value:
        return True
    return isinstance(value, int) and not isinstance(value, bool) and value == 0


def _omit_empty(values: Mapping[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in values.items() if not _is_empty(value)}


def _mapping(data: Any, where: str) -> Mapping[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ValueError(f"{where} must be a mapping, not {type(data).__name__}")
    return data


def _list(data: Any, where: str) -> list[Any]:
    if data is None:
        return []
    if not isinstance(data, list):
        raise ValueError(f"{where} must be a list, not {type(data).__name__}")
    return copy.deepcopy(data)


def _str_map(data: Any, where: str) -> dict[str, str]:
    return {str(k): str(v) for k, v in _mapping(data, where).items()}


def _check_type_meta(data: Mapping[str, Any], kind: str) -> None:
    api_version = data.get("apiVersion")
    if api_version not in (None, "", API_VERSION):
        raise ValueError(f"unexpected apiVersion {api_version!r}, expected {API_VERSION!r}")
    found_kind = data.get("kind")
    if found_kind not in (None, "", kind):
        raise ValueError(f"unexpected kind {found_kind!r}, expected {kind!r}")


def _metadata_to_dict(meta: ObjectMeta) -> dict[str, Any]:
    return _omit_empty({
        "name": meta.name,
        "namespace": meta.namespace,
        "labels": dict(meta.labels),
        "annotations": dict(meta.annotations),
    })


def _metadata_from_dict(data: Any) -> ObjectMeta:
    meta = _mapping(data, "metadata")
    return ObjectMeta(
        name=str(meta.get("name") or ""),
        namespace=str(meta.get("namespace") or ""),
        labels=_str_map(meta.get("labels"), "metadata.labels"),
        annotations=_str_map(meta.get("annotations"), "metadata.annotations"),
    )


def collector_to_dict(collector: OpenTelemetryCollector) -> dict[str, Any]:
    """Return the JSON-ready form of a collector resource, omitting empty fields."""
    spec = collector.spec
    spec_values = {
        json_name: copy.deepcopy(getattr(spec, attr))
        for attr, json_name in _SPEC_FIELDS.items()
    }
    spec_dict = _omit_empty(spec_values)
    if spec.replicas is not None:
        spec_dict["replicas"] = spec.replicas
    if spec.mode is not None:
        spec_dict["mode"] = spec.mode.value
    spec_dict["targetAllocator"] = _omit_empty({
        "enabled": spec.target_allocator.enabled,
        "image": spec.target_allocator.image,
    })
    spec_dict["resources"] = copy.deepcopy(spec.resources)

    status = collector.status
    return {
        "apiVersion": API_VERSION,
        "kind": COLLECTOR_KIND,
        "metadata": _metadata_to_dict(collector.metadata),
        "spec": spec_dict,
        "status": _omit_empty({
            "replicas": status.replicas,
            "version": status.version,
            "messages": list(status.messages),
        }),
    }


def collector_from_dict(data: Mapping[str, Any]) -> OpenTelemetryCollector:
    """Build a collector resource from its JSON form."""
    data = _mapping(data, "collector")
    _check_type_meta(data, COLLECTOR_KIND)
    raw_spec = _mapping(data.get("spec"), "spec")

    kwargs: dict[str, Any] = {}
    for attr, json_name in _SPEC_FIELDS.items():
        if json_name not in raw_spec or raw_spec[json_name] is None:
            continue
        value = raw_spec[json_name]
        where = f"spec.{json_name}"
        if attr in _LIST_FIELDS:
            kwargs[attr] = _list(value, where)
        elif attr in _MAP_FIELDS:
            kwargs[attr] = _str_map(value, where)
        elif attr == "security_context":
            kwargs[attr] = copy.deepcopy(dict(_mapping(value, where)))
        elif attr == "host_network":
            kwargs[attr] = bool(value)
        else:
            kwargs[attr] = str(value)

    if raw_spec.get("replicas") is not None:
        kwargs["replicas"] = int(raw_spec["replicas"])
    if raw_spec.get("mode"):
        kwargs["mode"] = Mode(raw_spec["mode"])
    ta = _mapping(raw_spec.get("targetAllocator"), "spec.targetAllocator")
    kwargs["target_allocator"] = TargetAllocatorSpec(
        enabled=bool(ta.get("enabled", False)),
        image=str(ta.get("image") or ""),
    )
    kwargs["resources"] = copy.deepcopy(dict(_mapping(raw_spec.get("resources"), "spec.resources")))

    raw_status = _mapping(data.get("status"), "status")
    status = OpenTelemetryCollectorStatus(
        replicas=int(raw_status.get("replicas") or 0),
        version=str(raw_status.get("version") or ""),
        messages=[str(m) for m in _list(raw_status.get("messages"), "status.messages")],
    )
    return OpenTelemetryCollector(
        metadata=_metadata_from_dict(data.get("metadata")),
        spec=OpenTelemetryCollectorSpec(**kwargs),
        status=status,
    )


def instrumentation_to_dict(instrumentation: Instrumentation) -> dict[str, Any]:
    """Return the JSON-ready form of an instrumentation resource."""
    spec = instrumentation.spec
    spec_dict: dict[str, Any] = {
        "exporter": _omit_empty({"endpoint": spec.exporter.endpoint}),
        "sampler": _omit_empty({
            "type": spec.sampler.type.value if spec.sampler.type is not None else None,
            "argument": spec.sampler.argument,
        }),
        "java": _omit_empty({"image": spec.java.image}),
        "nodejs": _omit_empty({"image": spec.nodejs.image}),
    }
    if spec.resource_attributes:
        spec_dict["resourceAttributes"] = dict(spec.resource_attributes)
    if spec.propagators:
        spec_dict["propagators"] = [p.value for p in spec.propagators]
    return {
        "apiVersion": API_VERSION,
        "kind": INSTRUMENTATION_KIND,
        "metadata": _metadata_to_dict(instrumentation.metadata),
        "spec": spec_dict,
        "status": {},
    }


def instrumentation_from_dict(data: Mapping[str, Any]) -> Instrumentation:
    """Build an instrumentation resource from its JSON form."""
    data = _mapping(data, "instrumentation")
    _check_type_meta(data, INSTRUMENTATION_KIND)
    raw_spec = _mapping(data.get("spec"), "spec")
    exporter = _mapping(raw_spec.get("exporter"), "spec.exporter")
    sampler = _mapping(raw_spec.get("sampler"), "spec.sampler")
    java = _mapping(raw_spec.get("java"), "spec.java")
    nodejs = _mapping(raw_spec.get("nodejs"), "spec.nodejs")
    sampler_type = sampler.get("type")
    spec = InstrumentationSpec(
        exporter=Exporter(endpoint=str(exporter.get("endpoint") or "")),
        resource_attributes=_str_map(
            raw_spec.get("resourceAttributes"), "spec.resourceAttributes"
        ),
        propagators=[
            Propagator(p) for p in _list(raw_spec.get("propagators"), "spec.propagators")
        ],
        sampler=Sampler(
            type=SamplerType(sampler_type) if sampler_type else None,
            argument=str(sampler.get("argument") or ""),
        ),
        java=JavaSpec(image=str(java.get("image") or "")),
        nodejs=NodeJSSpec(image=str(nodejs.get("image") or "")),
    )
    return Instrumentation(metadata=_metadata_from_dict(data.get("metadata")), spec=spec)