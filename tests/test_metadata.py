from oteloperator.api import ObjectMeta, OpenTelemetryCollector, OpenTelemetryCollectorSpec
from oteloperator.metadata import annotations, labels

SHA_OF_TEST = "9f86d081884c7d659a2feaa0c55ad015a3bf4f1b2b0b822cd15d6c15b0f00a08"


def test_labels_common_set():
    otelcol = OpenTelemetryCollector(metadata=ObjectMeta(name="my-instance", namespace="my-ns"))
    result = labels(otelcol)
    assert result["app.kubernetes.io/managed-by"] == "opentelemetry-operator"
    assert result["app.kubernetes.io/instance"] == "my-ns.my-instance"
    assert result["app.kubernetes.io/part-of"] == "opentelemetry"
    assert result["app.kubernetes.io/component"] == "opentelemetry-collector"


def test_labels_propagate_down():
    otelcol = OpenTelemetryCollector(metadata=ObjectMeta(labels={"myapp": "mycomponent"}))
    result = labels(otelcol)
    assert len(result) == 5
    assert result["myapp"] == "mycomponent"


def test_labels_do_not_touch_instance():
    otelcol = OpenTelemetryCollector(metadata=ObjectMeta(labels={"myapp": "mycomponent"}))
    labels(otelcol)
    assert otelcol.metadata.labels == {"myapp": "mycomponent"}


def test_default_annotations():
    otelcol = OpenTelemetryCollector(
        metadata=ObjectMeta(name="my-instance", namespace="my-ns"),
        spec=OpenTelemetryCollectorSpec(config="test"),
    )
    result = annotations(otelcol)
    assert result["prometheus.io/scrape"] == "true"
    assert result["prometheus.io/port"] == "8888"
    assert result["prometheus.io/path"] == "/metrics"
    assert result["opentelemetry-operator-config/sha256"] == SHA_OF_TEST


def test_user_annotations():
    otelcol = OpenTelemetryCollector(
        metadata=ObjectMeta(
            name="my-instance",
            namespace="my-ns",
            annotations={
                "prometheus.io/scrape": "false",
                "prometheus.io/port": "1234",
                "prometheus.io/path": "/test",
                "opentelemetry-operator-config/sha256": "shouldBeOverwritten",
            },
        ),
        spec=OpenTelemetryCollectorSpec(config="test"),
    )
    result = annotations(otelcol)
    assert result["prometheus.io/scrape"] == "false"
    assert result["prometheus.io/port"] == "1234"
    assert result["prometheus.io/path"] == "/test"
    assert result["opentelemetry-operator-config/sha256"] == SHA_OF_TEST


def test_annotations_propagate_down():
    otelcol = OpenTelemetryCollector(metadata=ObjectMeta(annotations={"myapp": "mycomponent"}))
    result = annotations(otelcol)
    assert len(result) == 5
    assert result["myapp"] == "mycomponent"