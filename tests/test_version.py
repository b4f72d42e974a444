import platform

from oteloperator import version


def test_fallback_version():
    assert version.opentelemetry_collector() == "0.0.0"


def test_version_from_build(monkeypatch):
    monkeypatch.setattr(version.BUILD_INFO, "otel_col", "0.0.2")
    assert version.opentelemetry_collector() == "0.0.2"
    assert "0.0.2" in str(version.get())


def test_target_allocator_fallback_version():
    assert version.target_allocator() == "0.0.0"


def test_target_allocator_version_from_build(monkeypatch):
    monkeypatch.setattr(version.BUILD_INFO, "target_allocator", "0.0.2")
    assert version.target_allocator() == "0.0.2"
    assert "0.0.2" in str(version.get())


def test_auto_instrumentation_java_fallback_version():
    assert version.java_auto_instrumentation() == "0.0.0"


def test_get_reports_runtime_and_build_fields(monkeypatch):
    monkeypatch.setattr(version.BUILD_INFO, "version", "1.2.3")
    v = version.get()
    assert v.operator == "1.2.3"
    assert v.python == platform.python_version()
    assert v.to_dict()["opentelemetry-operator"] == "1.2.3"
    assert v.to_dict()["auto-instrumentation-java"] == "0.0.0"