import pytest

from oteloperator.allocator_config import AllocatorConfig, ConfigError, load, parse

SAMPLE = """\
label_selector:
  app.kubernetes.io/instance: default.test
  app.kubernetes.io/managed-by: opentelemetry-operator
config:
  scrape_configs:
    - job_name: prometheus
      file_sd_configs:
        - files:
            - ./file_sd_test.json
      static_configs:
        - targets: ["prom.domain:9001", "prom.domain:9002", "prom.domain:9003"]
          labels:
            my: label
"""


def test_parse_sample():
    cfg = parse(SAMPLE)
    assert cfg.label_selector["app.kubernetes.io/instance"] == "default.test"
    assert cfg.label_selector["app.kubernetes.io/managed-by"] == "opentelemetry-operator"
    scrape = cfg.scrape_configs[0]
    assert scrape["job_name"] == "prometheus"
    assert scrape["file_sd_configs"][0]["files"] == ["./file_sd_test.json"]
    static = scrape["static_configs"][0]
    assert static["targets"] == ["prom.domain:9001", "prom.domain:9002", "prom.domain:9003"]
    assert static["labels"] == {"my": "label"}


def test_load_from_file(tmp_path):
    path = tmp_path / "targetallocator.yaml"
    path.write_text(SAMPLE, encoding="utf-8")
    assert load(str(path)) == parse(SAMPLE)


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load(str(tmp_path / "absent.yaml"))


def test_empty_text_gives_defaults():
    cfg = parse("")
    assert cfg == AllocatorConfig()
    assert cfg.scrape_configs == []


def test_unknown_field_is_rejected():
    with pytest.raises(ConfigError, match="error unmarshaling YAML"):
        parse("label_selector: {}\nunexpected: 1\n")


def test_duplicate_key_is_rejected():
    with pytest.raises(ConfigError):
        parse("label_selector:\n  a: b\n  a: c\n")


def test_invalid_yaml_is_rejected():
    with pytest.raises(ConfigError):
        parse("label_selector: [unclosed")


def test_non_mapping_document_is_rejected():
    with pytest.raises(ConfigError):
        parse("- a\n- b\n")


def test_label_selector_must_be_mapping():
    with pytest.raises(ConfigError):
        parse("label_selector: some-string\n")