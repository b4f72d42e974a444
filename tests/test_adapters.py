import pytest

from oteloperator.adapters import InvalidYAMLError, config_from_string


def test_invalid_yaml():
    with pytest.raises(InvalidYAMLError):
        config_from_string("🦄")


def test_broken_yaml_syntax():
    with pytest.raises(InvalidYAMLError, match="couldn't parse"):
        config_from_string("receivers: [")


def test_empty_string():
    assert config_from_string("") == {}


def test_nested_mapping():
    config = config_from_string("receivers:\n  examplereceiver:\n    endpoint: \"0.0.0.0:12345\"\n")
    assert config == {"receivers": {"examplereceiver": {"endpoint": "0.0.0.0:12345"}}}