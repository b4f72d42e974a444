"""Conversion of collector configuration text into data."""

from __future__ import annotations

from typing import Any

import yaml


class InvalidYAMLError(ValueError):
    """The collector configuration could not be parsed."""

    def __init__(self) -> None:
        super().__init__("couldn't parse the opentelemetry-collector configuration")


def config_from_string(config_str: str) -> dict[Any, Any]:
    """Parse a YAML configuration into a mapping; an empty text gives an empty mapping."""
    try:
        config = yaml.safe_load(config_str)
    except yaml.YAMLError as err:
        raise InvalidYAMLError() from err
    if config is None:
        return {}
    if not isinstance(config, dict):
        raise InvalidYAMLError()
    return config