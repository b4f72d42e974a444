"""Configuration file of the target allocator."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import yaml
from yaml.constructor import ConstructorError

DEFAULT_CONFIG_FILE = "/conf/targetallocator.yaml"
_KNOWN_FIELDS = ("label_selector", "config")
_MERGE_TAG = "tag:yaml.org,2002:merge"


class ConfigError(ValueError):
    """The allocator configuration could not be parsed."""


@dataclass
class AllocatorConfig:
    """Collector pod selector and the embedded Prometheus configuration."""

    label_selector: dict[str, str] = field(default_factory=dict)
    config: dict[str, Any] | None = None

    @property
    def scrape_configs(self) -> list[dict[str, Any]]:
        if not self.config:
            return []
        return list(self.config.get("scrape_configs") or [])


class _StrictLoader(yaml.SafeLoader):
    """Safe loader that rejects duplicate mapping keys."""


def _construct_mapping(loader: _StrictLoader, node: yaml.MappingNode, deep: bool = False) -> Any:
    seen: list[Any] = []
    for key_node, _ in node.value:
        if key_node.tag == _MERGE_TAG:
            continue
        key = loader.construct_object(key_node, deep=True)
        if key in seen:
            raise ConstructorError(
                "while constructing a mapping", node.start_mark,
                f"found duplicate key {key!r}", key_node.start_mark,
            )
        seen.append(key)
    return yaml.SafeLoader.construct_mapping(loader, node, deep)


_StrictLoader.add_constructor(yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG, _construct_mapping)


def _fail(reason: str) -> ConfigError:
    return ConfigError(f"error unmarshaling YAML: {reason}")


def parse(text: str) -> AllocatorConfig:
    """Parse the configuration strictly: unknown fields and duplicate keys are errors."""
    try:
        data = yaml.load(text, Loader=_StrictLoader)
    except yaml.YAMLError as err:
        raise _fail(str(err)) from err
    if data is None:
        return AllocatorConfig()
    if not isinstance(data, dict):
        raise _fail(f"expected a mapping, got {type(data).__name__}")
    unknown = [key for key in data if key not in _KNOWN_FIELDS]
    if unknown:
        raise _fail(f"unknown field {unknown[0]!r}")

    selector = data.get("label_selector") or {}
    if not isinstance(selector, dict):
        raise _fail("label_selector must be a mapping")
    config = data.get("config")
    if config is not None and not isinstance(config, dict):
        raise _fail("config must be a mapping")
    return AllocatorConfig(
        label_selector={str(k): str(v) for k, v in selector.items()},
        config=config,
    )


def load(file: str | None = None) -> AllocatorConfig:
    """Read and parse the configuration file, by default DEFAULT_CONFIG_FILE."""
    path = file or DEFAULT_CONFIG_FILE
    with open(path, encoding="utf-8") as handle:
        return parse(handle.read())