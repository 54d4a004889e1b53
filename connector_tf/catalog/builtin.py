"""Connector catalog shipped with the package."""

from functools import lru_cache
from importlib import resources

import yaml

from .registry import ConnectorRegistry, load_catalog

_CATALOG_RESOURCE = "connectors.yaml"


@lru_cache(maxsize=1)
def builtin_registry() -> ConnectorRegistry:
    """Return the registry built from the packaged connectors.yaml."""
    content = resources.files(__package__).joinpath(_CATALOG_RESOURCE).read_text(encoding="utf-8")
    return load_catalog(yaml.safe_load(content))


__all__ = ["builtin_registry"]
