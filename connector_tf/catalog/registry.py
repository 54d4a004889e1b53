"""Connector definition registry and catalog file loading."""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .._logging import get_logger
from ..errors import CatalogError
from .models import ConnectorDefinition, Direction
from .platform import with_platform_fields

logger = get_logger("catalog.registry")


class ConnectorRegistry:
    """Read-only mapping of connector class identifiers to their definitions."""

    def __init__(self, definitions: Iterable[ConnectorDefinition]):
        by_identifier: dict[str, ConnectorDefinition] = {}
        for definition in definitions:
            if definition.identifier in by_identifier:
                raise CatalogError(f"Duplicate connector identifier in catalog: {definition.identifier}")
            by_identifier[definition.identifier] = definition
        self._definitions = by_identifier
        self._ordered = tuple(sorted(by_identifier))
        logger.debug("Registry built with %s connector definitions", len(self._ordered))

    def lookup(self, identifier: str) -> ConnectorDefinition | None:
        return self._definitions.get(identifier)

    def list_definitions(self, direction: Direction | str | None = None) -> Iterator[ConnectorDefinition]:
        """Yield definitions sorted by identifier, optionally filtered by direction.

        An unrecognized direction string matches nothing.
        """
        if direction is None:
            wanted = None
        else:
            wanted = Direction.parse(direction)
            if wanted is None:
                return
        for identifier in self._ordered:
            definition = self._definitions[identifier]
            if wanted is None or definition.direction is wanted:
                yield definition

    def __iter__(self) -> Iterator[ConnectorDefinition]:
        return self.list_definitions()

    def __len__(self) -> int:
        return len(self._ordered)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._definitions


def _read_catalog_file(path: Path) -> Any:
    if not path.exists():
        raise FileNotFoundError(f"Catalog file not found: {path}")

    suffix = path.suffix.lower()
    content = path.read_text(encoding="utf-8")

    if suffix == ".json":
        return json.loads(content)
    if suffix in {".yaml", ".yml"}:
        return yaml.safe_load(content)
    raise CatalogError("Unsupported catalog format. Use JSON (.json) or YAML (.yaml/.yml).")


def _catalog_entries(data: Any) -> list[Mapping[str, Any]]:
    """Accept either a bare list of definitions or a {"connectors": [...]} document."""
    if isinstance(data, Mapping):
        data = data.get("connectors")
    if not isinstance(data, list):
        raise CatalogError("Catalog must be a list of connector definitions or contain a 'connectors' list.")
    for entry in data:
        if not isinstance(entry, Mapping):
            raise CatalogError("Every catalog entry must be a key-value object.")
    return data


def build_definition(entry: Mapping[str, Any], *, platform_fields: bool = True) -> ConnectorDefinition:
    """Validate one catalog entry, optionally adding the platform-level fields for its direction."""
    payload = dict(entry)
    try:
        if platform_fields:
            payload = with_platform_fields(payload)
        return ConnectorDefinition.model_validate(payload)
    except ValidationError as exc:
        name = entry.get("identifier", "<unnamed>")
        raise CatalogError(f"Invalid definition for connector '{name}': {exc}") from exc


def load_catalog(
    source: str | Path | Mapping[str, Any] | Iterable[Mapping[str, Any]],
    *,
    platform_fields: bool = True,
) -> ConnectorRegistry:
    """Build a registry from a JSON/YAML catalog file or already-decoded entries."""
    if isinstance(source, (str, Path)):
        data = _read_catalog_file(Path(source))
        logger.info("Loaded connector catalog from %s", source)
    elif isinstance(source, Mapping):
        data = source
    else:
        data = list(source)

    entries = _catalog_entries(data)
    return ConnectorRegistry(build_definition(entry, platform_fields=platform_fields) for entry in entries)


__all__ = ["ConnectorRegistry", "build_definition", "load_catalog"]
