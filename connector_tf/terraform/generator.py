"""Render a ConnectorConfig as a confluent_connector Terraform resource."""

import re

from .._config import DEFAULT_SETTINGS, Settings
from .._logging import get_logger
from ..catalog.builtin import builtin_registry
from ..catalog.classifier import classify
from ..catalog.models import ConnectorDefinition, DataFormat
from ..catalog.platform import DATA_FORMAT_FIELDS, PLATFORM_MANAGED_KEYS
from ..catalog.registry import ConnectorRegistry
from ..errors import CatalogError
from .models import ConfigValue, ConnectorConfig, GeneratedDocument

LOGGER = get_logger("terraform.generator")

_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_INDENT = "  "


def normalize_resource_name(name: str) -> str:
    """Lowercase `name` and collapse every non-alphanumeric run into one underscore."""
    normalized = _NON_ALNUM.sub("_", name.lower()).strip("_")
    if not normalized:
        return "connector"
    if normalized[0].isdigit():
        return f"connector_{normalized}"
    return normalized


def quote(text: str) -> str:
    """Quote a literal for HCL, escaping template sequences so they stay literal."""
    escaped = (
        text.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
        .replace("${", "$${")
        .replace("%{", "%%{")
    )
    return f'"{escaped}"'


class TerraformGenerator:
    """Renders connector configs built against one registry."""

    def __init__(self, registry: ConnectorRegistry, settings: Settings = DEFAULT_SETTINGS):
        self.registry = registry
        self.settings = settings

    def generate(self, config: ConnectorConfig) -> GeneratedDocument:
        definition = self.registry.lookup(config.connector_class)
        if definition is None:
            raise CatalogError(f"Connector '{config.connector_class}' is not in the catalog")

        resource_name = normalize_resource_name(config.resource_name)
        sensitive, non_sensitive = self._split_values(definition, config)

        lines = [f'resource "{self.settings.resource_type}" "{resource_name}" {{']
        lines.append(f"{_INDENT}status = {self.settings.status_variable}")
        lines.append("")
        lines.extend(self._id_block("environment", self.settings.environment_variable))
        lines.append("")
        lines.extend(self._id_block("kafka_cluster", self.settings.kafka_cluster_variable))
        lines.append("")
        lines.extend(self._map_attribute("config_sensitive", sensitive))
        lines.append("")
        lines.extend(self._map_attribute("config_nonsensitive", non_sensitive))
        lines.append("")
        lines.extend(self._lifecycle_block())
        lines.append("}")

        LOGGER.info(
            "Generated resource %s for %s with %s sensitive and %s non-sensitive keys",
            resource_name,
            config.connector_class,
            len(sensitive),
            len(non_sensitive),
        )
        return GeneratedDocument(
            resource_name=resource_name,
            connector_class=config.connector_class,
            text="\n".join(lines) + "\n",
        )

    def _split_values(
        self,
        definition: ConnectorDefinition,
        config: ConnectorConfig,
    ) -> tuple[list[tuple[str, str]], list[tuple[str, str]]]:
        sensitive_specs, non_sensitive_specs = classify(definition)
        sensitive = [
            (spec.name, quote(self.settings.placeholder)) for spec in sensitive_specs if spec.name in config.values
        ]
        non_sensitive = [
            (spec.name, self._render_value(spec.name, config.values[spec.name]))
            for spec in non_sensitive_specs
            if spec.name in config.values
        ]
        return sensitive, non_sensitive

    def _render_value(self, name: str, value: ConfigValue) -> str:
        if isinstance(value, tuple):
            items = ", ".join(quote(item) for item in value)
            return f'join(",", [{items}])'
        if name in DATA_FORMAT_FIELDS and isinstance(value, str) and value in DataFormat.__members__:
            return f"{self.settings.format_table}.{value.lower()}"
        return quote(str(value))

    def _id_block(self, name: str, variable: str) -> list[str]:
        return [
            f"{_INDENT}{name} {{",
            f"{_INDENT * 2}id = {variable}",
            f"{_INDENT}}}",
        ]

    def _map_attribute(self, name: str, entries: list[tuple[str, str]]) -> list[str]:
        if not entries:
            return [f"{_INDENT}{name} = {{}}"]

        keys = [quote(key) for key, _ in entries]
        width = max(len(key) for key in keys)
        lines = [f"{_INDENT}{name} = {{"]
        for key, (_, value) in zip(keys, entries):
            lines.append(f"{_INDENT * 2}{key.ljust(width)} = {value}")
        lines.append(f"{_INDENT}}}")
        return lines

    def _lifecycle_block(self) -> list[str]:
        lines = [f"{_INDENT}lifecycle {{", f"{_INDENT * 2}ignore_changes = ["]
        for key in PLATFORM_MANAGED_KEYS:
            lines.append(f"{_INDENT * 3}config_nonsensitive[{quote(key)}],")
        lines.append(f"{_INDENT * 2}]")
        lines.append(f"{_INDENT}}}")
        return lines


def generate(
    config: ConnectorConfig,
    registry: ConnectorRegistry | None = None,
    settings: Settings = DEFAULT_SETTINGS,
) -> GeneratedDocument:
    if registry is None:
        registry = builtin_registry()
    return TerraformGenerator(registry, settings).generate(config)


__all__ = ["TerraformGenerator", "generate", "normalize_resource_name", "quote"]
