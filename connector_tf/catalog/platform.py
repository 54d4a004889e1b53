"""Fields and keys the managed connector platform defines for every connector."""

from collections.abc import Mapping
from typing import Any

from .models import DataFormat, Direction

CONNECTOR_CLASS_FIELD = "connector.class"
NAME_FIELD = "name"
TOPICS_FIELD = "topics"

# Config keys whose value can be a reference into the shared format table.
DATA_FORMAT_FIELDS = frozenset(
    {
        "input.data.format",
        "input.key.format",
        "output.data.format",
        "output.key.format",
    }
)

# Attributes the platform rewrites after creation; always listed in lifecycle.ignore_changes.
PLATFORM_MANAGED_KEYS = (
    "kafka.deployment.type",
    "kafka.max.partition.validation.disable",
    "kafka.max.partition.validation.enable",
    "kafka.max.partition.validation",
)

_FORMAT_VALUES = tuple(data_format.value for data_format in DataFormat)


def data_format_field(direction: Direction) -> str:
    """Name of the config key holding the record format chosen for a connector."""
    if direction is Direction.SINK:
        return "input.data.format"
    return "output.data.format"


def assembler_managed_fields(direction: Direction) -> frozenset[str]:
    """Fields whose values come from assemble() arguments rather than answers."""
    return frozenset({CONNECTOR_CLASS_FIELD, NAME_FIELD, TOPICS_FIELD, data_format_field(direction)})


def _leading_fields(identifier: str, direction: Direction) -> list[dict[str, Any]]:
    return [
        {
            "name": CONNECTOR_CLASS_FIELD,
            "required": True,
            "default": identifier,
            "description": "Connector plugin class",
        },
        {"name": NAME_FIELD, "required": True, "description": "Connector name"},
        {
            "name": "kafka.auth.mode",
            "kind": "enum",
            "allowed_values": ["SERVICE_ACCOUNT", "KAFKA_API_KEY"],
            "default": "SERVICE_ACCOUNT",
            "description": "How the connector authenticates to the Kafka cluster",
        },
        {"name": "kafka.service.account.id", "description": "Service account used when kafka.auth.mode is SERVICE_ACCOUNT"},
        {"name": "kafka.api.key", "sensitive": True, "description": "Kafka API key"},
        {"name": "kafka.api.secret", "sensitive": True, "description": "Kafka API secret"},
        {
            "name": TOPICS_FIELD,
            "kind": "string_list",
            "required": direction is Direction.SINK,
            "description": "Topics the connector reads from or writes to",
        },
    ]


def _trailing_fields(direction: Direction) -> list[dict[str, Any]]:
    return [
        {
            "name": data_format_field(direction),
            "kind": "enum",
            "allowed_values": list(_FORMAT_VALUES),
            "required": True,
            "description": "Record format on the Kafka side",
        },
        {"name": "tasks.max", "kind": "integer", "default": "1", "description": "Maximum number of tasks"},
    ]


def _field_name(field: Any) -> str | None:
    if isinstance(field, Mapping):
        return field.get("name")
    return getattr(field, "name", None)


def with_platform_fields(entry: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of a catalog entry with the platform fields added around its own.

    Fields the entry already declares keep the entry's declaration.
    """
    payload = dict(entry)
    direction = Direction.parse(payload.get("direction"))
    if direction is None:
        return payload

    declared = list(payload.get("fields") or [])
    declared_names = {_field_name(field) for field in declared}
    identifier = str(payload.get("identifier", ""))

    leading = [field for field in _leading_fields(identifier, direction) if field["name"] not in declared_names]
    trailing = [field for field in _trailing_fields(direction) if field["name"] not in declared_names]
    payload["fields"] = leading + declared + trailing
    return payload
