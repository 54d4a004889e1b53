"""Merge catalog defaults, platform fields and caller answers into a ConnectorConfig."""

from collections.abc import Iterable, Mapping
from typing import Any

from .._config import SENSITIVE_PLACEHOLDER
from .._logging import get_logger, redact_config
from ..catalog.classifier import placeholder_for, sensitive_names
from ..catalog.models import ConnectorDefinition, DataFormat, Direction, FieldSpec, ValueKind
from ..catalog.platform import CONNECTOR_CLASS_FIELD, NAME_FIELD, TOPICS_FIELD, data_format_field
from ..errors import ConflictingAnswer, EmptyTopicSet, InvalidEnumValue, MissingRequiredField, TypeMismatch, UnknownField
from .models import ConfigValue, ConnectorConfig

LOGGER = get_logger("terraform.assembler")


def _is_blank(value: Any) -> bool:
    """Empty answers count as "not supplied" so declared defaults still apply."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set, frozenset)):
        return not any(str(item).strip() for item in value)
    return False


def _normalize_topics(topics: Iterable[str] | None) -> tuple[str, ...]:
    ordered: list[str] = []
    for topic in topics or ():
        if not isinstance(topic, str):
            raise TypeMismatch(TOPICS_FIELD, ValueKind.STRING_LIST.value)
        name = topic.strip()
        if not name:
            raise EmptyTopicSet()
        if name not in ordered:
            ordered.append(name)
    return tuple(ordered)


def _coerce_string(spec: FieldSpec, value: Any) -> str:
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (str, int)):
        return str(value)
    raise TypeMismatch(spec.name, spec.kind.value)


def _coerce_enum(spec: FieldSpec, value: Any) -> str:
    if isinstance(value, bool):
        # YAML answers files turn true/false into booleans.
        value = str(value).lower()
    if not isinstance(value, str):
        raise TypeMismatch(spec.name, spec.kind.value)
    if value not in spec.allowed_values:
        raise InvalidEnumValue(spec.name, value, spec.allowed_values)
    return value


def _coerce_integer(spec: FieldSpec, value: Any) -> int:
    if isinstance(value, bool):
        raise TypeMismatch(spec.name, spec.kind.value)
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            raise TypeMismatch(spec.name, spec.kind.value) from None
    raise TypeMismatch(spec.name, spec.kind.value)


def _coerce_string_list(spec: FieldSpec, value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = list(value)
    else:
        raise TypeMismatch(spec.name, spec.kind.value)

    result: list[str] = []
    for item in items:
        if not isinstance(item, str):
            raise TypeMismatch(spec.name, spec.kind.value)
        if item.strip():
            result.append(item.strip())

    if not result and spec.is_required:
        if spec.name == TOPICS_FIELD:
            raise EmptyTopicSet()
        raise MissingRequiredField(spec.name)
    return tuple(result)


def coerce_value(spec: FieldSpec, value: Any) -> ConfigValue:
    """Validate a raw answer against its field kind and return the stored form."""
    if spec.kind is ValueKind.ENUM:
        return _coerce_enum(spec, value)
    if spec.kind is ValueKind.INTEGER:
        return _coerce_integer(spec, value)
    if spec.kind is ValueKind.STRING_LIST:
        return _coerce_string_list(spec, value)
    return _coerce_string(spec, value)


def _resolve_data_format(definition: ConnectorDefinition, data_format: DataFormat | str) -> DataFormat:
    try:
        return DataFormat.parse(data_format)
    except ValueError:
        raise InvalidEnumValue(
            data_format_field(definition.direction),
            str(data_format),
            [member.value for member in DataFormat],
        ) from None


def _seed_values(
    definition: ConnectorDefinition,
    resource_name: str,
    topics: tuple[str, ...],
    data_format: DataFormat,
) -> dict[str, Any]:
    """Values the assembler supplies itself. Answers may still override topics and the format key."""
    seeded: dict[str, Any] = {
        CONNECTOR_CLASS_FIELD: definition.identifier,
        NAME_FIELD: resource_name,
        data_format_field(definition.direction): data_format.value,
    }
    if topics:
        seeded[TOPICS_FIELD] = topics
    return {name: value for name, value in seeded.items() if definition.field(name) is not None}


def assemble(
    definition: ConnectorDefinition,
    answers: Mapping[str, Any] | None,
    resource_name: str,
    topics: Iterable[str] | None = None,
    data_format: DataFormat | str = DataFormat.AVRO,
    *,
    placeholder: str = SENSITIVE_PLACEHOLDER,
) -> ConnectorConfig:
    """Resolve every field of `definition` and return the validated connector config.

    Precedence per field is: caller answer, value supplied by the assembler
    (topics, data format), declared default. Answers for the connector class
    or name must agree with `definition` and `resource_name`. A required
    field left without a value raises MissingRequiredField, except sensitive
    fields, which always resolve to the placeholder. Literal secrets are
    validated and then dropped.
    """
    answers = dict(answers or {})

    for key in answers:
        if definition.field(key) is None:
            raise UnknownField(key)

    name = (resource_name or "").strip()
    if not name:
        raise MissingRequiredField(NAME_FIELD)

    for key, expected in ((CONNECTOR_CLASS_FIELD, definition.identifier), (NAME_FIELD, name)):
        given = answers.pop(key, None)
        if _is_blank(given):
            continue
        if not isinstance(given, str) or given.strip() != expected:
            raise ConflictingAnswer(key, given, expected)

    resolved_format = _resolve_data_format(definition, data_format)
    topic_set = _normalize_topics(topics)
    if not topic_set and TOPICS_FIELD in answers and not _is_blank(answers[TOPICS_FIELD]):
        topic_set = _normalize_topics(coerce_value(definition.field(TOPICS_FIELD), answers[TOPICS_FIELD]))
    if definition.direction is Direction.SINK and not topic_set:
        raise EmptyTopicSet()

    seeded = _seed_values(definition, name, topic_set, resolved_format)
    values: dict[str, ConfigValue] = {}

    for spec in definition.fields:
        raw = answers.get(spec.name)
        if _is_blank(raw):
            raw = seeded.get(spec.name)
        if _is_blank(raw):
            raw = spec.default

        if spec.is_sensitive:
            if not _is_blank(raw):
                coerce_value(spec, raw)
            if spec.is_required or not _is_blank(raw):
                values[spec.name] = placeholder_for(spec, placeholder)
            continue

        if _is_blank(raw):
            if spec.is_required:
                raise MissingRequiredField(spec.name)
            continue

        values[spec.name] = coerce_value(spec, raw)

    # An answer for topics or the format key overrides the arguments; keep both views in sync.
    if TOPICS_FIELD in values:
        topic_set = tuple(values[TOPICS_FIELD])
    format_value = values.get(data_format_field(definition.direction))
    if isinstance(format_value, str) and format_value in DataFormat.__members__:
        resolved_format = DataFormat(format_value)

    config = ConnectorConfig(
        connector_class=definition.identifier,
        resource_name=name,
        values=values,
        topics=topic_set,
        data_format=resolved_format,
    )
    LOGGER.info(
        "Assembled connector %s (%s) values=%s",
        name,
        definition.identifier,
        redact_config(values, sensitive_names(definition)),
    )
    return config


__all__ = ["assemble", "coerce_value"]
