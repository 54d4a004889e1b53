"""Split connector fields by sensitivity and compute placeholder values."""

from .._config import SENSITIVE_PLACEHOLDER
from .models import ConnectorDefinition, FieldSpec, ValueKind


def classify(definition: ConnectorDefinition) -> tuple[tuple[FieldSpec, ...], tuple[FieldSpec, ...]]:
    """Return (sensitive, non_sensitive) fields, each in declared order."""
    sensitive: list[FieldSpec] = []
    non_sensitive: list[FieldSpec] = []
    for spec in definition.fields:
        if spec.is_sensitive:
            sensitive.append(spec)
        else:
            non_sensitive.append(spec)
    return tuple(sensitive), tuple(non_sensitive)


def sensitive_names(definition: ConnectorDefinition) -> frozenset[str]:
    return frozenset(spec.name for spec in definition.fields if spec.is_sensitive)


def placeholder_for(spec: FieldSpec, marker: str = SENSITIVE_PLACEHOLDER) -> str:
    """Marker for sensitive fields; declared default or an empty value otherwise."""
    if spec.is_sensitive:
        return marker
    if spec.default is not None:
        return spec.default
    if spec.kind is ValueKind.INTEGER:
        return "0"
    return ""
