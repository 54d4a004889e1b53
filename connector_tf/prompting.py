"""Decide which connector field an interactive front end should ask for next."""

from collections.abc import Iterator, Mapping
from typing import Any

from .catalog.models import ConnectorDefinition, FieldSpec
from .catalog.platform import assembler_managed_fields


def _answered(answers: Mapping[str, Any], name: str) -> bool:
    value = answers.get(name)
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, tuple)):
        return any(str(item).strip() for item in value)
    return True


def pending_fields(definition: ConnectorDefinition, answers: Mapping[str, Any] | None = None) -> Iterator[FieldSpec]:
    """Yield required fields, in declared order, that still need an answer.

    Fields with a declared default and the fields the assembler fills from its
    own arguments (name, connector class, topics, data format) never need one.
    """
    answers = answers or {}
    managed = assembler_managed_fields(definition.direction)
    for spec in definition.fields:
        if not spec.is_required or spec.default is not None or spec.name in managed:
            continue
        if not _answered(answers, spec.name):
            yield spec


def next_required_field(
    definition: ConnectorDefinition,
    answers: Mapping[str, Any] | None = None,
) -> FieldSpec | None:
    return next(pending_fields(definition, answers), None)


__all__ = ["next_required_field", "pending_fields"]
