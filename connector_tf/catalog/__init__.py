from .builtin import builtin_registry
from .classifier import classify, placeholder_for, sensitive_names
from .models import (
    ConnectorDefinition,
    DataFormat,
    Direction,
    FieldSpec,
    Requirement,
    Sensitivity,
    ValueKind,
)
from .registry import ConnectorRegistry, build_definition, load_catalog

__all__ = [
    "ConnectorDefinition",
    "ConnectorRegistry",
    "DataFormat",
    "Direction",
    "FieldSpec",
    "Requirement",
    "Sensitivity",
    "ValueKind",
    "build_definition",
    "builtin_registry",
    "classify",
    "load_catalog",
    "placeholder_for",
    "sensitive_names",
]
