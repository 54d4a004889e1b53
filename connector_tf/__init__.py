from ._config import DEFAULT_SETTINGS, SENSITIVE_PLACEHOLDER, Settings, load_settings
from .catalog import ConnectorDefinition, ConnectorRegistry, DataFormat, Direction, builtin_registry, load_catalog
from .errors import (
    AssemblyError,
    CatalogError,
    ConflictingAnswer,
    ConnectorToolError,
    DocumentParseError,
    EmptyTopicSet,
    InvalidEnumValue,
    MissingRequiredField,
    TypeMismatch,
    UnknownField,
)
from .prompting import next_required_field, pending_fields
from .terraform import ConnectorConfig, ValidationReport, assemble, generate, validate

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_SETTINGS",
    "SENSITIVE_PLACEHOLDER",
    "AssemblyError",
    "CatalogError",
    "ConflictingAnswer",
    "ConnectorConfig",
    "ConnectorDefinition",
    "ConnectorRegistry",
    "ConnectorToolError",
    "DataFormat",
    "Direction",
    "DocumentParseError",
    "EmptyTopicSet",
    "InvalidEnumValue",
    "MissingRequiredField",
    "Settings",
    "TypeMismatch",
    "UnknownField",
    "ValidationReport",
    "assemble",
    "builtin_registry",
    "generate",
    "load_catalog",
    "load_settings",
    "next_required_field",
    "pending_fields",
    "validate",
]
