from .assembler import assemble, coerce_value
from .generator import TerraformGenerator, generate, normalize_resource_name
from .models import (
    ConnectorConfig,
    Finding,
    FindingKind,
    GeneratedDocument,
    Severity,
    ValidationReport,
)
from .parser import Block, ParsedDocument, Reference, parse_document
from .validator import DocumentValidator, connector_blocks, validate

__all__ = [
    "Block",
    "ConnectorConfig",
    "DocumentValidator",
    "Finding",
    "FindingKind",
    "GeneratedDocument",
    "ParsedDocument",
    "Reference",
    "Severity",
    "TerraformGenerator",
    "ValidationReport",
    "assemble",
    "coerce_value",
    "connector_blocks",
    "generate",
    "normalize_resource_name",
    "parse_document",
    "validate",
]
