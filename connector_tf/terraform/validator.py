"""Check parsed Terraform documents against the connector catalog."""

from collections.abc import Mapping
from typing import Any

from .._config import DEFAULT_SETTINGS, Settings
from .._logging import get_logger
from ..catalog.builtin import builtin_registry
from ..catalog.models import ConnectorDefinition, DataFormat, ValueKind
from ..catalog.platform import CONNECTOR_CLASS_FIELD, PLATFORM_MANAGED_KEYS
from ..catalog.registry import ConnectorRegistry
from .models import Finding, FindingKind, Severity, ValidationReport
from .parser import Block, ParsedDocument, Reference, parse_document

LOGGER = get_logger("terraform.validator")

SENSITIVE_MAP = "config_sensitive"
NON_SENSITIVE_MAP = "config_nonsensitive"

_STRUCTURAL_BLOCKS = ("environment", "kafka_cluster")


def connector_blocks(document: ParsedDocument, resource_type: str) -> tuple[list[Block], list[Block]]:
    """Return (resource blocks, legacy module blocks) that declare a connector."""
    resources = [
        block
        for block in document.find_blocks("resource")
        if block.labels and block.labels[0] == resource_type
    ]
    modules = [block for block in document.find_blocks("module") if block.has_attribute(NON_SENSITIVE_MAP)]
    return resources, modules


def _block_label(block: Block) -> str:
    if block.type == "resource" and len(block.labels) > 1:
        return block.labels[1]
    if block.labels:
        return block.labels[-1]
    return block.type


class DocumentValidator:
    """Collects findings for every connector block of a document.

    Checks never stop at the first problem; the report lists all of them.
    """

    def __init__(self, registry: ConnectorRegistry, settings: Settings = DEFAULT_SETTINGS):
        self.registry = registry
        self.settings = settings
        self._format_prefix = f"{settings.format_table}."

    def validate(self, raw_text: str) -> ValidationReport:
        document = parse_document(raw_text)
        return self.validate_document(document)

    def validate_document(self, document: ParsedDocument) -> ValidationReport:
        resources, modules = connector_blocks(document, self.settings.resource_type)
        findings: list[Finding] = []

        if not resources and not modules:
            findings.append(
                Finding(
                    severity=Severity.ERROR,
                    kind=FindingKind.MISSING,
                    location="resource",
                    message=f'No resource "{self.settings.resource_type}" block found in document',
                )
            )
            return ValidationReport(findings=tuple(findings))

        labels: list[str] = []
        for block in resources:
            labels.append(_block_label(block))
            findings.extend(self._check_resource(block))
        for block in modules:
            labels.append(_block_label(block))
            findings.extend(self._check_module(block))

        report = ValidationReport(findings=tuple(findings), resources=tuple(labels))
        LOGGER.info(
            "Validated %s connector blocks: %s errors, %s warnings",
            len(labels),
            len(report.errors),
            len(report.warnings),
        )
        return report

    def _check_resource(self, block: Block) -> list[Finding]:
        label = _block_label(block)
        findings = self._check_structure(block, label)

        for name in (SENSITIVE_MAP, NON_SENSITIVE_MAP):
            if not block.has_attribute(name):
                findings.append(self._missing(label, name, f"Missing {name} map"))
        findings.extend(self._check_ignore_changes(block, label))

        sensitive = self._config_map(block, SENSITIVE_MAP)
        non_sensitive = self._map_attribute(block, NON_SENSITIVE_MAP)
        if non_sensitive is None:
            return findings

        findings.extend(self._check_duplicates(label, sensitive or {}, non_sensitive))
        findings.extend(self._check_connector(label, sensitive, non_sensitive))
        return findings

    def _check_module(self, block: Block) -> list[Finding]:
        label = _block_label(block)
        findings = [
            Finding(
                severity=Severity.INFO,
                kind=FindingKind.MISSING,
                location="module",
                resource=label,
                message="Module block found; only connector configuration keys are checked",
            )
        ]
        sensitive = self._config_map(block, SENSITIVE_MAP)
        non_sensitive = self._map_attribute(block, NON_SENSITIVE_MAP)
        if non_sensitive is None:
            return findings
        findings.extend(self._check_duplicates(label, sensitive or {}, non_sensitive))
        findings.extend(self._check_connector(label, sensitive, non_sensitive))
        return findings

    def _check_structure(self, block: Block, label: str) -> list[Finding]:
        findings: list[Finding] = []
        if not block.has_attribute("status"):
            findings.append(self._missing(label, "status", "Missing status attribute"))

        for name in _STRUCTURAL_BLOCKS:
            nested = block.first_block(name)
            if nested is None:
                findings.append(self._missing(label, name, f"Missing {name} block"))
            elif not nested.has_attribute("id"):
                findings.append(self._missing(label, f"{name}.id", f"Missing id in {name} block"))
        return findings

    def _check_duplicates(
        self,
        label: str,
        sensitive: Mapping[str, Any],
        non_sensitive: Mapping[str, Any],
    ) -> list[Finding]:
        return [
            Finding(
                severity=Severity.ERROR,
                kind=FindingKind.DUPLICATE_KEY,
                location=key,
                resource=label,
                message=f"Key '{key}' is declared in both {SENSITIVE_MAP} and {NON_SENSITIVE_MAP}",
            )
            for key in sensitive
            if key in non_sensitive
        ]

    def _check_ignore_changes(self, block: Block, label: str) -> list[Finding]:
        lifecycle = block.first_block("lifecycle")
        ignored = lifecycle.attribute("ignore_changes") if lifecycle is not None else None
        if isinstance(ignored, list):
            entries = [str(entry) for entry in ignored]
        elif ignored is None:
            entries = []
        else:
            entries = [str(ignored)]

        missing = [key for key in PLATFORM_MANAGED_KEYS if not any(f'"{key}"' in entry for entry in entries)]
        if not missing:
            return []
        return [
            Finding(
                severity=Severity.WARNING,
                kind=FindingKind.IGNORE_CHANGES,
                location="lifecycle.ignore_changes",
                resource=label,
                message=f"Platform-managed keys not ignored: {', '.join(missing)}",
            )
        ]

    def _check_connector(
        self,
        label: str,
        sensitive: Mapping[str, Any] | None,
        non_sensitive: Mapping[str, Any],
    ) -> list[Finding]:
        connector_class = non_sensitive.get(CONNECTOR_CLASS_FIELD)
        if connector_class is None:
            return [
                self._missing(label, CONNECTOR_CLASS_FIELD, f"Missing {CONNECTOR_CLASS_FIELD} in {NON_SENSITIVE_MAP}")
            ]
        if not isinstance(connector_class, str):
            LOGGER.debug("Skipping schema checks for %s: connector.class is %s", label, connector_class)
            return []

        definition = self.registry.lookup(connector_class)
        if definition is None:
            return [
                Finding(
                    severity=Severity.ERROR,
                    kind=FindingKind.UNKNOWN_CONNECTOR_TYPE,
                    location=CONNECTOR_CLASS_FIELD,
                    resource=label,
                    message=f"Unknown connector type: {connector_class}",
                )
            ]
        return self._check_schema(label, definition, sensitive, non_sensitive)

    def _check_schema(
        self,
        label: str,
        definition: ConnectorDefinition,
        sensitive: Mapping[str, Any] | None,
        non_sensitive: Mapping[str, Any],
    ) -> list[Finding]:
        """Field checks against the definition.

        A None `sensitive` map is an expression whose keys are unknown, so no
        field is reported missing from it and nothing is misplaced out of it.
        """
        findings: list[Finding] = []

        for spec in definition.fields:
            home, other = (sensitive, non_sensitive) if spec.is_sensitive else (non_sensitive, sensitive)
            home_name, other_name = (
                (SENSITIVE_MAP, NON_SENSITIVE_MAP) if spec.is_sensitive else (NON_SENSITIVE_MAP, SENSITIVE_MAP)
            )
            in_home = home is not None and spec.name in home
            misplaced = other is not None and spec.name in other and not in_home and other[spec.name] != ""

            if misplaced:
                findings.append(
                    Finding(
                        severity=Severity.ERROR,
                        kind=FindingKind.MISPLACED,
                        location=spec.name,
                        resource=label,
                        message=f"Field '{spec.name}' belongs in {home_name}, found in {other_name}",
                    )
                )
            elif spec.is_required and home is not None and not in_home:
                findings.append(
                    self._missing(label, spec.name, f"Missing required field '{spec.name}' in {home_name}")
                )

            if spec.kind is ValueKind.ENUM and in_home:
                findings.extend(self._check_enum_value(label, spec.name, spec.allowed_values, home[spec.name]))

        declared = set(definition.field_names)
        for map_name, values in ((SENSITIVE_MAP, sensitive), (NON_SENSITIVE_MAP, non_sensitive)):
            for key in values or ():
                if key not in declared:
                    findings.append(
                        Finding(
                            severity=Severity.WARNING,
                            kind=FindingKind.UNKNOWN_FIELD,
                            location=key,
                            resource=label,
                            message=f"Unknown field '{key}' in {map_name} for {definition.identifier}",
                        )
                    )
        return findings

    def _check_enum_value(self, label: str, name: str, allowed: tuple[str, ...], raw: Any) -> list[Finding]:
        value = self._literal_value(raw)
        if value is None or value in allowed:
            return []
        return [
            Finding(
                severity=Severity.ERROR,
                kind=FindingKind.INVALID_VALUE,
                location=name,
                resource=label,
                message=f"Invalid value '{value}' for field '{name}'. Valid values: {', '.join(allowed)}",
            )
        ]

    def _literal_value(self, raw: Any) -> str | None:
        """Comparable string for a map value, or None when it cannot be known statically."""
        if isinstance(raw, Reference):
            if raw.expression.startswith(self._format_prefix):
                member = raw.expression[len(self._format_prefix) :].upper()
                if member in DataFormat.__members__:
                    return member
            return None
        if isinstance(raw, bool):
            return str(raw).lower()
        if isinstance(raw, (int, float)):
            return str(raw)
        if isinstance(raw, str):
            if "${" in raw:
                return None
            return raw
        return None

    def _map_attribute(self, block: Block, name: str) -> dict[str, Any] | None:
        """Literal map value of `name`, or None when absent or built by an expression."""
        value = block.attribute(name)
        if value is None or isinstance(value, dict):
            return value
        # merge(), variables and other expressions have keys unknown until plan time.
        LOGGER.debug("%s in block %s is not a literal map: %s", name, _block_label(block), value)
        return None

    def _config_map(self, block: Block, name: str) -> dict[str, Any] | None:
        """Like _map_attribute, but an absent map reads as empty; None means opaque."""
        if not block.has_attribute(name):
            return {}
        return self._map_attribute(block, name)

    def _missing(self, label: str, location: str, message: str) -> Finding:
        return Finding(
            severity=Severity.ERROR,
            kind=FindingKind.MISSING,
            location=location,
            resource=label,
            message=message,
        )


def validate(
    raw_text: str,
    registry: ConnectorRegistry | None = None,
    settings: Settings = DEFAULT_SETTINGS,
) -> ValidationReport:
    if registry is None:
        registry = builtin_registry()
    return DocumentValidator(registry, settings).validate(raw_text)


__all__ = ["DocumentValidator", "connector_blocks", "validate"]
