from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from ..catalog.models import DataFormat

ConfigValue = str | int | tuple[str, ...]


class ConnectorConfig(BaseModel):
    """Resolved connector instance ready to be rendered."""

    model_config = ConfigDict(frozen=True)

    connector_class: str = Field(min_length=1)
    resource_name: str = Field(min_length=1)
    values: dict[str, ConfigValue] = Field(default_factory=dict)
    topics: tuple[str, ...] = ()
    data_format: DataFormat = DataFormat.AVRO


class GeneratedDocument(BaseModel):
    model_config = ConfigDict(frozen=True)

    resource_name: str
    connector_class: str
    text: str

    def __str__(self) -> str:
        return self.text


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class FindingKind(str, Enum):
    MISSING = "missing"
    MISPLACED = "misplaced"
    DUPLICATE_KEY = "duplicate_key"
    UNKNOWN_CONNECTOR_TYPE = "unknown_connector_type"
    UNKNOWN_FIELD = "unknown_field"
    INVALID_VALUE = "invalid_value"
    IGNORE_CHANGES = "ignore_changes"


class Finding(BaseModel):
    model_config = ConfigDict(frozen=True)

    severity: Severity
    kind: FindingKind
    location: str
    message: str
    resource: str | None = None

    def __str__(self) -> str:
        scope = f"{self.resource}: " if self.resource else ""
        return f"[{self.severity.value}] {scope}{self.location}: {self.message}"


class ValidationReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    findings: tuple[Finding, ...] = ()
    resources: tuple[str, ...] = ()

    @property
    def errors(self) -> tuple[Finding, ...]:
        return tuple(finding for finding in self.findings if finding.severity is Severity.ERROR)

    @property
    def warnings(self) -> tuple[Finding, ...]:
        return tuple(finding for finding in self.findings if finding.severity is Severity.WARNING)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def ok(self) -> bool:
        return not self.has_errors

    def of_kind(self, kind: FindingKind) -> tuple[Finding, ...]:
        return tuple(finding for finding in self.findings if finding.kind is kind)

    def summary(self) -> dict[str, int | bool | list[str]]:
        return {
            "valid": self.ok,
            "resources": list(self.resources),
            "errors": len(self.errors),
            "warnings": len(self.warnings),
        }
