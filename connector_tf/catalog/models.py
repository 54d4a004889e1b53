"""Connector schema model: field specs and connector definitions."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Direction(str, Enum):
    SOURCE = "source"
    SINK = "sink"

    @classmethod
    def parse(cls, value: Direction | str | None) -> Direction | None:
        """Return the matching direction, or None for anything unrecognized."""
        if isinstance(value, Direction):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


class Sensitivity(str, Enum):
    SENSITIVE = "sensitive"
    NON_SENSITIVE = "non_sensitive"


class Requirement(str, Enum):
    REQUIRED = "required"
    OPTIONAL = "optional"


class ValueKind(str, Enum):
    STRING = "string"
    ENUM = "enum"
    STRING_LIST = "string_list"
    INTEGER = "integer"


class DataFormat(str, Enum):
    AVRO = "AVRO"
    JSON_SR = "JSON_SR"
    PROTOBUF = "PROTOBUF"
    JSON = "JSON"
    PARQUET = "PARQUET"

    @classmethod
    def parse(cls, value: DataFormat | str) -> DataFormat:
        if isinstance(value, DataFormat):
            return value
        return cls(str(value).strip().upper())


# Type names used by plugin catalogs published by the platform.
_KIND_ALIASES = {
    "str": ValueKind.STRING,
    "password": ValueKind.STRING,
    "int": ValueKind.INTEGER,
    "long": ValueKind.INTEGER,
    "short": ValueKind.INTEGER,
    "list": ValueKind.STRING_LIST,
}


class FieldSpec(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str = Field(min_length=1)
    sensitivity: Sensitivity = Sensitivity.NON_SENSITIVE
    requirement: Requirement = Requirement.OPTIONAL
    kind: ValueKind = ValueKind.STRING
    allowed_values: tuple[str, ...] = ()
    default: str | None = None
    description: str = ""

    @model_validator(mode="before")
    @classmethod
    def _expand_shorthand(cls, data: Any) -> Any:
        """Accept `sensitive`/`required` booleans and platform type names in catalog files."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if "sensitive" in data:
            data["sensitivity"] = Sensitivity.SENSITIVE if data.pop("sensitive") else Sensitivity.NON_SENSITIVE
        if "required" in data:
            data["requirement"] = Requirement.REQUIRED if data.pop("required") else Requirement.OPTIONAL
        kind = data.get("kind")
        if isinstance(kind, str):
            lowered = kind.strip().lower()
            if lowered == "boolean":
                data["kind"] = ValueKind.ENUM
                data.setdefault("allowed_values", ("true", "false"))
            elif lowered in _KIND_ALIASES:
                data["kind"] = _KIND_ALIASES[lowered]
            else:
                data["kind"] = lowered
        if data.get("default") is not None and not isinstance(data["default"], str):
            default = data["default"]
            data["default"] = str(default).lower() if isinstance(default, bool) else str(default)
        return data

    @model_validator(mode="after")
    def _check_allowed_values(self) -> FieldSpec:
        if self.kind is ValueKind.ENUM and not self.allowed_values:
            raise ValueError(f"Enum field '{self.name}' must declare allowed_values")
        if self.kind is not ValueKind.ENUM and self.allowed_values:
            raise ValueError(f"Field '{self.name}' declares allowed_values but is not an enum")
        if self.kind is ValueKind.ENUM and self.default is not None and self.default not in self.allowed_values:
            raise ValueError(f"Default '{self.default}' of field '{self.name}' is not an allowed value")
        return self

    @property
    def is_sensitive(self) -> bool:
        return self.sensitivity is Sensitivity.SENSITIVE

    @property
    def is_required(self) -> bool:
        return self.requirement is Requirement.REQUIRED


class ConnectorDefinition(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    identifier: str = Field(min_length=1)
    direction: Direction
    fields: tuple[FieldSpec, ...] = ()
    display_name: str = ""
    description: str = ""

    @model_validator(mode="after")
    def _check_unique_fields(self) -> ConnectorDefinition:
        seen: set[str] = set()
        for spec in self.fields:
            if spec.name in seen:
                raise ValueError(f"Connector '{self.identifier}' declares field '{spec.name}' more than once")
            seen.add(spec.name)
        return self

    @property
    def label(self) -> str:
        return self.display_name or self.identifier

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(spec.name for spec in self.fields)

    @property
    def required_fields(self) -> tuple[FieldSpec, ...]:
        return tuple(spec for spec in self.fields if spec.is_required)

    def field(self, name: str) -> FieldSpec | None:
        for spec in self.fields:
            if spec.name == name:
                return spec
        return None
