"""Exception hierarchy shared by the catalog, assembler and document parser."""

from collections.abc import Iterable


class ConnectorToolError(Exception):
    """Base class for every error raised by connector_tf."""


class CatalogError(ConnectorToolError, ValueError):
    """Raised when connector definitions cannot be loaded or are inconsistent."""


class AssemblyError(ConnectorToolError, ValueError):
    """Raised when caller answers cannot be turned into a connector config."""

    def __init__(self, field: str | None, message: str):
        super().__init__(message)
        self.field = field


class MissingRequiredField(AssemblyError):
    def __init__(self, field: str):
        super().__init__(field, f"Missing required configuration: {field}")


class InvalidEnumValue(AssemblyError):
    def __init__(self, field: str, got: str, allowed: Iterable[str]):
        self.got = got
        self.allowed = tuple(allowed)
        super().__init__(
            field,
            f"Invalid value '{got}' for field '{field}'. Valid values: {', '.join(self.allowed)}",
        )


class TypeMismatch(AssemblyError):
    def __init__(self, field: str, expected_kind: str):
        self.expected_kind = expected_kind
        super().__init__(field, f"Field '{field}' expects a value of kind {expected_kind}")


class UnknownField(AssemblyError):
    def __init__(self, field: str):
        super().__init__(field, f"Unknown configuration field: {field}")


class ConflictingAnswer(AssemblyError):
    """An answer for a key the assembler derives from its own arguments disagrees with them."""

    def __init__(self, field: str, got: object, expected: str):
        self.got = got
        self.expected = expected
        super().__init__(field, f"Answer '{got}' for field '{field}' conflicts with '{expected}'")


class EmptyTopicSet(AssemblyError):
    def __init__(self, field: str = "topics"):
        super().__init__(field, "At least one non-blank topic is required for this connector")


class DocumentParseError(ConnectorToolError, ValueError):
    """Raised when a Terraform document is not syntactically valid HCL."""

    def __init__(self, message: str, line: int | None = None, column: int | None = None):
        self.line = line
        self.column = column
        location = f" (line {line}, column {column})" if line is not None else ""
        super().__init__(f"Failed to parse Terraform document{location}: {message}")
