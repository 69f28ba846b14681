"""
Error types for typedyaml parsing, coercion, and schema resolution.
"""

from dataclasses import dataclass
from typing import Optional


class YamlError(Exception):
    """Base exception for all typedyaml errors."""

    def __init__(self, message: str, context: Optional["ErrorContext"] = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}\n{self.message}"
        return self.message


class ParseError(YamlError):
    """
    Raised when a document cannot be materialized into its schema type.

    Wraps the underlying error (available as ``cause`` and as ``__cause__``)
    together with the 1-based line number where it happened.
    """

    def __init__(
        self,
        message: str,
        context: Optional["ErrorContext"] = None,
        cause: Exception | None = None,
    ):
        self.cause = cause
        super().__init__(message, context)

    @property
    def line(self) -> int | None:
        return self.context.line if self.context else None


class StructuralError(YamlError):
    """
    Raised when the document shape violates a parser invariant.

    Examples:
    - A key while a list is the current target
    - A hyphen outside of a list
    - A duplicate key inserted into a map
    """

    pass


class YamlIndentationError(ParseError, StructuralError):
    """
    Raised when leading indentation is invalid.

    Examples:
    - An odd number of leading spaces
    - A dedent that matches no enclosing block
    - Sequence entries that disagree on their indentation
    """

    def __init__(
        self,
        message: str,
        spaces: int | None = None,
        context: Optional["ErrorContext"] = None,
    ):
        self.spaces = spaces
        ParseError.__init__(self, message, context)

    def with_context(self, context: "ErrorContext") -> "YamlIndentationError":
        """Return a copy of this error located at ``context``."""
        return YamlIndentationError(self.message, self.spaces, context)


class UnknownFieldError(YamlError):
    """Raised when a key matches no declared member name or alias."""

    def __init__(self, name: str, schema_type: type):
        self.name = name
        self.schema_type = schema_type
        super().__init__(f"Unknown field '{name}' on {schema_type.__name__}")


class TypeCoercionError(YamlError):
    """Raised when scalar text does not fit the declared type of its field."""

    def __init__(self, field: str, declared_type: object, text: str, reason: str | None = None):
        self.field = field
        self.declared_type = declared_type
        self.text = text
        type_name = getattr(declared_type, "__name__", str(declared_type))
        message = f"Cannot convert {text!r} to {type_name} for field '{field}'"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class UnknownEnumMemberError(TypeCoercionError):
    """Raised when an enum token or alias is not declared on the enum."""

    def __init__(self, field: str, enum_type: type, member: str):
        self.member = member
        super().__init__(field, enum_type, member, f"no member or alias named {member!r}")


class MalformedCollectionLiteralError(YamlError):
    """Raised when a list/map key carries a value other than ``[]``/``{}``."""

    def __init__(self, expected: str, text: str):
        self.expected = expected
        self.text = text
        super().__init__(f"Expected {expected} to complete the collection, got {text!r}")


class SchemaError(YamlError):
    """
    Raised when a schema type cannot be described.

    Examples:
    - Unsupported field annotation
    - Sequences nested directly inside sequences
    - A root type that is not a record
    """

    pass


@dataclass
class ErrorContext:
    """
    Location of an error in the source text.

    Attributes:
        line: Line number (1-indexed)
        column: Column number (1-indexed)
        snippet: Optional source lines around the error
        source: Optional name of the document (file name or label)
        first_line: Line number of the first snippet line (defaults to ``line``)
    """

    line: int
    column: int = 1
    snippet: str | None = None
    source: str | None = None
    first_line: int | None = None

    def format(self) -> str:
        """
        Format error context as a human-readable string.

        Returns:
            Formatted string like: "config.yaml:10:5"
        """
        location = f"{self.source or '<string>'}:{self.line}:{self.column}"
        if self.snippet:
            return f"{location}\n{self._format_snippet()}"
        return location

    def _format_snippet(self) -> str:
        """Format code snippet with line numbers and error marker."""
        if not self.snippet:
            return ""

        lines = self.snippet.split("\n")
        formatted = []

        start_line = self.line if self.first_line is None else self.first_line

        for i, line in enumerate(lines):
            line_num = start_line + i
            prefix = f"{line_num:4d} | "
            formatted.append(prefix + line)

            if line_num == self.line:
                marker_pos = len(prefix) + self.column - 1
                formatted.append(" " * marker_pos + "^^^")

        return "\n".join(formatted)


def snippet_around(lines: list[str], line: int, radius: int = 2) -> tuple[int, str]:
    """
    Return the source lines within ``radius`` of a 1-indexed ``line``.

    Returns:
        The number of the first returned line and the joined lines
    """
    start = max(1, line - radius)
    end = min(len(lines), line + radius)
    return start, "\n".join(lines[start - 1 : end])


def make_parse_error(
    cause: Exception,
    line: int,
    column: int = 1,
    snippet: str | None = None,
    source: str | None = None,
    first_line: int | None = None,
) -> ParseError:
    """
    Helper to wrap an error raised while handling one line.

    Args:
        cause: The underlying error
        line: Line number (1-indexed)
        column: Column number (1-indexed)
        snippet: Optional source snippet
        source: Optional document name
        first_line: Line number of the first snippet line

    Returns:
        ParseError with context attached
    """
    context = ErrorContext(
        line=line, column=column, snippet=snippet, source=source, first_line=first_line
    )
    message = cause.message if isinstance(cause, YamlError) else str(cause)
    return ParseError(f"Error on line {line}: {message}", context, cause=cause)
