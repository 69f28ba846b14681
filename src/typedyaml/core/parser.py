"""
Context-stack parser for typedyaml documents.

The parser walks the document line by line. Rising indentation descends into
the record held by the pending key; falling indentation pops saved frames and
folds each finished target into its parent. Keys typed as lists or maps open
their accumulator immediately, one level beneath the key.

Sequence entries may sit flush with their key or one level deeper, but every
entry of one list must use the same level.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypeVar

from .coercion import coerce_scalar
from .config import DEFAULT_SETTINGS, YamlSettings
from .errors import (
    ErrorContext,
    MalformedCollectionLiteralError,
    SchemaError,
    StructuralError,
    YamlError,
    YamlIndentationError,
    make_parse_error,
    snippet_around,
)
from .lexer import SCALAR_TYPES, Lexer, Line, Token, TokenType
from .schema import DEFAULT_METADATA, TypeKind, TypeMetadataProvider
from .targets import FieldBinding, ListTarget, MapTarget, RecordTarget, Target, new_target

logger = logging.getLogger(__name__)

T = TypeVar("T")

EMPTY_LIST_LITERAL = "[]"
EMPTY_MAP_LITERAL = "{}"


@dataclass(frozen=True)
class ContextFrame:
    """Saved scope restored when indentation falls back to ``indent``."""

    indent: int
    target: Target
    binding: FieldBinding | None


class YamlParser:
    """
    Materializes one document into an instance of a record type.

    A parser instance holds the state of a single parse and is not reusable.
    """

    def __init__(
        self,
        schema_type: type,
        metadata: TypeMetadataProvider = DEFAULT_METADATA,
        settings: YamlSettings = DEFAULT_SETTINGS,
    ):
        """
        Initialize parser.

        Args:
            schema_type: Record type of the document root
            metadata: Provider of field tables and zero values
            settings: Indentation width and trace options

        Raises:
            SchemaError: If the root type cannot be described
        """
        self.metadata = metadata
        self.settings = settings
        self.root = RecordTarget(schema_type, metadata)
        self.target: Target = self.root
        self.binding: FieldBinding | None = None
        self.stack: list[ContextFrame] = []
        self.indent = 0
        self.line_indent = 0
        self.column = 1
        # Frame of a list/map opened by a key earlier on the current line
        self.opened: ContextFrame | None = None

    # ------------------------------------------------------------------
    # Frames
    # ------------------------------------------------------------------

    def push(self, binding: FieldBinding | None) -> ContextFrame:
        frame = ContextFrame(self.indent, self.target, binding)
        self.stack.append(frame)
        logger.debug("push level %d for %s", self.indent, binding.name if binding else "-")
        return frame

    def fold(self, frame: ContextFrame) -> None:
        """Write the current target into the frame's binding and restore the frame."""
        value = self.target.materialize()
        if frame.binding is not None:
            frame.binding.set(value)
        self.target = frame.target
        self.binding = None
        logger.debug("pop level %d for %s", frame.indent, frame.binding.name if frame.binding else "-")

    def open_collection(self, binding: FieldBinding) -> None:
        self.opened = self.push(binding)
        self.target = new_target(binding.type, binding.name, self.metadata)
        self.binding = None
        self.indent += 1

    def descend(self) -> None:
        """Enter the record held by the pending key, one level deeper."""
        binding = self.binding
        if binding is None:
            raise YamlIndentationError(
                f"Unexpected indentation at level {self.line_indent}: no key is waiting for a block"
            )
        self.push(binding)
        self.target = new_target(binding.type, binding.name, self.metadata)
        self.binding = None
        self.indent = self.line_indent

    def dedent(self, level: int) -> None:
        """
        Pop frames until one was saved at ``level``.

        Raises:
            YamlIndentationError: If no enclosing frame was saved at ``level``
        """
        while True:
            if isinstance(self.target, ListTarget):
                self.target.finish_element()
            if not self.stack or self.stack[-1].indent < level:
                raise YamlIndentationError(f"Dedent to level {level} matches no enclosing block")
            frame = self.stack.pop()
            self.fold(frame)
            if frame.indent == level:
                break
        self.indent = level

    def settle(self) -> None:
        """Give a pending record key that got no block an empty record."""
        binding = self.binding
        self.binding = None
        if binding is not None and binding.type.kind == TypeKind.RECORD:
            binding.set(self.metadata.describe(binding.type.python_type).new_instance())

    def align(self) -> None:
        """Move to the indentation of the current line."""
        if self.line_indent == self.indent + 1:
            self.descend()
            return
        self.settle()
        if self.line_indent == self.indent:
            return
        if self.line_indent < self.indent:
            self.dedent(self.line_indent)
        else:
            raise YamlIndentationError(
                f"Indentation jumps to level {self.line_indent} from level {self.indent}"
            )

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------

    def keyed_target(self) -> RecordTarget | MapTarget:
        target = self.target
        if isinstance(target, ListTarget):
            if target.element is None:
                raise StructuralError(f"Key inside list '{target.name}' must follow a hyphen")
            return target.element
        return target

    def bind_key(self, name: str) -> None:
        binding = self.keyed_target().bind(name)
        if binding.type.is_collection:
            self.open_collection(binding)
        else:
            self.binding = binding

    def on_key(self, token: Token) -> None:
        self.align()
        self.bind_key(token.value)

    def on_hyphen(self, token: Token) -> None:
        self.settle()
        # The dash and its space are not part of the measured indentation
        self.line_indent += 1
        if self.line_indent < self.indent:
            self.dedent(self.line_indent)

        target = self.target
        if not isinstance(target, ListTarget):
            raise StructuralError("Sequence entry outside of a list")

        if target.started:
            if self.line_indent != self.indent:
                raise YamlIndentationError(
                    f"Sequence entry at level {self.line_indent}, "
                    f"previous entries of '{target.name}' are at level {self.indent}"
                )
            target.finish_element()
        elif self.line_indent == self.indent + 1:
            self.indent = self.line_indent
        elif self.line_indent != self.indent:
            raise YamlIndentationError(
                f"Sequence entry at level {self.line_indent}, "
                f"expected level {self.indent} or {self.indent + 1}"
            )
        target.begin_element()

    def complete_collection(self, token: Token) -> None:
        """Handle ``[]``/``{}`` after a list or map key."""
        frame = self.opened
        assert frame is not None
        expected = EMPTY_LIST_LITERAL if isinstance(self.target, ListTarget) else EMPTY_MAP_LITERAL
        if token.quoted or token.value != expected:
            raise MalformedCollectionLiteralError(expected, token.value)
        self.opened = None
        self.dedent(frame.indent)

    def assign(self, token: Token) -> None:
        binding = self.binding
        assert binding is not None
        self.binding = None
        declared = binding.type

        if is_empty_map_literal(token) and (declared.optional or declared.kind == TypeKind.RECORD):
            binding.set(self.metadata.zero_value(declared))
            return

        aliases = None
        if declared.kind == TypeKind.ENUM:
            aliases = self.metadata.enum_aliases(declared.python_type)
        binding.set(coerce_scalar(token.type, token.value, declared, binding.name, aliases))

    def on_scalar(self, token: Token, first: bool) -> None:
        if first:
            # A bare integer on its own line is a map key
            if token.type != TokenType.INTEGER:
                raise StructuralError(f"Value {token.value!r} has no key")
            self.align()
            self.bind_key(token.value)
            return

        if self.opened is not None:
            self.complete_collection(token)
            return

        if self.binding is not None:
            self.assign(token)
            return

        target = self.target
        if isinstance(target, ListTarget):
            declared = target.element_type
            if declared.is_leaf:
                if declared.optional and is_empty_map_literal(token):
                    target.append(None)
                    return
                aliases = None
                if declared.kind == TypeKind.ENUM:
                    aliases = self.metadata.enum_aliases(declared.python_type)
                target.append(
                    coerce_scalar(token.type, token.value, declared, target.name, aliases)
                )
                return
            if target.element is not None and is_empty_map_literal(token):
                # "- {}" is an entry left at its defaults, or None when optional
                if declared.optional:
                    target.element = None
                    target.append(None)
                return

        raise StructuralError(f"Unexpected value {token.value!r}")

    def feed(self, line: Line) -> None:
        """Process the tokens of one line."""
        self.line_indent = line.indent
        self.opened = None
        for position, token in enumerate(line.tokens):
            self.column = token.column
            if self.settings.trace:
                logger.debug("level %d/%d %r", self.line_indent, self.indent, token)

            if token.type == TokenType.KEY:
                self.on_key(token)
            elif token.type == TokenType.HYPHEN:
                if position > 0:
                    raise StructuralError("Sequences nested in sequences are not supported")
                self.on_hyphen(token)
            elif token.type in SCALAR_TYPES:
                self.on_scalar(token, first=position == 0)
            # Comments carry no data

    def finish(self) -> None:
        """Unwind every frame at end of input."""
        self.settle()
        self.line_indent = 0
        if self.indent > 0:
            self.dedent(0)

    def parse(self, text: str, source: str | None = None) -> Any:
        """
        Parse a whole document.

        Args:
            text: Document text
            source: Optional document name used in error messages

        Returns:
            The materialized root instance

        Raises:
            YamlIndentationError: If indentation is invalid
            ParseError: For any other failure, wrapping the cause with its line
            SchemaError: If a schema type cannot be described
        """
        lexer = Lexer(text, self.settings)
        raw_lines = text.split("\n")
        number = 0

        def located(line_number: int) -> ErrorContext:
            first_line, snippet = snippet_around(raw_lines, line_number)
            return ErrorContext(
                line=line_number,
                column=self.column,
                snippet=snippet,
                source=source,
                first_line=first_line,
            )

        try:
            for number, raw in enumerate(raw_lines, start=1):
                self.column = 1
                line = lexer.tokenize_line(raw, number)
                if line is not None:
                    self.feed(line)
            self.finish()
        except YamlIndentationError as exc:
            raise exc.with_context(located(number)) from exc
        except SchemaError:
            raise
        except YamlError as exc:
            context = located(number)
            raise make_parse_error(
                exc,
                context.line,
                context.column,
                context.snippet,
                source,
                first_line=context.first_line,
            ) from exc

        return self.root.materialize()


def is_empty_map_literal(token: Token) -> bool:
    return token.type == TokenType.STRING and not token.quoted and token.value == EMPTY_MAP_LITERAL


def deserialize(
    schema_type: type[T],
    text: str,
    *,
    settings: YamlSettings | None = None,
    metadata: TypeMetadataProvider | None = None,
    source: str | None = None,
) -> T:
    """
    Deserialize document text into an instance of ``schema_type``.

    Args:
        schema_type: Pydantic model or dataclass of the document root
        text: Document text
        settings: Optional settings (indent width, tracing)
        metadata: Optional metadata provider
        source: Optional document name used in error messages

    Returns:
        A new instance of ``schema_type``
    """
    parser = YamlParser(
        schema_type,
        metadata=metadata or DEFAULT_METADATA,
        settings=settings or DEFAULT_SETTINGS,
    )
    result: T = parser.parse(text, source)
    return result


def load(schema_type: type[T], path: Path, *, settings: YamlSettings | None = None) -> T:
    """Read and deserialize a UTF-8 document file."""
    text = path.read_text(encoding="utf-8")
    return deserialize(schema_type, text, settings=settings, source=str(path))
