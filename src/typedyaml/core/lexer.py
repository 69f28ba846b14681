"""
Lexer/Tokenizer for typedyaml documents.

Converts raw document text into lines of tokens. Each line carries its
indentation level (number of indent units) and at most one value token
after its hyphen/key prefix.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum

from .config import DEFAULT_SETTINGS, YamlSettings
from .errors import ErrorContext, YamlIndentationError

logger = logging.getLogger(__name__)


class TokenType(Enum):
    """Token types in a typedyaml document."""

    # Structure
    KEY = "KEY"
    HYPHEN = "HYPHEN"

    # Scalars
    STRING = "STRING"
    INTEGER = "INTEGER"
    HEX = "HEX"
    FLOAT = "FLOAT"
    BOOL = "BOOL"

    # Ignored
    COMMENT = "COMMENT"


SCALAR_TYPES = frozenset(
    {
        TokenType.STRING,
        TokenType.INTEGER,
        TokenType.HEX,
        TokenType.FLOAT,
        TokenType.BOOL,
    }
)

KEY_NAME_PATTERN = re.compile(r"-?[A-Za-z0-9_$]+")
KEY_PATTERN = re.compile(rf"({KEY_NAME_PATTERN.pattern})\s*:")
HYPHEN_PATTERN = re.compile(r"-(?: +|$)")
HEX_PATTERN = re.compile(r"0[xX][0-9a-fA-F]+")
FLOAT_PATTERN = re.compile(r"[-+]?\d+\.\d+(?:[eE][-+]?\d+)?")
INTEGER_PATTERN = re.compile(r"[-+]?\d+")
INLINE_COMMENT_PATTERN = re.compile(r"\s#")
BOOL_LITERALS = ("true", "false")
QUOTES = ("'", '"')


@dataclass
class Token:
    """A token with its source location."""

    type: TokenType
    value: str
    line: int
    column: int
    quoted: bool = False

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"


@dataclass
class Line:
    """One non-blank physical line."""

    number: int
    indent: int
    tokens: list[Token] = field(default_factory=list)


def classify_scalar(text: str) -> TokenType:
    """Classify unquoted scalar text by literal priority."""
    if HEX_PATTERN.fullmatch(text):
        return TokenType.HEX
    if FLOAT_PATTERN.fullmatch(text):
        return TokenType.FLOAT
    if INTEGER_PATTERN.fullmatch(text):
        return TokenType.INTEGER
    if text in BOOL_LITERALS:
        return TokenType.BOOL
    return TokenType.STRING


class Lexer:
    """
    Lexer for typedyaml documents.

    Splits the source into physical lines, validates indentation, and
    classifies the remainder of each line into tokens.
    """

    def __init__(self, text: str, settings: YamlSettings = DEFAULT_SETTINGS):
        """
        Initialize lexer.

        Args:
            text: Source text to tokenize
            settings: Indentation width and trace options
        """
        self.text = text
        self.settings = settings
        self.lines: list[Line] = []

    def measure_indent(self, raw: str, line_number: int) -> tuple[int, int]:
        """
        Return ``(indent_level, spaces)`` for a raw line.

        Raises:
            YamlIndentationError: If the leading spaces are not a whole
                number of indent units, or contain a tab
        """
        spaces = len(raw) - len(raw.lstrip(" "))
        if raw[spaces : spaces + 1] == "\t":
            raise YamlIndentationError(
                "Tabs are not allowed in indentation",
                spaces,
                ErrorContext(line=line_number, column=spaces + 1, snippet=raw),
            )
        width = self.settings.indent_width
        if spaces % width != 0:
            raise YamlIndentationError(
                f"The number of leading spaces ({spaces}) must be a multiple of {width}",
                spaces,
                ErrorContext(line=line_number, column=1, snippet=raw),
            )
        return spaces // width, spaces

    def read_value(self, text: str, line_number: int, column: int) -> Token | None:
        """Read the single value token (or comment) at the end of a line."""
        if not text:
            return None

        if text.startswith("#"):
            return Token(TokenType.COMMENT, text, line_number, column)

        quote = text[0]
        if quote in QUOTES:
            # The closing quote is the last one not followed by anything but a comment
            end = text.rfind(quote)
            while end > 0:
                rest = text[end + 1 :].strip()
                if not rest or rest.startswith("#"):
                    return Token(
                        TokenType.STRING, text[1:end], line_number, column, quoted=True
                    )
                end = text.rfind(quote, 1, end)

        value = INLINE_COMMENT_PATTERN.split(text, maxsplit=1)[0].rstrip()
        return Token(classify_scalar(value), value, line_number, column)

    def tokenize_line(self, raw: str, line_number: int) -> Line | None:
        """
        Tokenize one physical line.

        Returns:
            The line, or None for blank and comment-only lines
        """
        content = raw.rstrip("\r").rstrip()
        stripped = content.lstrip(" ")
        if not stripped or stripped.startswith("#"):
            return None

        indent, pos = self.measure_indent(content, line_number)
        line = Line(number=line_number, indent=indent)

        while match := HYPHEN_PATTERN.match(content, pos):
            line.tokens.append(Token(TokenType.HYPHEN, "-", line_number, pos + 1))
            pos = match.end()

        if match := KEY_PATTERN.match(content, pos):
            line.tokens.append(Token(TokenType.KEY, match.group(1), line_number, pos + 1))
            pos = match.end()

        rest = content[pos:]
        column = pos + 1 + len(rest) - len(rest.lstrip())
        value = self.read_value(rest.strip(), line_number, column)
        if value is not None:
            line.tokens.append(value)

        if self.settings.trace:
            logger.debug("line %d indent %d: %s", line_number, indent, line.tokens)
        return line

    def tokenize(self) -> list[Line]:
        """
        Tokenize the entire source text.

        Returns:
            Non-blank lines with their tokens

        Raises:
            YamlIndentationError: If a line is badly indented
        """
        for number, raw in enumerate(self.text.split("\n"), start=1):
            line = self.tokenize_line(raw, number)
            if line is not None:
                self.lines.append(line)
        return self.lines


def tokenize(text: str, settings: YamlSettings = DEFAULT_SETTINGS) -> list[Line]:
    """
    Convenience function to tokenize document text.

    Args:
        text: Source text
        settings: Indentation width and trace options

    Returns:
        List of tokenized lines
    """
    lexer = Lexer(text, settings)
    return lexer.tokenize()
