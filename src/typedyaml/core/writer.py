"""
Writer: renders a record instance as a typedyaml document.

Output layout:

- ``name: value`` for scalars and enums, strings quoted
- ``name:`` followed by nested lines for records and non-empty collections
- ``name: []`` / ``name: {}`` for empty lists and maps
- ``name: {}`` for a record field holding ``None``
- list entries as ``- `` with the first field of a record on the same line
"""

import logging
from collections.abc import Mapping
from enum import Enum, Flag
from pathlib import Path
from typing import Any

from .config import DEFAULT_SETTINGS, YamlSettings
from .errors import SchemaError, TypeCoercionError
from .lexer import KEY_NAME_PATTERN
from .schema import DEFAULT_METADATA, TypeInfo, TypeKind, TypeMetadataProvider

logger = logging.getLogger(__name__)


def flag_names(value: Flag) -> list[str]:
    """Names of the single-bit members set in ``value``, lowest bit first."""
    names: dict[int, str] = {}
    for name, member in type(value).__members__.items():
        bits = member.value
        if bits and bits & (bits - 1) == 0 and bits & value.value == bits:
            names.setdefault(bits, name)
    return [names[bits] for bits in sorted(names)]


class YamlWriter:
    """Accumulates the lines of one document."""

    def __init__(
        self,
        metadata: TypeMetadataProvider = DEFAULT_METADATA,
        settings: YamlSettings = DEFAULT_SETTINGS,
    ):
        self.metadata = metadata
        self.settings = settings
        self.lines: list[str] = []

    def pad(self, indent: int) -> str:
        return " " * (indent * self.settings.indent_width)

    def enum_text(self, value: Enum) -> str:
        if isinstance(value, Flag):
            names = flag_names(value)
            if not names:
                return value.name if value.name and value.value == 0 else "0"
            return " | ".join(names)
        return value.name

    def leaf_text(self, value: Any, field: str) -> str:
        """Render a scalar or enum value for the right-hand side of a line."""
        if value is None:
            return "{}"
        if isinstance(value, Enum):
            return self.enum_text(value)
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, str):
            if "\n" in value or "\r" in value:
                raise TypeCoercionError(field, str, value, "multi-line strings cannot be written")
            return f"{self.settings.quote}{value}{self.settings.quote}"
        if isinstance(value, float):
            return repr(value)
        if isinstance(value, int):
            return str(value)
        raise SchemaError(f"Cannot write {type(value).__name__} value of '{field}'")

    def key_text(self, key: Any, field: str) -> str:
        """
        Render a map key.

        Raises:
            TypeCoercionError: If the key cannot be read back as a key
        """
        if isinstance(key, Enum):
            text = self.enum_text(key)
        elif isinstance(key, bool):
            text = "true" if key else "false"
        else:
            text = str(key)
        if not KEY_NAME_PATTERN.fullmatch(text):
            raise TypeCoercionError(field, type(key), text, "not a valid map key")
        return text

    def write_record(self, instance: Any, indent: int) -> None:
        descriptor = self.metadata.describe(type(instance))
        for field in descriptor.fields:
            self.write_field(field.external_name, getattr(instance, field.name), field.type, indent)

    def write_field(self, name: str, value: Any, declared: TypeInfo, indent: int) -> None:
        pad = self.pad(indent)
        if declared.kind == TypeKind.LIST:
            if not value:
                self.lines.append(f"{pad}{name}: []")
                return
            assert declared.element is not None
            self.lines.append(f"{pad}{name}:")
            self.write_list(value, declared.element, indent + 1, name)
        elif declared.kind == TypeKind.MAP:
            if not value:
                self.lines.append(f"{pad}{name}: {{}}")
                return
            assert declared.element is not None
            self.lines.append(f"{pad}{name}:")
            self.write_map(value, declared.element, indent + 1, name)
        elif declared.kind == TypeKind.RECORD and value is not None:
            self.lines.append(f"{pad}{name}:")
            self.write_record(value, indent + 1)
        else:
            self.lines.append(f"{pad}{name}: {self.leaf_text(value, name)}")

    def write_list(self, items: list[Any], element: TypeInfo, indent: int, name: str) -> None:
        pad = self.pad(indent)
        for item in items:
            if element.kind == TypeKind.RECORD and item is not None:
                start = len(self.lines)
                self.write_record(item, indent + 1)
                if len(self.lines) == start:
                    self.lines.append(f"{pad}-")
                else:
                    self.lines[start] = f"{pad}- {self.lines[start].lstrip(' ')}"
            else:
                self.lines.append(f"{pad}- {self.leaf_text(item, name)}")

    def write_map(
        self, mapping: Mapping[Any, Any], value_type: TypeInfo, indent: int, name: str
    ) -> None:
        for key, value in mapping.items():
            self.write_field(self.key_text(key, name), value, value_type, indent)

    def render(self) -> str:
        if not self.lines:
            return ""
        return "\n".join(self.lines) + "\n"


def serialize(
    instance: Any,
    *,
    settings: YamlSettings | None = None,
    metadata: TypeMetadataProvider | None = None,
) -> str:
    """
    Serialize a record instance to document text.

    Args:
        instance: Pydantic model or dataclass instance
        settings: Optional settings (indent width, quote character)
        metadata: Optional metadata provider

    Returns:
        Document text, one field per line

    Raises:
        SchemaError: If the instance's type cannot be described
        TypeCoercionError: If a value has no single-line form
    """
    writer = YamlWriter(metadata or DEFAULT_METADATA, settings or DEFAULT_SETTINGS)
    writer.write_record(instance, 0)
    logger.debug("serialized %s into %d lines", type(instance).__name__, len(writer.lines))
    return writer.render()


def dump(instance: Any, path: Path, *, settings: YamlSettings | None = None) -> None:
    """Serialize an instance and write it to a UTF-8 file."""
    path.write_text(serialize(instance, settings=settings), encoding="utf-8")
