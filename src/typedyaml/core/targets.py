"""
Destinations the parser writes into.

A target is one of three variants:

- ``RecordTarget``: a record type under construction; resolves field names.
- ``ListTarget``: an ordered accumulator for a ``list[...]`` field.
- ``MapTarget``: a keyed accumulator for a ``dict[...]`` field.

Records collect field values and only build the instance when materialized,
so frozen pydantic models and frozen dataclasses are supported.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from .coercion import coerce_scalar
from .errors import StructuralError, UnknownFieldError
from .lexer import classify_scalar
from .schema import TypeInfo, TypeKind, TypeMetadataProvider

logger = logging.getLogger(__name__)


@dataclass
class FieldBinding:
    """A settable slot and the type it was declared with."""

    name: str
    type: TypeInfo
    setter: Callable[[Any], None]

    def set(self, value: Any) -> None:
        self.setter(value)


class RecordTarget:
    """A record (pydantic model or dataclass) under construction."""

    def __init__(self, schema_type: type, metadata: TypeMetadataProvider):
        self.schema_type = schema_type
        self.metadata = metadata
        self.descriptor = metadata.describe(schema_type)
        self.values: dict[str, Any] = {}

    def __repr__(self) -> str:
        return f"RecordTarget({self.schema_type.__name__}, {sorted(self.values)})"

    def bind(self, name: str) -> FieldBinding:
        """
        Resolve a document key to a field binding.

        Raises:
            UnknownFieldError: If no field has this name or alias
        """
        field = self.descriptor.find(name)
        if field is None:
            raise UnknownFieldError(name, self.schema_type)

        def setter(value: Any) -> None:
            self.values[field.name] = value

        return FieldBinding(field.name, field.type, setter)

    def materialize(self) -> Any:
        values = {
            f.name: self.values[f.name] if f.name in self.values else f.default_factory()
            for f in self.descriptor.fields
        }
        return self.descriptor.factory(values)


class ListTarget:
    """
    Accumulator for a sequence field.

    Leaf elements (scalars and enums) are appended directly. Record elements
    are built in ``element`` between one hyphen and the next.
    """

    def __init__(self, element_type: TypeInfo, name: str, metadata: TypeMetadataProvider):
        self.element_type = element_type
        self.name = name
        self.metadata = metadata
        self.items: list[Any] = []
        self.element: RecordTarget | None = None

    def __repr__(self) -> str:
        return f"ListTarget({self.name}, {len(self.items)} items)"

    @property
    def started(self) -> bool:
        """Whether any entry has been seen yet."""
        return bool(self.items) or self.element is not None

    def append(self, value: Any) -> None:
        self.items.append(value)

    def begin_element(self) -> None:
        if self.element_type.is_leaf:
            return
        self.element = RecordTarget(self.element_type.python_type, self.metadata)

    def finish_element(self) -> bool:
        """Append the element under construction, if any."""
        if self.element is None:
            return False
        self.items.append(self.element.materialize())
        self.element = None
        logger.debug("list %s: completed entry %d", self.name, len(self.items))
        return True

    def materialize(self) -> list[Any]:
        return list(self.items)


class MapTarget:
    """
    Accumulator for a mapping field.

    Each key produces a one-shot binding that inserts ``(key, value)``.
    Keys are insertion-only; repeating a key is an error.
    """

    def __init__(
        self,
        key_type: TypeInfo,
        value_type: TypeInfo,
        name: str,
        metadata: TypeMetadataProvider,
    ):
        self.key_type = key_type
        self.value_type = value_type
        self.name = name
        self.metadata = metadata
        self.items: dict[Any, Any] = {}

    def __repr__(self) -> str:
        return f"MapTarget({self.name}, {len(self.items)} entries)"

    def bind(self, key_text: str) -> FieldBinding:
        if self.key_type.kind == TypeKind.SCALAR and self.key_type.python_type is str:
            key: Any = key_text
        else:
            aliases = None
            if self.key_type.kind == TypeKind.ENUM:
                aliases = self.metadata.enum_aliases(self.key_type.python_type)
            key = coerce_scalar(
                classify_scalar(key_text), key_text, self.key_type, f"{self.name} key", aliases
            )
        if key in self.items:
            raise StructuralError(f"Duplicate key {key!r} in '{self.name}'")

        def setter(value: Any) -> None:
            if key in self.items:
                raise StructuralError(f"Duplicate key {key!r} in '{self.name}'")
            self.items[key] = value

        return FieldBinding(f"{self.name}[{key_text}]", self.value_type, setter)

    def materialize(self) -> dict[Any, Any]:
        return dict(self.items)


Target = RecordTarget | ListTarget | MapTarget


def new_target(declared: TypeInfo, name: str, metadata: TypeMetadataProvider) -> Target:
    """Create an empty target for a nested value of the declared type."""
    if declared.kind == TypeKind.LIST:
        assert declared.element is not None
        return ListTarget(declared.element, name, metadata)
    if declared.kind == TypeKind.MAP:
        assert declared.key is not None and declared.element is not None
        return MapTarget(declared.key, declared.element, name, metadata)
    if declared.kind == TypeKind.RECORD:
        return RecordTarget(declared.python_type, metadata)
    raise StructuralError(f"Field '{name}' of type {declared} cannot hold nested lines")
