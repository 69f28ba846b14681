"""
Type metadata for typedyaml schemas.

A schema type is a pydantic model or a dataclass. Each one is described once
as a table of field descriptors (name, alias, declared type, zero-value
factory), and the parser and writer only ever talk to that table through the
``TypeMetadataProvider`` protocol.

Field aliases:
    pydantic:    ``name: str = Field(alias="display_name")``
    dataclasses: ``name: str = field(metadata={"alias": "display_name"})``

Enum member aliases:
    ``@yaml_aliases(THIRD="_third")`` on the enum class.
"""

import dataclasses
import types
import typing
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum, Flag
from functools import lru_cache
from typing import Annotated, Any, Protocol, TypeVar, Union, runtime_checkable

from pydantic import BaseModel

from .errors import SchemaError

ALIASES_ATTRIBUTE = "__yaml_aliases__"
SCALAR_TYPES = (bool, int, float, str)

E = TypeVar("E", bound=Enum)


class TypeKind(str, Enum):
    """How a declared type is materialized."""

    SCALAR = "scalar"
    ENUM = "enum"
    RECORD = "record"
    LIST = "list"
    MAP = "map"


@dataclass(frozen=True)
class TypeInfo:
    """
    A resolved field annotation.

    Attributes:
        kind: How values of this type are materialized
        python_type: The scalar type, enum class, or record class
            (``list``/``dict`` for collections)
        optional: Whether ``None`` is an accepted value
        element: Element type of a list, value type of a map
        key: Key type of a map
    """

    kind: TypeKind
    python_type: type
    optional: bool = False
    element: "TypeInfo | None" = None
    key: "TypeInfo | None" = None

    @property
    def is_leaf(self) -> bool:
        return self.kind in (TypeKind.SCALAR, TypeKind.ENUM)

    @property
    def is_collection(self) -> bool:
        return self.kind in (TypeKind.LIST, TypeKind.MAP)

    @property
    def name(self) -> str:
        if self.kind == TypeKind.LIST:
            assert self.element is not None
            base = f"list[{self.element.name}]"
        elif self.kind == TypeKind.MAP:
            assert self.key is not None and self.element is not None
            base = f"dict[{self.key.name}, {self.element.name}]"
        else:
            base = self.python_type.__name__
        return f"{base} | None" if self.optional else base

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class FieldDescriptor:
    """One settable member of a record type."""

    name: str
    alias: str | None
    type: TypeInfo
    default_factory: Callable[[], Any]

    @property
    def external_name(self) -> str:
        """Name used in documents: the alias when declared, else the name."""
        return self.alias or self.name


@dataclass(frozen=True)
class SchemaDescriptor:
    """Field table for one record type, in declaration order."""

    schema_type: type
    fields: tuple[FieldDescriptor, ...]
    factory: Callable[[dict[str, Any]], Any]

    def find(self, name: str) -> FieldDescriptor | None:
        """Find a field by declared name, then by alias."""
        for descriptor in self.fields:
            if descriptor.name == name:
                return descriptor
        for descriptor in self.fields:
            if descriptor.alias == name:
                return descriptor
        return None

    def new_instance(self) -> Any:
        """Create an instance with every field at its default or zero value."""
        return self.factory({f.name: f.default_factory() for f in self.fields})


@runtime_checkable
class TypeMetadataProvider(Protocol):
    """
    Capability consumed by the parser and writer.

    Implementations describe record types, resolve annotations, and build
    zero values; ``ModelMetadata`` is the default implementation.
    """

    def describe(self, schema_type: type) -> SchemaDescriptor: ...
    def resolve_type(self, annotation: Any) -> TypeInfo: ...
    def enum_aliases(self, enum_type: type[Enum]) -> Mapping[str, str]: ...
    def zero_value(self, info: TypeInfo) -> Any: ...


def yaml_aliases(**aliases: str) -> Callable[[type[E]], type[E]]:
    """
    Declare external names for enum members.

    Example::

        @yaml_aliases(THIRD="_third")
        class Choice(Flag):
            FIRST = auto()
            SECOND = auto()
            THIRD = auto()
    """

    def decorate(enum_type: type[E]) -> type[E]:
        unknown = sorted(set(aliases) - set(enum_type.__members__))
        if unknown:
            raise SchemaError(
                f"{enum_type.__name__} has no member(s) {', '.join(unknown)} to alias"
            )
        setattr(enum_type, ALIASES_ATTRIBUTE, dict(aliases))
        return enum_type

    return decorate


def is_record_type(value: Any) -> bool:
    if not isinstance(value, type):
        return False
    return issubclass(value, BaseModel) or dataclasses.is_dataclass(value)


def resolve_type(annotation: Any) -> TypeInfo:
    """
    Resolve a field annotation into a ``TypeInfo``.

    Raises:
        SchemaError: If the annotation is not supported
    """
    origin = typing.get_origin(annotation)
    args = typing.get_args(annotation)

    if origin is Annotated:
        return resolve_type(args[0])

    if origin is Union or origin is types.UnionType:
        members = [arg for arg in args if arg is not type(None)]
        if len(members) != 1 or len(args) != 2:
            raise SchemaError(f"Unsupported union annotation: {annotation!r}")
        return dataclasses.replace(resolve_type(members[0]), optional=True)

    if origin is list:
        if len(args) != 1:
            raise SchemaError(f"List annotation needs an element type: {annotation!r}")
        element = resolve_type(args[0])
        if element.is_collection:
            raise SchemaError(f"Sequences may only hold scalars, enums or records: {annotation!r}")
        return TypeInfo(TypeKind.LIST, list, element=element)

    if origin is dict:
        if len(args) != 2:
            raise SchemaError(f"Dict annotation needs key and value types: {annotation!r}")
        key = resolve_type(args[0])
        if not key.is_leaf:
            raise SchemaError(f"Map keys must be scalars or enums: {annotation!r}")
        return TypeInfo(TypeKind.MAP, dict, element=resolve_type(args[1]), key=key)

    if origin is not None or not isinstance(annotation, type):
        raise SchemaError(f"Unsupported annotation: {annotation!r}")

    if issubclass(annotation, Enum):
        return TypeInfo(TypeKind.ENUM, annotation)
    if annotation in SCALAR_TYPES:
        return TypeInfo(TypeKind.SCALAR, annotation)
    if is_record_type(annotation):
        return TypeInfo(TypeKind.RECORD, annotation)
    if annotation in (list, dict):
        raise SchemaError(f"Bare {annotation.__name__} needs type arguments")

    raise SchemaError(f"Unsupported field type: {annotation.__name__}")


def zero_value(info: TypeInfo) -> Any:
    """Zero value of a type: 0, '', False, first enum member, empty record."""
    if info.optional:
        return None
    if info.kind == TypeKind.SCALAR:
        return info.python_type()
    if info.kind == TypeKind.ENUM:
        if issubclass(info.python_type, Flag):
            return info.python_type(0)
        return next(iter(info.python_type))
    if info.kind == TypeKind.RECORD:
        return describe_type(info.python_type).new_instance()
    if info.kind == TypeKind.LIST:
        return []
    return {}


def _describe_model(schema_type: type[BaseModel]) -> SchemaDescriptor:
    fields = []
    for name, info in schema_type.model_fields.items():
        declared = resolve_type(info.annotation)
        if info.is_required():
            factory = _zero_factory(declared)
        else:
            factory = _pydantic_default(info)
        fields.append(FieldDescriptor(name, info.alias, declared, factory))

    def construct(values: dict[str, Any]) -> Any:
        return schema_type.model_construct(**values)

    return SchemaDescriptor(schema_type, tuple(fields), construct)


def _describe_dataclass(schema_type: type) -> SchemaDescriptor:
    hints = typing.get_type_hints(schema_type)
    fields = []
    for item in dataclasses.fields(schema_type):
        if not item.init:
            continue
        declared = resolve_type(hints[item.name])
        if item.default is not dataclasses.MISSING:
            factory = _constant(item.default)
        elif item.default_factory is not dataclasses.MISSING:
            factory = item.default_factory
        else:
            factory = _zero_factory(declared)
        fields.append(FieldDescriptor(item.name, item.metadata.get("alias"), declared, factory))

    def construct(values: dict[str, Any]) -> Any:
        return schema_type(**values)

    return SchemaDescriptor(schema_type, tuple(fields), construct)


def _zero_factory(info: TypeInfo) -> Callable[[], Any]:
    return lambda: zero_value(info)


def _constant(value: Any) -> Callable[[], Any]:
    return lambda: value


def _pydantic_default(info: Any) -> Callable[[], Any]:
    return lambda: info.get_default(call_default_factory=True)


@lru_cache(maxsize=None)
def describe_type(schema_type: type) -> SchemaDescriptor:
    """
    Describe a record type (memoized).

    Raises:
        SchemaError: If the type is not a pydantic model or dataclass, or a
            field annotation is not supported
    """
    if isinstance(schema_type, type) and issubclass(schema_type, BaseModel):
        return _describe_model(schema_type)
    if is_record_type(schema_type):
        return _describe_dataclass(schema_type)
    raise SchemaError(f"{schema_type!r} is not a pydantic model or dataclass")


class ModelMetadata:
    """Default ``TypeMetadataProvider`` for pydantic models and dataclasses."""

    def describe(self, schema_type: type) -> SchemaDescriptor:
        return describe_type(schema_type)

    def resolve_type(self, annotation: Any) -> TypeInfo:
        return resolve_type(annotation)

    def enum_aliases(self, enum_type: type[Enum]) -> Mapping[str, str]:
        aliases: Mapping[str, str] = getattr(enum_type, ALIASES_ATTRIBUTE, {})
        return aliases

    def zero_value(self, info: TypeInfo) -> Any:
        return zero_value(info)


DEFAULT_METADATA = ModelMetadata()
