"""Core reader, writer and type metadata for typedyaml."""

from .config import DEFAULT_SETTINGS, YamlSettings, load_settings
from .errors import (
    ErrorContext,
    MalformedCollectionLiteralError,
    ParseError,
    SchemaError,
    StructuralError,
    TypeCoercionError,
    UnknownEnumMemberError,
    UnknownFieldError,
    YamlError,
    YamlIndentationError,
)
from .parser import YamlParser, deserialize, load
from .schema import DEFAULT_METADATA, ModelMetadata, TypeMetadataProvider, yaml_aliases
from .writer import YamlWriter, dump, serialize

__all__ = [
    "DEFAULT_METADATA",
    "DEFAULT_SETTINGS",
    "ErrorContext",
    "MalformedCollectionLiteralError",
    "ModelMetadata",
    "ParseError",
    "SchemaError",
    "StructuralError",
    "TypeCoercionError",
    "TypeMetadataProvider",
    "UnknownEnumMemberError",
    "UnknownFieldError",
    "YamlError",
    "YamlIndentationError",
    "YamlParser",
    "YamlSettings",
    "YamlWriter",
    "deserialize",
    "dump",
    "load",
    "load_settings",
    "serialize",
    "yaml_aliases",
]
