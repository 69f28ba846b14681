"""
typedyaml - typed object graphs to and from a strict YAML subset.

Documents are read into pydantic models or dataclasses, and instances are
written back in a form the reader accepts.
"""

from ._version import get_version
from .core import (
    ErrorContext,
    MalformedCollectionLiteralError,
    ModelMetadata,
    ParseError,
    SchemaError,
    StructuralError,
    TypeCoercionError,
    TypeMetadataProvider,
    UnknownEnumMemberError,
    UnknownFieldError,
    YamlError,
    YamlIndentationError,
    YamlSettings,
    deserialize,
    dump,
    load,
    load_settings,
    serialize,
    yaml_aliases,
)

__version__ = get_version()

__all__ = [
    "__version__",
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
    "YamlSettings",
    "deserialize",
    "dump",
    "load",
    "load_settings",
    "serialize",
    "yaml_aliases",
]
