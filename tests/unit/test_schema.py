"""Tests for type metadata resolution."""

from dataclasses import dataclass, field
from enum import Enum, Flag, auto
from typing import Optional

import pytest
from pydantic import BaseModel, Field

from typedyaml import ModelMetadata, SchemaError, TypeMetadataProvider, yaml_aliases
from typedyaml.core.schema import TypeKind, describe_type, resolve_type, zero_value


@yaml_aliases(THIRD="_third")
class Choice(Flag):
    FIRST = auto()
    SECOND = auto()
    THIRD = auto()


class Color(Enum):
    RED = "red"
    GREEN = "green"


class Engine(BaseModel):
    power: int = 0


class Boat(BaseModel):
    name: str = Field("", alias="boatName")
    engine: Engine = Field(default_factory=Engine)
    seats: list[int] = []
    color: Color = Color.GREEN


@dataclass
class Point:
    x: float
    y: float = 1.5
    label: str = field(default="", metadata={"alias": "tag"})
    tags: list[str] = field(default_factory=list)


class TestResolveType:
    """Annotation resolution."""

    def test_scalars(self) -> None:
        for scalar in (bool, int, float, str):
            info = resolve_type(scalar)
            assert info.kind == TypeKind.SCALAR
            assert info.python_type is scalar

    def test_optional(self) -> None:
        info = resolve_type(Optional[int])
        assert info.optional
        assert info.python_type is int

    def test_pipe_optional(self) -> None:
        info = resolve_type(Engine | None)
        assert info.optional
        assert info.kind == TypeKind.RECORD

    def test_list(self) -> None:
        info = resolve_type(list[Engine])
        assert info.kind == TypeKind.LIST
        assert info.element is not None
        assert info.element.python_type is Engine

    def test_map(self) -> None:
        info = resolve_type(dict[int, Engine])
        assert info.kind == TypeKind.MAP
        assert info.key is not None and info.key.python_type is int
        assert str(info) == "dict[int, Engine]"

    def test_enum(self) -> None:
        assert resolve_type(Choice).kind == TypeKind.ENUM

    def test_nested_list_rejected(self) -> None:
        with pytest.raises(SchemaError):
            resolve_type(list[list[int]])

    def test_list_of_maps_rejected(self) -> None:
        with pytest.raises(SchemaError):
            resolve_type(list[dict[str, int]])

    def test_record_key_rejected(self) -> None:
        with pytest.raises(SchemaError, match="Map keys"):
            resolve_type(dict[Engine, int])

    def test_union_rejected(self) -> None:
        with pytest.raises(SchemaError, match="union"):
            resolve_type(int | str)

    def test_bare_list_rejected(self) -> None:
        with pytest.raises(SchemaError, match="type arguments"):
            resolve_type(list)

    def test_unknown_class_rejected(self) -> None:
        with pytest.raises(SchemaError):
            resolve_type(bytes)


class TestDescribe:
    """Field tables for records."""

    def test_pydantic_fields_in_order(self) -> None:
        descriptor = describe_type(Boat)
        assert [f.name for f in descriptor.fields] == ["name", "engine", "seats", "color"]

    def test_pydantic_alias(self) -> None:
        descriptor = describe_type(Boat)
        found = descriptor.find("boatName")
        assert found is not None
        assert found.name == "name"
        assert found.external_name == "boatName"

    def test_find_by_name(self) -> None:
        assert describe_type(Boat).find("name") is not None
        assert describe_type(Boat).find("missing") is None

    def test_dataclass_alias(self) -> None:
        descriptor = describe_type(Point)
        found = descriptor.find("tag")
        assert found is not None and found.name == "label"

    def test_new_instance_uses_defaults(self) -> None:
        boat = describe_type(Boat).new_instance()
        assert boat.engine == Engine()
        assert boat.color is Color.GREEN
        assert boat.seats == []

    def test_required_dataclass_field_gets_zero(self) -> None:
        point = describe_type(Point).new_instance()
        assert point.x == 0.0
        assert point.y == 1.5

    def test_default_factories_not_shared(self) -> None:
        descriptor = describe_type(Point)
        assert descriptor.new_instance().tags is not descriptor.new_instance().tags

    def test_not_a_record(self) -> None:
        with pytest.raises(SchemaError, match="not a pydantic model or dataclass"):
            describe_type(int)

    def test_memoized(self) -> None:
        assert describe_type(Boat) is describe_type(Boat)


class TestZeroValue:
    """Zero values per kind."""

    def test_scalars(self) -> None:
        assert zero_value(resolve_type(int)) == 0
        assert zero_value(resolve_type(str)) == ""
        assert zero_value(resolve_type(bool)) is False

    def test_optional_is_none(self) -> None:
        assert zero_value(resolve_type(Engine | None)) is None

    def test_flags_zero(self) -> None:
        assert zero_value(resolve_type(Choice)) == Choice(0)

    def test_plain_enum_first_member(self) -> None:
        assert zero_value(resolve_type(Color)) is Color.RED

    def test_record(self) -> None:
        assert zero_value(resolve_type(Engine)) == Engine(power=0)


class TestAliases:
    """Enum member aliases and the metadata provider."""

    def test_aliases_recorded(self) -> None:
        assert ModelMetadata().enum_aliases(Choice) == {"THIRD": "_third"}

    def test_no_aliases(self) -> None:
        assert ModelMetadata().enum_aliases(Color) == {}

    def test_unknown_member_rejected(self) -> None:
        with pytest.raises(SchemaError, match="FOURTH"):

            @yaml_aliases(FOURTH="_fourth")
            class Broken(Enum):
                ONE = 1

    def test_provider_protocol(self) -> None:
        assert isinstance(ModelMetadata(), TypeMetadataProvider)
