"""Tests for document serialization."""

from dataclasses import dataclass, field
from enum import Enum, Flag

import pytest
from pydantic import BaseModel, Field

from typedyaml import SchemaError, TypeCoercionError, YamlSettings, dump, serialize, yaml_aliases


@yaml_aliases(THIRD="_third")
class Choice(Flag):
    FIRST = 1
    SECOND = 2
    THIRD = 4
    BOTH = 3


class Color(Enum):
    RED = 1
    GREEN = 2


class Inner(BaseModel):
    value: int = 0


class Outer(BaseModel):
    count: int = 0
    title: str = Field("", alias="displayTitle")
    ratio: float = 0.0
    enabled: bool = False
    inner: Inner = Field(default_factory=Inner)


@dataclass
class Item:
    x: int = 0
    y: int = 0


@dataclass
class Empty:
    pass


@dataclass
class Holder:
    items: list[Item] = field(default_factory=list)
    numbers: list[int] = field(default_factory=list)
    lookup: dict[int, Item] = field(default_factory=dict)
    names: dict[str, str] = field(default_factory=dict)
    choice: Choice = Choice(0)
    color: Color = Color.RED
    sub: Item | None = None
    blanks: list[Empty] = field(default_factory=list)


class TestScalars:
    """Leaf values and nested records."""

    def test_record(self) -> None:
        text = serialize(
            Outer(count=3, displayTitle="hi", ratio=-22.42, enabled=True, inner=Inner(value=7))
        )
        assert text == (
            "count: 3\n"
            "displayTitle: 'hi'\n"
            "ratio: -22.42\n"
            "enabled: true\n"
            "inner:\n"
            "  value: 7\n"
        )

    def test_double_quote_setting(self) -> None:
        text = serialize(Outer(displayTitle="hi"), settings=YamlSettings(quote='"'))
        assert 'displayTitle: "hi"' in text

    def test_indent_width_setting(self) -> None:
        text = serialize(Outer(), settings=YamlSettings(indent_width=4))
        assert "\n    value: 0\n" in text

    def test_comment_marker_in_string_written_verbatim(self) -> None:
        assert "displayTitle: 'a' # b'\n" in serialize(Outer(displayTitle="a' # b"))

    def test_none_is_empty_map(self) -> None:
        assert "sub: {}\n" in serialize(Holder())

    def test_multiline_string_rejected(self) -> None:
        with pytest.raises(TypeCoercionError):
            serialize(Outer(displayTitle="two\nlines"))

    def test_not_a_record(self) -> None:
        with pytest.raises(SchemaError):
            serialize(42)


class TestEnums:
    """Enum and flags text."""

    def test_plain_enum(self) -> None:
        assert "color: GREEN\n" in serialize(Holder(color=Color.GREEN))

    def test_flags_joined(self) -> None:
        text = serialize(Holder(choice=Choice.SECOND | Choice.THIRD))
        assert "choice: SECOND | THIRD\n" in text

    def test_composite_member_expanded(self) -> None:
        assert "choice: FIRST | SECOND\n" in serialize(Holder(choice=Choice.BOTH))

    def test_zero_flags(self) -> None:
        assert "choice: 0\n" in serialize(Holder())


class TestCollections:
    """Lists and maps."""

    def test_empty_collections(self) -> None:
        text = serialize(Holder())
        assert "items: []\n" in text
        assert "numbers: []\n" in text
        assert "lookup: {}\n" in text

    def test_record_list(self) -> None:
        text = serialize(Holder(items=[Item(1, 2), Item(3, 4)]))
        assert text.startswith("items:\n  - x: 1\n    y: 2\n  - x: 3\n    y: 4\n")

    def test_leaf_list(self) -> None:
        assert "numbers:\n  - 1\n  - -2\n" in serialize(Holder(numbers=[1, -2]))

    def test_record_map(self) -> None:
        text = serialize(Holder(lookup={2: Item(x=42)}))
        assert "lookup:\n  2:\n    x: 42\n    y: 0\n" in text

    def test_leaf_map(self) -> None:
        assert "names:\n  a: 'b'\n" in serialize(Holder(names={"a": "b"}))

    @pytest.mark.parametrize("key", ["a-b", "", "two words", "x:y", "-"])
    def test_unreadable_string_key_rejected(self, key: str) -> None:
        with pytest.raises(TypeCoercionError, match="not a valid map key"):
            serialize(Holder(names={key: "v"}))

    def test_numeric_looking_string_keys(self) -> None:
        text = serialize(Holder(names={"007": "a", "0x10": "b"}))
        assert "names:\n  007: 'a'\n  0x10: 'b'\n" in text

    def test_fieldless_entries(self) -> None:
        assert "blanks:\n  -\n  -\n" in serialize(Holder(blanks=[Empty(), Empty()]))


class TestDump:
    """Writing documents to files."""

    def test_dump(self, tmp_path) -> None:
        path = tmp_path / "item.yaml"
        dump(Item(x=1), path)
        assert path.read_text(encoding="utf-8") == "x: 1\ny: 0\n"
