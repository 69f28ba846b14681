"""
Scalar coercion: raw token text to the declared type of a field.

Numbers are parsed locale-invariantly. Hex literals are unsigned 32-bit.
Enum text may name several members separated by ``,`` or ``|``; each piece
is looked up by alias first and then by canonical member name.
"""

import operator
from collections.abc import Mapping
from enum import Enum, Flag
from functools import reduce
from typing import Any

from .errors import TypeCoercionError, UnknownEnumMemberError
from .lexer import TokenType
from .schema import TypeInfo, TypeKind

UINT32_MAX = 0xFFFFFFFF


def parse_hex(text: str, field: str, declared: object) -> int:
    value = int(text[2:], 16)
    if value > UINT32_MAX:
        raise TypeCoercionError(field, declared, text, "hex literal exceeds 32 bits")
    return value


def coerce_enum(
    token_type: TokenType,
    text: str,
    enum_type: type[Enum],
    field: str,
    aliases: Mapping[str, str],
) -> Enum:
    """
    Convert enum text to a member or a flags combination.

    ``Second | _third`` and ``Second,_third`` both give ``SECOND | THIRD``
    when ``_third`` is declared as the alias of ``THIRD``.
    """
    if token_type in (TokenType.INTEGER, TokenType.HEX):
        value = parse_hex(text, field, enum_type) if token_type == TokenType.HEX else int(text)
        try:
            return enum_type(value)
        except ValueError:
            raise UnknownEnumMemberError(field, enum_type, text) from None

    canonical_by_alias = {alias: name for name, alias in aliases.items()}
    members = []
    for piece in text.replace("|", ",").split(","):
        name = piece.strip()
        name = canonical_by_alias.get(name, name)
        member = enum_type.__members__.get(name)
        if member is None:
            raise UnknownEnumMemberError(field, enum_type, name)
        members.append(member)

    if len(members) == 1:
        return members[0]
    if not issubclass(enum_type, Flag):
        raise TypeCoercionError(field, enum_type, text, "only flags enums combine members")
    return reduce(operator.or_, members)


def coerce_scalar(
    token_type: TokenType,
    text: str,
    declared: TypeInfo,
    field: str,
    aliases: Mapping[str, str] | None = None,
) -> Any:
    """
    Convert a scalar token to the declared type.

    Args:
        token_type: Literal kind reported by the lexer
        text: Token text (quotes already stripped)
        declared: Declared type of the destination
        field: Destination name, for error messages
        aliases: Canonical-to-alias table when ``declared`` is an enum

    Raises:
        TypeCoercionError: If the text does not fit the declared type
        UnknownEnumMemberError: If an enum piece names no member or alias
    """
    if declared.kind == TypeKind.ENUM:
        return coerce_enum(token_type, text, declared.python_type, field, aliases or {})

    if declared.kind != TypeKind.SCALAR:
        raise TypeCoercionError(field, declared, text, f"{declared.kind.value} values take nested lines")

    target = declared.python_type

    if target is bool:
        if token_type == TokenType.BOOL:
            return text == "true"
        raise TypeCoercionError(field, declared, text, "expected true or false")

    if target is int:
        if token_type == TokenType.INTEGER:
            return int(text)
        if token_type == TokenType.HEX:
            return parse_hex(text, field, declared)
        raise TypeCoercionError(field, declared, text)

    if target is float:
        if token_type == TokenType.HEX:
            return float(parse_hex(text, field, declared))
        if token_type == TokenType.BOOL:
            raise TypeCoercionError(field, declared, text)
        try:
            return float(text)
        except ValueError:
            raise TypeCoercionError(field, declared, text) from None

    # str
    if token_type == TokenType.INTEGER:
        return str(int(text))
    if token_type == TokenType.HEX:
        return str(parse_hex(text, field, declared))
    return text
