"""C# literals for default parameter values."""

from __future__ import annotations

import math
import re
from enum import Enum

from facadegen.core.errors import UnsupportedLiteral
from facadegen.generation.naming import render_type_name
from facadegen.metadata.models import LiteralValue, TypeRef


class LiteralKind(str, Enum):
    NULL = "null"
    STRING = "string"
    CHAR = "char"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    SINGLE = "single"
    DOUBLE = "double"
    DECIMAL = "decimal"
    ENUM = "enum"


_FLOAT_SUFFIX = {
    LiteralKind.SINGLE: ("f", "float"),
    LiteralKind.DOUBLE: ("d", "double"),
}

_DECIMAL_TEXT = re.compile(r"-?\d+(\.\d+)?")

_STRING_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "'": "\\'",
    "\0": "\\0",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


def _escape(text: str, quote: str) -> str:
    out = []
    for ch in text:
        if ch in ("'", '"') and ch != quote:
            out.append(ch)
        else:
            out.append(_STRING_ESCAPES.get(ch, ch))
    return "".join(out)


def _is_number(value: object, *, integral: bool = False) -> bool:
    if isinstance(value, bool):
        return False
    return isinstance(value, int) if integral else isinstance(value, (int, float))


def _render_float(kind: LiteralKind, value: float) -> str:
    suffix, keyword = _FLOAT_SUFFIX[kind]
    if math.isnan(value):
        return f"{keyword}.NaN"
    if math.isinf(value):
        return f"{keyword}.{'PositiveInfinity' if value > 0 else 'NegativeInfinity'}"
    return f"{float(value)!r}{suffix}"


def render_literal(parameter_type: TypeRef, literal: LiteralValue) -> str:
    """Render ``literal`` as a C# default-value expression for ``parameter_type``.

    Raises:
        UnsupportedLiteral: The literal's kind has no C# spelling, or its value
            does not have the shape the kind requires.
    """
    if not parameter_type.is_visible:
        return "default"

    try:
        kind = LiteralKind(literal.kind)
    except ValueError:
        raise UnsupportedLiteral.for_value(literal.kind, literal.value) from None

    value = literal.value
    if kind is LiteralKind.NULL:
        return "default" if parameter_type.is_value_type else "null"
    if kind is LiteralKind.STRING:
        if not isinstance(value, str):
            raise UnsupportedLiteral.for_value(literal.kind, value)
        escaped = _escape(value, '"')
        return f'"{escaped}"'
    if kind is LiteralKind.CHAR:
        if not isinstance(value, str) or len(value) != 1:
            raise UnsupportedLiteral.for_value(literal.kind, value)
        escaped = _escape(value, "'")
        return f"'{escaped}'"
    if kind is LiteralKind.BOOLEAN:
        if not isinstance(value, bool):
            raise UnsupportedLiteral.for_value(literal.kind, value)
        return "true" if value else "false"
    if kind is LiteralKind.INTEGER:
        if not _is_number(value, integral=True):
            raise UnsupportedLiteral.for_value(literal.kind, value)
        return str(value)
    if kind in _FLOAT_SUFFIX:
        if not _is_number(value):
            raise UnsupportedLiteral.for_value(literal.kind, value)
        return _render_float(kind, float(value))
    if kind is LiteralKind.DECIMAL:
        if isinstance(value, str) and _DECIMAL_TEXT.fullmatch(value):
            return f"{value}m"
        if not _is_number(value) or not math.isfinite(value):
            raise UnsupportedLiteral.for_value(literal.kind, value)
        return f"{value!r}m"

    # enum
    if literal.enum_type is None or not literal.flags:
        raise UnsupportedLiteral.for_value(literal.kind, value)
    enum_name = render_type_name(literal.enum_type)
    return " | ".join(f"{enum_name}.{flag}" for flag in literal.flags)
