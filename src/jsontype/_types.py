"""Core type aliases and value helpers for jsontype.

- Value is the decoded-JSON data union both matchers walk
- TypeTag is the closed set of runtime type names a type expression names
- stringify() gives the string form filters are evaluated against
- export_literal() gives the rendering used in mismatch diagnostics
"""

from __future__ import annotations

import json
import math
from collections.abc import Callable, Mapping, Sequence
from enum import StrEnum
from typing import Any, TypeAlias

Scalar: TypeAlias = str | int | float | bool | None
Value: TypeAlias = Scalar | Sequence["Value"] | Mapping[str | int, "Value"]

# Custom filter predicate: (string form of value, captured args) -> bool.
FilterPredicate: TypeAlias = Callable[[str, Sequence[str]], bool]


class TypeTag(StrEnum):
    NULL = "null"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    FLOAT = "float"
    STRING = "string"
    ARRAY = "array"


def is_container(value: object) -> bool:
    """True for mappings and non-string sequences."""
    if isinstance(value, Mapping):
        return True
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


def runtime_type_name(value: object) -> str:
    """Return the type name a type expression must use to match ``value``.

    ``bool`` is tested before ``int``. Values outside the Value union report
    their lowercase class name.
    """
    match value:
        case None:
            return TypeTag.NULL
        case bool():
            return TypeTag.BOOLEAN
        case int():
            return TypeTag.INTEGER
        case float():
            return TypeTag.FLOAT
        case str():
            return TypeTag.STRING
    if is_container(value):
        return TypeTag.ARRAY
    return type(value).__name__.lower()


def stringify(value: object) -> str:
    """String form of a value, as seen by filters.

    >>> stringify(True), stringify(None), stringify(11.0), stringify(0.5)
    ('1', '', '11', '0.5')
    """
    match value:
        case None | False:
            return ""
        case True:
            return "1"
        case str():
            return value
        case int():
            return str(value)
        case float():
            return _format_float(value, integral_suffix="")
    if is_container(value):
        return json.dumps(_plain(value), separators=(",", ":"), default=str)
    return str(value)


def export_literal(value: object) -> str:
    """Literal rendering of a value for diagnostics.

    >>> export_literal(None), export_literal(False), export_literal("it's")
    ('NULL', 'false', "'it\\\\'s'")
    """
    return _export(value, "")


def _export(value: object, indent: str) -> str:
    match value:
        case None:
            return "NULL"
        case bool():
            return "true" if value else "false"
        case str():
            escaped = value.replace("\\", "\\\\").replace("'", "\\'")
            return f"'{escaped}'"
        case int():
            return str(value)
        case float():
            return _format_float(value, integral_suffix=".0")
    if not is_container(value):
        return _export(str(value), indent)
    lines = ["array ("]
    for key, item in _items(value):
        key_literal = str(key) if isinstance(key, int) else _export(str(key), "")
        if is_container(item):
            nested = _export(item, indent + "  ")
            lines.append(f"{indent}  {key_literal} => \n{indent}  {nested},")
        else:
            lines.append(f"{indent}  {key_literal} => {_export(item, indent)},")
    lines.append(f"{indent})")
    return "\n".join(lines)


def _format_float(value: float, *, integral_suffix: str) -> str:
    if math.isnan(value):
        return "NAN"
    if math.isinf(value):
        return "INF" if value > 0 else "-INF"
    if value.is_integer() and abs(value) < 1e15:
        return f"{int(value)}{integral_suffix}"
    text = repr(value)
    if "e" not in text:
        if abs(value) < 1e15:
            return text
        return _exponent_form(text)
    mantissa, exponent = text.split("e")
    if "." not in mantissa:
        mantissa += ".0"
    exp = int(exponent)
    sign = "-" if exp < 0 else "+"
    return f"{mantissa}E{sign}{abs(exp)}"


def _exponent_form(text: str) -> str:
    """``'1000000000000000.5'`` -> ``'1.0000000000000005E+15'``."""
    sign = "-" if text.startswith("-") else ""
    whole, _, fraction = text.lstrip("-").partition(".")
    digits = (whole + fraction).rstrip("0")
    return f"{sign}{digits[0]}.{digits[1:] or '0'}E+{len(whole) - 1}"


def _items(value: Any) -> list[tuple[Any, Any]]:
    if isinstance(value, Mapping):
        return list(value.items())
    return list(enumerate(value))


def _plain(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {str(k): _plain(v) for k, v in value.items()}
    if is_container(value):
        return [_plain(v) for v in value]
    return value
