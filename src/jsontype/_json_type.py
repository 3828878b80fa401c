"""JsonType — checks a data tree against a specification of type expressions.

Evaluation semantics:
- Fields are checked in specification order; the first failing field of a
  record produces its diagnostic
- Alternatives are tried left to right, but only those whose type name
  equals the value's runtime type; the first one whose filters all pass
  accepts the field
- Filters of an alternative are ANDed with short-circuit, so
  ``integer:>5:<12`` is a range
- A collection (list of records) is checked element by element and every
  failure is reported, one per line

Mismatches are returned as strings, never raised; only malformed
specifications and uncompilable filters raise.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Literal

from jsontype._expression import Filter, TypeExpression, parse_filter
from jsontype._filters import compile_builtin
from jsontype._registry import FilterRegistry
from jsontype._spec import Key, Specification, parse_specification
from jsontype._types import export_literal, is_container, runtime_type_name, stringify

if TYPE_CHECKING:
    from jsontype._types import Value

logger = logging.getLogger(__name__)

_MISSING = object()


@dataclass(frozen=True, slots=True)
class JsonType:
    """A data tree to be checked against type specifications.

    ``data`` is a decoded JSON object, or a list of objects (a collection).
    ``filters`` supplies the custom filters available to expressions.

    >>> JsonType({"name": "davert", "id": 1}).matches(
    ...     {"name": "string:!empty", "id": "integer:>0|string:>0"}
    ... )
    True
    """

    data: Value
    filters: FilterRegistry = field(default_factory=FilterRegistry)

    def matches(self, spec: Mapping[Key, Any] | Specification) -> Literal[True] | str:
        """Return True, or a diagnostic describing every failing record.

        Raises:
            SpecificationError: If ``spec`` is malformed.
        """
        parsed = parse_specification(spec)
        records = _collection_records(self.data)
        if records is None:
            return self._compare(self.data, parsed)

        failures = [
            result
            for record in records
            if (result := self._compare(record, parsed)) is not True
        ]
        if failures:
            return "\n".join(failures)
        return True

    def _compare(self, data: Any, spec: Specification) -> Literal[True] | str:
        for key, node in spec:
            value = _lookup(data, key)
            if value is _MISSING:
                return f"Key `{key}` doesn't exist in {_encode(data)}"

            if isinstance(node, Specification):
                result = self._compare(value, node)
                if result is not True:
                    return result
                continue

            if not self.matches_expression(node, value):
                logger.debug("field %r did not match %r", key, node.text)
                return f"`{key}: {export_literal(value)}` is of type `{node.text}`"
        return True

    def matches_expression(self, expression: TypeExpression, value: Any) -> bool:
        """Check a single value against a parsed type expression."""
        type_name = runtime_type_name(value)
        text = stringify(value)
        for alternative in expression.alternatives:
            if alternative.type_name != type_name:
                continue
            if all(
                evaluate_filter(f, text, self.filters) for f in alternative.filters
            ):
                return True
        return False


def matches(
    data: Value,
    spec: Mapping[Key, Any] | Specification,
    filters: FilterRegistry | None = None,
) -> Literal[True] | str:
    """Check ``data`` against ``spec``; shorthand for ``JsonType(...).matches``."""
    return JsonType(data, filters if filters is not None else FilterRegistry()).matches(spec)


def match_filter(
    filter_: str | Filter, value: str, filters: FilterRegistry | None = None
) -> bool:
    """Evaluate one filter (``"!empty"``, ``">=10"``, ``"regex(~^a~)"``) on a string."""
    parsed = parse_filter(filter_) if isinstance(filter_, str) else filter_
    return evaluate_filter(parsed, value, filters)


def evaluate_filter(
    filter_: Filter, value: str, filters: FilterRegistry | None = None
) -> bool:
    """Custom filters first, then built-ins; an unknown filter is False."""
    result = filters.apply(filter_.body, value) if filters is not None else None
    if result is None:
        builtin = compile_builtin(filter_.body)
        result = builtin.matches(value) if builtin is not None else False
    return result != filter_.negated


# ── Data access ────────────────────────────────────────────────────────────


def _collection_records(data: Any) -> list[Any] | None:
    """Return the records of a collection, or None for a single record."""
    if isinstance(data, Mapping):
        first = data.get(0, data.get("0", _MISSING))
        if first is not _MISSING and is_container(first):
            return list(data.values())
        return None
    if is_container(data) and len(data) > 0 and is_container(data[0]):
        return list(data)
    return None


def _lookup(data: Any, key: Key) -> Any:
    if isinstance(data, Mapping):
        if key in data:
            return data[key]
        # JSON object keys are strings; allow integer-looking keys either way.
        if isinstance(key, int):
            return data.get(str(key), _MISSING)
        if key.removeprefix("-").isdecimal():
            return data.get(int(key), _MISSING)
        return _MISSING
    if isinstance(data, Sequence) and not isinstance(data, (str, bytes)):
        index = key if isinstance(key, int) else int(key) if key.isdecimal() else None
        if index is not None and 0 <= index < len(data):
            return data[index]
    return _MISSING


def _encode(data: Any) -> str:
    return json.dumps(data, separators=(",", ":"), default=str)
