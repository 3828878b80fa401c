"""Containment matching — is one data tree present inside another?

Both trees are viewed as keyed containers (a list is keyed by index).
A container is *sequential* when it is non-empty and its keys are exactly
``0..n-1`` in order; anything else, including an empty container, is
*associative*.

- sequential vs sequential: every needle element must be claimed by a
  distinct haystack element, first-fit in iteration order, no backtracking
- otherwise: common keys must hold contained (or equal) values; with no
  common keys at all, the needle may sit anywhere below the haystack

Scalars compare with numeric coercion: ints and floats are compared through
their string form, so ``1`` equals ``"1"``. Keys are never coerced.

Nesting is limited only by the interpreter's recursion limit: trees deeper
than a quarter of ``sys.getrecursionlimit()`` raise DepthExceededError
instead of RecursionError.
"""

from __future__ import annotations

import sys
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from jsontype._spec import DepthExceededError
from jsontype._types import is_container, stringify

# A level that shares keys with the haystack but does not contain the needle.
_MISMATCH: Any = object()


@dataclass(frozen=True, slots=True)
class ContainmentMatcher:
    """Checks needles against a fixed haystack.

    >>> ContainmentMatcher({"a": {"url": "http://x", "id": 1}}).contains_array({"url": "http://x"})
    True
    """

    haystack: Any

    def __post_init__(self) -> None:
        if not is_container(self.haystack):
            msg = f"haystack must be a mapping or a list, got {type(self.haystack).__name__}"
            raise TypeError(msg)

    def contains_array(self, needle: Any) -> bool:
        """True iff ``needle`` is structurally present in the haystack.

        The intersection rebuilt from the haystack must equal the needle
        itself; a partial overlap is not containment.
        """
        if not is_container(needle):
            msg = f"needle must be a mapping or a list, got {type(needle).__name__}"
            raise TypeError(msg)
        result = _intersect(needle, self.haystack, depth=1)
        return _same(result, needle)


def contains(needle: Any, haystack: Any) -> bool:
    """True iff ``needle`` is structurally present in ``haystack``."""
    return ContainmentMatcher(haystack).contains_array(needle)


def is_equal_value(a: Any, b: Any) -> bool:
    """Scalar equality with numbers compared through their string form."""
    a, b = _coerce(a), _coerce(b)
    return type(a) is type(b) and a == b


def _max_depth() -> int:
    # Each level costs two frames (_intersect and the level helper); keep
    # half of the interpreter's budget free for the caller's own stack.
    return sys.getrecursionlimit() // 4


def _coerce(value: Any) -> Any:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return stringify(value)
    return value


def _intersect(needle: Any, haystack: Any, depth: int) -> Any:
    """Rebuild the part of ``needle`` found in ``haystack``.

    Returns None when either side is not a container, _MISMATCH when an
    associative level fails, otherwise a dict keyed like the needle.
    """
    if not (is_container(needle) and is_container(haystack)):
        return None
    if depth > (limit := _max_depth()):
        raise DepthExceededError(depth, limit)

    n, h = _keyed(needle), _keyed(haystack)
    if _is_sequential(n) and _is_sequential(h):
        return _sequential_intersect(n, h, depth)
    return _associative_intersect(n, h, depth)


def _sequential_intersect(
    needle: dict[Any, Any], haystack: dict[Any, Any], depth: int
) -> dict[Any, Any]:
    result: dict[Any, Any] = {}
    claimed: set[Any] = set()
    for key1, value1 in needle.items():
        for key2, value2 in haystack.items():
            if key2 in claimed:
                continue
            found = _intersect(value1, value2, depth + 1)
            if found is not None and _same(found, value1):
                result[key1] = found
                claimed.add(key2)
                break
            if is_equal_value(value1, value2):
                result[key1] = value1
                claimed.add(key2)
                break
    return result


def _associative_intersect(
    needle: dict[Any, Any], haystack: dict[Any, Any], depth: int
) -> Any:
    common = [key for key in needle if key in haystack]
    result: dict[Any, Any] = {}
    for key in common:
        found = _intersect(needle[key], haystack[key], depth + 1)
        if found is not None:
            result[key] = found
        elif is_equal_value(needle[key], haystack[key]):
            result[key] = needle[key]

    if not common:
        for value in haystack.values():
            found = _intersect(needle, value, depth + 1)
            if found and found is not _MISMATCH and _same(found, needle):
                return found

    if len(result) < min(len(needle), len(haystack)):
        return _MISMATCH
    return result


def _keyed(value: Any) -> dict[Any, Any]:
    if isinstance(value, Mapping):
        return dict(value)
    return dict(enumerate(value))


def _is_sequential(container: dict[Any, Any]) -> bool:
    return bool(container) and list(container) == list(range(len(container)))


def _same(result: Any, original: Any) -> bool:
    return _normalize(result) == _normalize(original)


def _normalize(value: Any) -> Any:
    if is_container(value):
        return {key: _normalize(item) for key, item in _keyed(value).items()}
    return value
