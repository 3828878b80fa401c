"""Custom filter registry.

A FilterRegistry is owned by the caller and injected into JsonType, so
filters registered by one test run never leak into another:

    filters = FilterRegistry()
    filters.add_custom_filter("slug", lambda value, args: " " not in value)
    filters.add_custom_filter(r"/len\\((.*?)\\)/", lambda value, args: len(value) == int(args[0]))

    JsonType(data, filters).matches({"slug": "string:slug:len(11)"})

Two kinds of entries:
- plain names match the whole filter body exactly and get empty ``args``
- names starting with ``/`` are delimited regexes searched against the filter
  body; captured groups are passed as ``args``
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from jsontype._filters import compile_delimited

if TYPE_CHECKING:
    import re2

    from jsontype._types import FilterPredicate

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CustomFilter:
    """A registered filter predicate.

    Raises:
        InvalidFilterError: If a ``/pattern/`` name does not compile.
    """

    name: str
    predicate: FilterPredicate
    _pattern: re2.Pattern[str] | None = field(init=False, repr=False)

    def __post_init__(self) -> None:
        pattern = compile_delimited(self.name) if self.name.startswith("/") else None
        object.__setattr__(self, "_pattern", pattern)

    def apply(self, body: str, value: str) -> bool | None:
        """Evaluate against a filter body; None if this entry does not apply."""
        if self._pattern is not None:
            m = self._pattern.search(body)
            if m is not None:
                args = tuple(g if g is not None else "" for g in m.groups())
                return bool(self.predicate(value, args))
        if body == self.name:
            return bool(self.predicate(value, ()))
        return None


class FilterRegistry:
    """Mutable, caller-owned set of custom filters.

    Entries are consulted in registration order before the built-in filters.
    Registering an existing name replaces it in place. Safe to share between
    threads.
    """

    def __init__(self) -> None:
        self._filters: dict[str, CustomFilter] = {}
        self._lock = threading.Lock()

    def add_custom_filter(self, name: str, predicate: FilterPredicate) -> FilterRegistry:
        """Register a filter by exact name or by ``/pattern/``."""
        entry = CustomFilter(name=name, predicate=predicate)
        with self._lock:
            self._filters[name] = entry
        logger.debug("registered custom filter %r", name)
        return self

    def clean_custom_filters(self) -> None:
        """Remove every registered filter."""
        with self._lock:
            self._filters.clear()
        logger.debug("cleared custom filters")

    def apply(self, body: str, value: str) -> bool | None:
        """Evaluate the first applicable custom filter.

        Returns None when no registered filter applies to ``body``.
        """
        with self._lock:
            entries = tuple(self._filters.values())
        for entry in entries:
            result = entry.apply(body, value)
            if result is not None:
                return result
        return None

    def names(self) -> list[str]:
        """Registered filter names, in registration order."""
        with self._lock:
            return list(self._filters)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._filters

    def __len__(self) -> int:
        with self._lock:
            return len(self._filters)

    def __repr__(self) -> str:
        return f"FilterRegistry({self.names()!r})"
