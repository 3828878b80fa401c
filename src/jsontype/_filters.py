"""Built-in filters evaluated against the string form of a value.

Each filter is a frozen dataclass with a ``matches(value: str) -> bool``
method, compiled from a filter body by ``compile_builtin()``.

Regex uses ``google-re2`` for guaranteed linear-time matching. RE2 does not
support backreferences or lookahead/lookbehind because they require
backtracking — patterns using them are rejected at compile time.
"""

from __future__ import annotations

import operator
from collections.abc import Callable
from dataclasses import dataclass, field
from functools import lru_cache
from typing import TypeAlias
from urllib.parse import urlsplit

import re2

from jsontype._expression import (
    DELIMITER_PAIRS,
    REGEX_FLAGS,
    MatcherError,
    PatternTooLongError,
)

MAX_REGEX_PATTERN_LENGTH = 4096


class InvalidFilterError(MatcherError):
    """A filter pattern could not be compiled."""


# ═══════════════════════════════════════════════════════════════════════════════
# Patterns
# ═══════════════════════════════════════════════════════════════════════════════

_DATE = re2.compile(
    r"(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})(\.\d+)?(?:Z|(\+|-)([\d|:]*))?"
)

_ATOM = r"[a-z0-9!#$%&'*+/=?^_`{|}~-]+"
_QUOTED = r'"(?:[\x01-\x08\x0b\x0c\x0e-\x1f\x21\x23-\x5b\x5d-\x7f]|\\[\x01-\x7f])*"'
_LABEL = r"(?:xn--)?[a-z0-9]+(?:-[a-z0-9]+)*"
_TLD = r"(?:[a-z][a-z0-9]*|xn--[a-z0-9]+)(?:-[a-z0-9]+)*"
_OCTET = r"(?:25[0-5]|2[0-4][0-9]|1[0-9]{2}|[1-9]?[0-9])"
_IPV4 = rf"{_OCTET}(?:\.{_OCTET}){{3}}"
_H16 = r"[a-f0-9]{1,4}"
_IPV6_LITERAL = (
    rf"IPv6:(?:{_H16}(?::{_H16}){{7}}"
    rf"|(?:{_H16}(?::{_H16}){{0,5}})?::(?:{_H16}(?::{_H16}){{0,5}})?)"
)
_IPV6V4_LITERAL = (
    rf"IPv6:(?:{_H16}(?::{_H16}){{5}}:"
    rf"|(?:{_H16}(?::{_H16}){{0,3}})?::(?:{_H16}(?::{_H16}){{0,3}}:)?){_IPV4}"
)
_EMAIL = re2.compile(
    rf"(?i)(?:{_ATOM}(?:\.{_ATOM})*|{_QUOTED})"
    rf"@(?:(?:{_LABEL}\.){{1,126}}{_TLD}"
    rf"|\[(?:{_IPV6_LITERAL}|{_IPV6V4_LITERAL}|{_IPV4})\])"
)

_SCHEME = re2.compile(r"[a-z][a-z0-9+.-]*")
_HOST_LABEL = r"[a-z0-9_](?:[a-z0-9_-]*[a-z0-9_])?"
_HOST = re2.compile(rf"(?i){_HOST_LABEL}(?:\.{_HOST_LABEL})*\.?")
_IPV6 = re2.compile(r"(?i)[0-9a-f:.]+")
_HOSTLESS_SCHEMES = frozenset({"mailto", "news", "file"})

_NUMBER_PREFIX = re2.compile(r"\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)")
_COMPARISON = re2.compile(r"(>=|<=|>|<)([+-]?[\d.]+)")

_OPERATORS: dict[str, Callable[[float, float], bool]] = {
    ">=": operator.ge,
    "<=": operator.le,
    ">": operator.gt,
    "<": operator.lt,
}


# ═══════════════════════════════════════════════════════════════════════════════
# Filters
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class ExactFilter:
    """``=literal`` — exact string equality."""

    literal: str

    def matches(self, value: str, /) -> bool:
        return value == self.literal


@dataclass(frozen=True, slots=True)
class EmptyFilter:
    """``empty`` — the string form is empty."""

    def matches(self, value: str, /) -> bool:
        return value == ""


@dataclass(frozen=True, slots=True)
class DateFilter:
    """``date`` — ISO-8601 date-time, optional fraction and offset."""

    def matches(self, value: str, /) -> bool:
        return _DATE.fullmatch(value) is not None


@dataclass(frozen=True, slots=True)
class EmailFilter:
    """``email`` — RFC 5322 address syntax with the usual length limits.

    The domain is a host name with labels of at most 63 characters, or a
    bracketed IPv4, IPv6 or IPv4-mapped IPv6 address literal.
    """

    def matches(self, value: str, /) -> bool:
        if len(value) > 254:
            return False
        local, _, domain = value.rpartition("@")
        if len(local) > 64 or _EMAIL.fullmatch(value) is None:
            return False
        if domain.startswith("["):
            return _compressed_groups_fit(domain[1:-1])
        return all(len(label) <= 63 for label in domain.split("."))


def _compressed_groups_fit(literal: str) -> bool:
    # A "::" must stand for at least one group: at most 6 explicit groups,
    # or 4 ahead of an embedded IPv4 address.
    if "::" not in literal:
        return True
    groups = literal[len("IPv6:") :].split(":")
    if "." in groups[-1]:
        return sum(1 for g in groups[:-1] if g) <= 4
    return sum(1 for g in groups if g) <= 6


@dataclass(frozen=True, slots=True)
class UrlFilter:
    """``url`` — an absolute URL.

    Requires a scheme, and a host for every scheme except mailto, news and
    file. Whitespace and non-ASCII characters are rejected.
    """

    def matches(self, value: str, /) -> bool:
        if not value.isascii() or any(ch.isspace() for ch in value):
            return False
        try:
            parts = urlsplit(value)
            parts.port  # noqa: B018 - raises ValueError for a bad port
        except ValueError:
            return False
        if _SCHEME.fullmatch(parts.scheme) is None:
            return False
        if not parts.netloc:
            return parts.scheme in _HOSTLESS_SCHEMES and bool(parts.path)
        host = parts.hostname or ""
        if "[" in parts.netloc:
            return _IPV6.fullmatch(host) is not None
        return _HOST.fullmatch(host) is not None


@dataclass(frozen=True, slots=True)
class ComparisonFilter:
    """``>=N``, ``<=N``, ``>N``, ``<N`` — numeric comparison.

    Both operands are read from their leading numeric prefix; a string with
    no numeric prefix counts as 0.
    """

    op: str
    operand: float
    _compare: Callable[[float, float], bool] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_compare", _OPERATORS[self.op])

    def matches(self, value: str, /) -> bool:
        return self._compare(to_number(value), self.operand)


@dataclass(frozen=True, slots=True)
class RegexFilter:
    """``regex(<delimited>)`` — pattern search.

    The pattern carries its own delimiters (``~a|b~``, ``[xyz]``, ``(xyz)``)
    and optional trailing flags (``i``, ``m``, ``s``, ``U``). Uses search
    (not fullmatch), so anchors must be written explicitly.

    Raises:
        InvalidFilterError: If the delimiters or the pattern are invalid.
    """

    delimited: str
    _compiled: re2.Pattern[str] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_compiled", compile_delimited(self.delimited))

    def matches(self, value: str, /) -> bool:
        return self._compiled.search(value) is not None


BuiltinFilter: TypeAlias = (
    ExactFilter
    | EmptyFilter
    | DateFilter
    | EmailFilter
    | UrlFilter
    | ComparisonFilter
    | RegexFilter
)

_NAMED: dict[str, BuiltinFilter] = {
    "url": UrlFilter(),
    "date": DateFilter(),
    "email": EmailFilter(),
    "empty": EmptyFilter(),
}


@lru_cache(maxsize=1024)
def compile_builtin(body: str) -> BuiltinFilter | None:
    """Compile a filter body into a built-in filter.

    Returns None when the body names no built-in filter.
    """
    if body.startswith("="):
        return ExactFilter(body[1:])
    if body in _NAMED:
        return _NAMED[body]
    if body.startswith("regex(") and body.endswith(")"):
        return RegexFilter(body[len("regex(") : -1])
    m = _COMPARISON.fullmatch(body)
    if m is not None:
        return ComparisonFilter(op=m.group(1), operand=to_number(m.group(2)))
    return None


# ═══════════════════════════════════════════════════════════════════════════════
# Helpers
# ═══════════════════════════════════════════════════════════════════════════════


def to_number(text: str) -> float:
    """Read the leading numeric prefix of ``text`` as a float (0.0 if none)."""
    m = _NUMBER_PREFIX.match(text)
    if m is None:
        return 0.0
    return float(m.group(1))


def compile_delimited(delimited: str) -> re2.Pattern[str]:
    """Compile a delimited pattern such as ``/len\\((.*?)\\)/i``.

    Raises:
        PatternTooLongError: If the pattern exceeds MAX_REGEX_PATTERN_LENGTH.
        InvalidFilterError: If the delimiters, flags or pattern are invalid.
    """
    if len(delimited) > MAX_REGEX_PATTERN_LENGTH:
        raise PatternTooLongError(len(delimited), MAX_REGEX_PATTERN_LENGTH)
    pattern, flags = strip_delimiters(delimited)
    if flags:
        pattern = f"(?{flags}){pattern}"
    try:
        return re2.compile(pattern)
    except re2.error as e:
        msg = f'invalid regex pattern "{delimited}": {e}'
        raise InvalidFilterError(msg) from e


def strip_delimiters(delimited: str) -> tuple[str, str]:
    """Split ``~pattern~flags`` into ``(pattern, flags)``.

    Raises:
        InvalidFilterError: If there is no closing delimiter or the
            trailing flags are not among ``i``, ``m``, ``s``, ``U``.
    """
    if len(delimited) < 2 or delimited[0].isalnum() or delimited[0] in "\\ ":
        msg = f"regex pattern {delimited!r} has no valid delimiter"
        raise InvalidFilterError(msg)
    opening = delimited[0]
    closing = DELIMITER_PAIRS.get(opening, opening)
    if closing != opening:
        end = _matching_close(delimited, opening, closing)
    else:
        end = delimited.rfind(closing)
    if end <= 0:
        msg = f"regex pattern {delimited!r} has no closing delimiter {closing!r}"
        raise InvalidFilterError(msg)
    flags = delimited[end + 1 :]
    if any(ch not in REGEX_FLAGS for ch in flags):
        msg = f"unknown regex flags {flags!r} in {delimited!r}"
        raise InvalidFilterError(msg)
    return delimited[1:end], "".join(dict.fromkeys(flags))


def _matching_close(text: str, opening: str, closing: str) -> int:
    depth = 0
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == opening:
            depth += 1
        elif ch == closing:
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return -1
