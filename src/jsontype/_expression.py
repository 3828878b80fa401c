"""Type expression grammar — parsing ``"integer:>0|string:!empty"`` into an AST.

Grammar::

    Expr       := Alt ('|' Alt)*
    Alt        := TypeName (':' Filter)*
    Filter     := ['!'] FilterBody

Regex filter bodies are lifted out before splitting so that ``|`` and ``:``
inside a pattern are never taken for separators:

    'string:regex(~a|b~)|null'
        -> 'string:regex($$0)|null'      (bodies = ['~a|b~'])
        -> [Alternative('string', (Filter('regex(~a|b~)'),)),
            Alternative('null', ())]

Parsed expressions are immutable and cached by their source text.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

MAX_EXPRESSION_LENGTH = 8192

# Bracket-style delimiters close with their partner; anything else closes with itself.
DELIMITER_PAIRS = {"(": ")", "{": "}", "[": "]", "<": ">"}

REGEX_FLAGS = frozenset("imsU")

_PLACEHOLDER = "$$"


class MatcherError(Exception):
    """Base class for every error raised by jsontype."""


class ExpressionError(MatcherError):
    """A type expression could not be parsed."""


class PatternTooLongError(MatcherError):
    """An expression or pattern exceeds its length limit."""

    def __init__(self, length: int, max_: int) -> None:
        self.length = length
        self.max = max_
        super().__init__(f"pattern length {length} exceeds maximum {max_}")


@dataclass(frozen=True, slots=True)
class Filter:
    """A single filter of an alternative.

    ``body`` is the trimmed filter text with negation removed and any regex
    body restored. ``negated`` is True for an odd number of leading ``!``.
    """

    body: str
    negated: bool = False


@dataclass(frozen=True, slots=True)
class Alternative:
    """One ``typeName:filter:filter`` segment of an expression."""

    type_name: str
    filters: tuple[Filter, ...] = ()


@dataclass(frozen=True, slots=True)
class TypeExpression:
    """A parsed type expression. ``text`` is kept verbatim for diagnostics."""

    text: str
    alternatives: tuple[Alternative, ...]

    def __str__(self) -> str:
        return self.text


def parse_type_expression(text: str) -> TypeExpression:
    """Parse a type expression string.

    Raises:
        PatternTooLongError: If the expression exceeds MAX_EXPRESSION_LENGTH.
        ExpressionError: If an alternative has no type name.
    """
    if len(text) > MAX_EXPRESSION_LENGTH:
        raise PatternTooLongError(len(text), MAX_EXPRESSION_LENGTH)
    return _parse_cached(text)


@lru_cache(maxsize=1024)
def _parse_cached(text: str) -> TypeExpression:
    masked, bodies = extract_regex_bodies(text)
    alternatives = []
    for segment in split_outside_parens(masked, "|"):
        head, *raw_filters = split_outside_parens(segment, ":")
        type_name = head.strip().lower()
        if not type_name:
            msg = f"missing type name in expression {text!r}"
            raise ExpressionError(msg)
        filters = tuple(
            parse_filter(_restore_regex_body(raw, bodies)) for raw in raw_filters
        )
        alternatives.append(Alternative(type_name=type_name, filters=filters))
    return TypeExpression(text=text, alternatives=tuple(alternatives))


def parse_filter(text: str) -> Filter:
    """Parse one filter, folding leading ``!`` into the negation flag."""
    negated = False
    body = text.strip()
    while body.startswith("!"):
        negated = not negated
        body = body[1:].strip()
    return Filter(body=body, negated=negated)


# ── Regex body extraction ──────────────────────────────────────────────────


def extract_regex_bodies(text: str) -> tuple[str, list[str]]:
    """Replace every ``:regex(<delimited>)`` body with a ``$$N`` placeholder.

    Returns the masked text and the extracted bodies in placeholder order.
    Bodies without a recognisable closing delimiter are left in place.
    """
    bodies: list[str] = []
    out: list[str] = []
    pos = 0
    while True:
        body_start = _find_regex_open(text, pos)
        if body_start is None:
            break
        body_end = find_delimited_end(text, body_start)
        if body_end is None:
            out.append(text[pos:body_start])
            pos = body_start
            continue
        out.append(text[pos:body_start])
        out.append(f"{_PLACEHOLDER}{len(bodies)}")
        bodies.append(text[body_start:body_end])
        pos = body_end
    out.append(text[pos:])
    return "".join(out), bodies


def _find_regex_open(text: str, pos: int) -> int | None:
    """Locate the next ``:[!]regex(`` at or after pos; return the body start."""
    while True:
        colon = text.find(":", pos)
        if colon < 0:
            return None
        i = colon + 1
        while i < len(text) and (text[i] == "!" or text[i].isspace()):
            i += 1
        if text.startswith("regex(", i):
            return i + len("regex(")
        pos = colon + 1


def find_delimited_end(text: str, start: int) -> int | None:
    """Return the index just past a delimited pattern (and its flags).

    ``text[start]`` is the opening delimiter. The pattern ends at a closing
    delimiter followed by optional flags and a ``)``. For bracket pairs the
    nesting depth must return to zero; self-paired delimiters end at the
    first unescaped occurrence that is followed by ``)``.
    """
    if start >= len(text):
        return None
    opening = text[start]
    closing = DELIMITER_PAIRS.get(opening, opening)
    paired = closing != opening
    depth = 1
    i = start + 1
    while i < len(text):
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if paired and ch == opening:
            depth += 1
        elif ch == closing:
            depth -= 1
            if depth == 0:
                end = _skip_flags(text, i + 1)
                if text[end : end + 1] == ")":
                    return end
                if paired:
                    return None
                depth = 1
        i += 1
    return None


def _skip_flags(text: str, i: int) -> int:
    while i < len(text) and text[i] in REGEX_FLAGS:
        i += 1
    return i


def _restore_regex_body(raw: str, bodies: list[str]) -> str:
    stripped = raw.strip()
    head, sep, rest = stripped.partition("regex(" + _PLACEHOLDER)
    if not sep or not rest.endswith(")") or not rest[:-1].isdigit():
        return raw
    index = int(rest[:-1])
    if index >= len(bodies):
        return raw
    return f"{head}regex({bodies[index]})"


# ── Separator splitting ────────────────────────────────────────────────────


def split_outside_parens(text: str, sep: str) -> list[str]:
    """Split on ``sep`` unless it sits inside an argument list.

    A separator is protected when the text after it reaches a ``)`` before
    any ``]`` or ``(``, i.e. it is inside the parentheses of ``name(...)``.
    """
    parts: list[str] = []
    last = 0
    for i, ch in enumerate(text):
        if ch == sep and not _inside_parens(text, i + 1):
            parts.append(text[last:i])
            last = i + 1
    parts.append(text[last:])
    return parts


def _inside_parens(text: str, start: int) -> bool:
    for ch in text[start:]:
        if ch == ")":
            return True
        if ch in "](":
            return False
    return False
