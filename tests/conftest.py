"""Conformance fixture loader for jsontype.

Loads YAML fixtures from tests/fixtures/ and turns them into cases for
parametrized testing:

- json_type/*.yaml: one data tree, many (spec, expect) cases
- contains/*.yaml: one haystack, many (needle, expect) cases

``expect`` is ``true``, ``false``, or ``{contains: [...]}`` listing
substrings the diagnostic must include.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pytest
import yaml

from jsontype import FilterRegistry

FIXTURE_DIR = Path(__file__).resolve().parent / "fixtures"


@dataclass
class TypeFixtureCase:
    """A single type-matching case from a conformance fixture."""

    fixture_name: str
    case_name: str
    data: Any
    spec: dict[str, Any]
    expect: bool
    diagnostics: tuple[str, ...] = ()

    @property
    def id(self) -> str:
        return f"{self.fixture_name}/{self.case_name}"


@dataclass
class ContainsFixtureCase:
    """A single containment case from a conformance fixture."""

    fixture_name: str
    case_name: str
    haystack: Any
    needle: Any
    expect: bool

    @property
    def id(self) -> str:
        return f"{self.fixture_name}/{self.case_name}"


# ─── Fixture loading ────────────────────────────────────────────────────────


def _documents(subdir: str) -> list[dict[str, Any]]:
    docs: list[dict[str, Any]] = []
    for yaml_file in sorted((FIXTURE_DIR / subdir).glob("*.yaml")):
        with yaml_file.open(encoding="utf-8") as f:
            docs.extend(doc for doc in yaml.safe_load_all(f) if doc is not None)
    return docs


def load_type_fixtures() -> list[TypeFixtureCase]:
    """Load all type-matching fixtures."""
    cases: list[TypeFixtureCase] = []
    for doc in _documents("json_type"):
        for case in doc["cases"]:
            expect = case["expect"]
            diagnostics: tuple[str, ...] = ()
            if isinstance(expect, dict):
                diagnostics = tuple(expect["contains"])
                expect = False
            cases.append(
                TypeFixtureCase(
                    fixture_name=doc["name"],
                    case_name=case["name"],
                    data=case.get("data", doc.get("data")),
                    spec=case["spec"],
                    expect=expect,
                    diagnostics=diagnostics,
                )
            )
    return cases


def load_contains_fixtures() -> list[ContainsFixtureCase]:
    """Load all containment fixtures."""
    cases: list[ContainsFixtureCase] = []
    for doc in _documents("contains"):
        for case in doc["cases"]:
            cases.append(
                ContainsFixtureCase(
                    fixture_name=doc["name"],
                    case_name=case["name"],
                    haystack=case.get("haystack", doc.get("haystack")),
                    needle=case["needle"],
                    expect=case["expect"],
                )
            )
    return cases


# ─── Shared fixtures ────────────────────────────────────────────────────────


@pytest.fixture
def filters() -> FilterRegistry:
    """A fresh custom filter registry per test."""
    return FilterRegistry()


def pytest_generate_tests(metafunc: pytest.Metafunc) -> None:
    """Parametrize ``type_case`` and ``contains_case`` from the YAML fixtures."""
    if "type_case" in metafunc.fixturenames:
        type_cases = load_type_fixtures()
        metafunc.parametrize("type_case", type_cases, ids=[c.id for c in type_cases])
    if "contains_case" in metafunc.fixturenames:
        contains_cases = load_contains_fixtures()
        metafunc.parametrize(
            "contains_case", contains_cases, ids=[c.id for c in contains_cases]
        )
