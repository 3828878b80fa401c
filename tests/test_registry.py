"""Tests for the custom filter registry."""

from __future__ import annotations

import threading

import pytest

from jsontype import CustomFilter, FilterRegistry, InvalidFilterError


class TestFilterRegistry:
    def test_add_and_introspect(self, filters: FilterRegistry) -> None:
        filters.add_custom_filter("slug", lambda value, args: True)
        filters.add_custom_filter("/len\\((\\d+)\\)/", lambda value, args: True)

        assert len(filters) == 2
        assert "slug" in filters
        assert "missing" not in filters
        assert filters.names() == ["slug", "/len\\((\\d+)\\)/"]

    def test_chaining(self) -> None:
        filters = (
            FilterRegistry()
            .add_custom_filter("a", lambda value, args: True)
            .add_custom_filter("b", lambda value, args: False)
        )
        assert filters.names() == ["a", "b"]

    def test_replace_keeps_position(self, filters: FilterRegistry) -> None:
        filters.add_custom_filter("a", lambda value, args: False)
        filters.add_custom_filter("b", lambda value, args: False)
        filters.add_custom_filter("a", lambda value, args: True)

        assert filters.names() == ["a", "b"]
        assert filters.apply("a", "x") is True

    def test_clean(self, filters: FilterRegistry) -> None:
        filters.add_custom_filter("slug", lambda value, args: True)
        filters.clean_custom_filters()

        assert len(filters) == 0
        assert filters.apply("slug", "x") is None

    def test_apply_returns_none_when_nothing_applies(self, filters: FilterRegistry) -> None:
        filters.add_custom_filter("slug", lambda value, args: True)
        assert filters.apply("url", "x") is None

    def test_first_applicable_wins(self, filters: FilterRegistry) -> None:
        filters.add_custom_filter("/^size/", lambda value, args: False)
        filters.add_custom_filter("size", lambda value, args: True)
        assert filters.apply("size", "x") is False

    def test_concurrent_registration(self, filters: FilterRegistry) -> None:
        def register(prefix: str) -> None:
            for i in range(100):
                filters.add_custom_filter(f"{prefix}{i}", lambda value, args: True)

        threads = [threading.Thread(target=register, args=(p,)) for p in "abcd"]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(filters) == 400


class TestCustomFilter:
    def test_exact_name_gets_no_args(self) -> None:
        seen: list[tuple[str, tuple[str, ...]]] = []

        def record(value: str, args: tuple[str, ...]) -> bool:
            seen.append((value, tuple(args)))
            return True

        entry = CustomFilter("slug", record)
        assert entry.apply("slug", "have-a-test") is True
        assert seen == [("have-a-test", ())]

    def test_pattern_passes_groups(self) -> None:
        seen: list[tuple[str, ...]] = []

        def record(value: str, args: tuple[str, ...]) -> bool:
            seen.append(tuple(args))
            return True

        entry = CustomFilter(r"/between\((\d+),(\d+)\)(x)?/", record)
        assert entry.apply("between(1,5)", "3") is True
        assert seen == [("1", "5", "")]

    def test_pattern_without_match(self) -> None:
        entry = CustomFilter(r"/len\((\d+)\)/", lambda value, args: True)
        assert entry.apply("size(3)", "abc") is None

    def test_truthy_result_coerced_to_bool(self) -> None:
        entry = CustomFilter("count", lambda value, args: len(value))
        assert entry.apply("count", "abc") is True
        assert entry.apply("count", "") is False

    def test_invalid_pattern_raises(self) -> None:
        with pytest.raises(InvalidFilterError):
            CustomFilter("/(unclosed/", lambda value, args: True)
