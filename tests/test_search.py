"""Tests for search: substring matching over name, description and author."""

import asyncio

import pytest

from plugdesk.plugins import Plugin, SearchIndex, filter_plugins, has_query

PLUGINS = [
    Plugin(id="a", name="Foo", author="Ada Lovelace", description="Formats Python code"),
    Plugin(id="b", name="Bar", author="Bob", description="Lints YAML"),
    Plugin(id="c", name="Baz Formatter", author="Cleo", description="Another formatter"),
    Plugin(id="d", name="Qux", author="FOOBAR Inc", description=""),
]


class TestFilterPlugins:
    def test_scenario_prefix_of_name(self):
        registry = [Plugin(id="a", name="Foo"), Plugin(id="b", name="Bar")]
        assert [p.id for p in filter_plugins(registry, "fo")] == ["a"]

    @pytest.mark.parametrize("term", ["", "   ", "\t\n"])
    def test_blank_term_matches_nothing(self, term):
        assert filter_plugins(PLUGINS, term) == []
        assert has_query(term) is False

    def test_case_insensitive(self):
        assert [p.id for p in filter_plugins(PLUGINS, "YAML")] == ["b"]
        assert [p.id for p in filter_plugins(PLUGINS, "yaml")] == ["b"]

    def test_matches_author(self):
        assert [p.id for p in filter_plugins(PLUGINS, "lovelace")] == ["a"]

    def test_preserves_registry_order(self):
        assert [p.id for p in filter_plugins(PLUGINS, "foo")] == ["a", "d"]
        assert [p.id for p in filter_plugins(PLUGINS, "format")] == ["a", "c"]

    def test_no_match(self):
        assert filter_plugins(PLUGINS, "zzz") == []

    def test_term_is_not_trimmed(self):
        assert [p.id for p in filter_plugins(PLUGINS, "baz ")] == ["c"]
        assert filter_plugins(PLUGINS, " foo") == []

    @pytest.mark.parametrize("term", ["a", "o", "FOR", "b", "inc", "er"])
    def test_results_are_ordered_matching_subset(self, term):
        results = filter_plugins(PLUGINS, term)
        positions = [PLUGINS.index(p) for p in results]
        assert positions == sorted(positions)
        needle = term.lower()
        for p in results:
            assert any(needle in f.lower() for f in (p.name, p.description, p.author))
        missed = [p for p in PLUGINS if p not in results]
        for p in missed:
            assert not any(needle in f.lower() for f in (p.name, p.description, p.author))


class TestSearchIndex:
    def test_reads_current_snapshot(self, store, host):
        index = SearchIndex(store)
        assert index.filter("foo") == []
        asyncio.run(store.refresh())
        assert [p.id for p in index.filter("foo")] == ["a"]
        host.plugins = []
        asyncio.run(store.refresh())
        assert index.filter("foo") == []

    def test_does_not_mutate_store(self, loaded):
        before = loaded.plugins
        SearchIndex(loaded).filter("b")
        assert loaded.plugins == before
