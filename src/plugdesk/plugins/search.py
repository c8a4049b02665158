"""Search: case-insensitive substring filter over the installed plugins."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

from .models import Plugin

if TYPE_CHECKING:
    from .registry import RegistryStore

SEARCH_FIELDS = ("name", "description", "author")


def has_query(term: str) -> bool:
    return bool(term and term.strip())


def matches(plugin: Plugin, term: str) -> bool:
    needle = term.casefold()
    return any(needle in getattr(plugin, f).casefold() for f in SEARCH_FIELDS)


def filter_plugins(plugins: Iterable[Plugin], term: str) -> list[Plugin]:
    """Plugins whose name, description or author contain *term*, in input order.

    A blank term matches nothing.
    """
    if not has_query(term):
        return []
    return [p for p in plugins if matches(p, term)]


class SearchIndex:
    """Stateless view that filters the store's current snapshot on every call."""

    def __init__(self, store: RegistryStore):
        self._store = store

    def filter(self, term: str) -> list[Plugin]:
        return filter_plugins(self._store.plugins, term)
