"""Registry store: the in-memory plugin list and enablement map."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Iterator

from .models import Plugin

if TYPE_CHECKING:
    from .host import PluginHost, PluginRecord

logger = logging.getLogger(__name__)


def _to_plugins(records: list[PluginRecord]) -> tuple[Plugin, ...]:
    plugins: list[Plugin] = []
    seen: set[str] = set()
    for record in records:
        plugin = record if isinstance(record, Plugin) else Plugin.from_dict(record)
        if plugin.id in seen:
            logger.warning(f"Host reported duplicate plugin id '{plugin.id}', ignoring it")
            continue
        seen.add(plugin.id)
        plugins.append(plugin)
    return tuple(plugins)


class RegistryStore:
    """Authoritative snapshot of installed plugins, refreshed from the host.

    The plugin list is only ever replaced wholesale. The enablement map is
    merged: keys the host reports win, except keys pinned by an in-flight
    toggle; keys the host omits are kept.
    """

    def __init__(self, host: PluginHost):
        self._host = host
        self._plugins: tuple[Plugin, ...] = ()
        self._enabled: dict[str, bool] = {}
        self._pinned: dict[str, int] = {}
        self._refreshing = 0
        self._loaded = False

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def plugins(self) -> tuple[Plugin, ...]:
        return self._plugins

    @property
    def enabled(self) -> dict[str, bool]:
        return dict(self._enabled)

    @property
    def loading(self) -> bool:
        return self._refreshing > 0

    @property
    def loaded(self) -> bool:
        return self._loaded

    def find(self, plugin_id: str) -> Plugin | None:
        for plugin in self._plugins:
            if plugin.id == plugin_id:
                return plugin
        return None

    def is_enabled(self, plugin_id: str) -> bool:
        return self._enabled.get(plugin_id, False)

    def __len__(self) -> int:
        return len(self._plugins)

    def __iter__(self) -> Iterator[Plugin]:
        return iter(self._plugins)

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------

    async def refresh(self) -> bool:
        """Pull the plugin list and enablement map from the host.

        Returns False (keeping the previous snapshot) if either call fails.
        """
        self._refreshing += 1
        try:
            records = list(await self._host.list_plugins() or [])
            enabled = dict(await self._host.get_enabled_plugins() or {})
            plugins = _to_plugins(records)
        except Exception:
            logger.exception("Failed to load plugins")
            return False
        finally:
            self._refreshing -= 1

        merged = dict(self._enabled)
        for plugin_id, value in enabled.items():
            if plugin_id not in self._pinned:
                merged[plugin_id] = bool(value)
        self._plugins = plugins
        self._enabled = merged
        self._loaded = True
        logger.debug(f"Loaded {len(plugins)} plugin(s)")
        return True

    # ------------------------------------------------------------------
    # Controller-only writes
    # ------------------------------------------------------------------

    def set_enabled(self, plugin_id: str, value: bool) -> None:
        self._enabled[plugin_id] = value

    @contextmanager
    def pinned(self, plugin_id: str) -> Iterator[None]:
        """Keep refreshes from overwriting *plugin_id*'s entry while held."""
        self._pinned[plugin_id] = self._pinned.get(plugin_id, 0) + 1
        try:
            yield
        finally:
            count = self._pinned.pop(plugin_id) - 1
            if count:
                self._pinned[plugin_id] = count
