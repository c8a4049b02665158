"""Filesystem plugin host: install, uninstall, reload, unpacked dirs, enablement.

Installed plugins are copied into ``<data_dir>/plugins/<id>/``. Unpacked
(development) plugins are loaded in place from the paths listed in
``unpacked.json``. Enablement lives in ``settings.json`` under
``enabledPlugins``. ``list_plugins`` reports the snapshot taken by the last
``reload``.
"""

from __future__ import annotations

import asyncio
import json
import logging
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

from plugdesk.core.utils import slugify
from plugdesk.plugins.models import ALREADY_INSTALLED, Plugin

if TYPE_CHECKING:
    from plugdesk.core.config import Config

logger = logging.getLogger(__name__)

MANIFEST_NAME = "plugin.json"
INSTALL_META_NAME = "_install_meta.json"


def _read_json(path: Path, default: Any) -> Any:
    if not path.exists():
        return default
    try:
        return json.loads(path.read_text())
    except (json.JSONDecodeError, OSError):
        return default


def _write_json(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2) + "\n")


def read_manifest(plugin_root: Path) -> dict | None:
    """Parse ``plugin.json`` in *plugin_root*. None if missing, invalid or nameless."""
    if not plugin_root.is_dir():
        return None
    data = _read_json(plugin_root / MANIFEST_NAME, None)
    if not isinstance(data, dict) or not data.get("name"):
        return None
    return data


def plugin_id_for(manifest: dict) -> str:
    return str(manifest.get("id") or slugify(str(manifest["name"])))


def is_valid_plugin_id(plugin_id: str) -> bool:
    """True if *plugin_id* is usable as a single directory name under plugins/."""
    return (
        bool(plugin_id)
        and plugin_id not in (".", "..")
        and "\\" not in plugin_id
        and Path(plugin_id).name == plugin_id
    )


def load_plugin(plugin_root: Path) -> Plugin | None:
    manifest = read_manifest(plugin_root)
    if manifest is None:
        return None
    plugin_id = plugin_id_for(manifest)
    if not is_valid_plugin_id(plugin_id):
        logger.warning(f"{plugin_root}: plugin id {plugin_id!r} is not a valid directory name")
        return None
    return Plugin.from_dict({**manifest, "id": plugin_id})


class LocalPluginHost:
    """Plugin host backed by the data directory."""

    def __init__(self, config: Config):
        self.config = config
        self._snapshot: list[Plugin] = []

    # -- storage helpers (blocking; run via asyncio.to_thread) ----------

    def _unpacked_dirs(self) -> list[Path]:
        data = _read_json(self.config.unpacked_path, [])
        return [Path(p) for p in data if isinstance(p, str)] if isinstance(data, list) else []

    def _save_unpacked_dirs(self, dirs: list[Path]) -> None:
        _write_json(self.config.unpacked_path, [str(d) for d in dirs])

    def _read_enabled(self) -> dict[str, bool]:
        data = _read_json(self.config.settings_path, {})
        enabled = data.get("enabledPlugins", {}) if isinstance(data, dict) else {}
        return {k: bool(v) for k, v in enabled.items()} if isinstance(enabled, dict) else {}

    def _write_enabled(self, plugin_id: str, value: bool | None) -> None:
        path = self.config.settings_path
        data = _read_json(path, {})
        if not isinstance(data, dict):
            data = {}
        enabled = data.get("enabledPlugins", {})
        if not isinstance(enabled, dict):
            enabled = {}
        if value is None:
            enabled.pop(plugin_id, None)
        else:
            enabled[plugin_id] = value
        data["enabledPlugins"] = enabled
        _write_json(path, data)

    def _scan(self) -> list[Plugin]:
        plugins: list[Plugin] = []
        seen: set[str] = set()
        plugins_dir = self.config.plugins_dir
        installed = sorted(d for d in plugins_dir.iterdir() if d.is_dir()) if plugins_dir.is_dir() else []
        for d in installed + self._unpacked_dirs():
            plugin = load_plugin(d)
            if plugin is None:
                logger.warning(f"Skipping {d}: no valid {MANIFEST_NAME}")
                continue
            if plugin.id in seen:
                logger.warning(f"Skipping {d}: plugin id '{plugin.id}' already loaded")
                continue
            seen.add(plugin.id)
            plugins.append(plugin)
        return plugins

    def _known_ids(self) -> set[str]:
        return {p.id for p in self._scan()}

    def _install(self, path: str) -> bool | str:
        source = Path(path).expanduser().resolve()
        manifest = read_manifest(source)
        if manifest is None:
            logger.info(f"{source} is not a plugin directory")
            return False
        plugin_id = plugin_id_for(manifest)
        if not is_valid_plugin_id(plugin_id):
            logger.warning(f"{source}: plugin id {plugin_id!r} is not a valid directory name")
            return False
        if plugin_id in self._known_ids():
            return ALREADY_INSTALLED
        dest = self.config.plugins_dir / plugin_id
        shutil.copytree(source, dest, symlinks=True)
        _write_json(
            dest / INSTALL_META_NAME,
            {
                "source": str(source),
                "installed_at": datetime.now(timezone.utc).isoformat(),
            },
        )
        self._write_enabled(plugin_id, True)
        return True

    def _uninstall(self, plugin_id: str) -> bool:
        if not is_valid_plugin_id(plugin_id):
            logger.warning(f"Refusing to uninstall invalid plugin id {plugin_id!r}")
            return False
        dest = self.config.plugins_dir / plugin_id
        if dest.is_dir():
            shutil.rmtree(dest)
            self._write_enabled(plugin_id, None)
            return True
        dirs = self._unpacked_dirs()
        keep = [d for d in dirs if (p := load_plugin(d)) is None or p.id != plugin_id]
        if len(keep) == len(dirs):
            return False
        self._save_unpacked_dirs(keep)
        self._write_enabled(plugin_id, None)
        return True

    def _load_unzipped(self, path: str) -> bool:
        root = Path(path).expanduser().resolve()
        plugin = load_plugin(root)
        if plugin is None:
            return False
        dirs = self._unpacked_dirs()
        if root in dirs:
            return True
        if plugin.id in self._known_ids():
            logger.info(f"Plugin id '{plugin.id}' is already loaded")
            return False
        self._save_unpacked_dirs(dirs + [root])
        self._write_enabled(plugin.id, True)
        return True

    def _set_enabled(self, plugin_id: str, enabled: bool) -> bool:
        if plugin_id not in self._known_ids():
            return False
        self._write_enabled(plugin_id, enabled)
        return True

    # -- host interface ------------------------------------------------

    async def list_plugins(self) -> list[Plugin]:
        return list(self._snapshot)

    async def get_enabled_plugins(self) -> dict[str, bool]:
        return await asyncio.to_thread(self._read_enabled)

    async def install(self, path: str) -> bool | str:
        return await asyncio.to_thread(self._install, path)

    async def uninstall(self, plugin_id: str) -> bool:
        return await asyncio.to_thread(self._uninstall, plugin_id)

    async def reload(self) -> None:
        self._snapshot = await asyncio.to_thread(self._scan)

    async def load_unzipped(self, path: str) -> bool:
        return await asyncio.to_thread(self._load_unzipped, path)

    async def set_plugin_enabled(self, plugin_id: str, enabled: bool) -> bool:
        return await asyncio.to_thread(self._set_enabled, plugin_id, enabled)
