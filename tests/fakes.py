"""Test doubles: a recording plugin host, a scripted picker, a recording sink."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

from plugdesk.plugins import Plugin


class FakeHost:
    """In-memory plugin host that records every call in order."""

    def __init__(self, plugins=(), enabled=None):
        self.plugins = list(plugins)
        self.enabled = dict(enabled or {})
        self.calls: list[tuple] = []
        self.install_result: object = True
        self.uninstall_result = True
        self.load_result = True
        self.set_enabled_result = True
        self.errors: dict[str, BaseException] = {}
        self.gates: dict[str, asyncio.Event] = {}

    @property
    def ops(self) -> list[str]:
        return [c[0] for c in self.calls]

    async def _enter(self, op, *args):
        self.calls.append((op, *args))
        if op in self.gates:
            await self.gates[op].wait()
        if op in self.errors:
            raise self.errors[op]

    async def list_plugins(self):
        await self._enter("list_plugins")
        return list(self.plugins)

    async def get_enabled_plugins(self):
        await self._enter("get_enabled_plugins")
        return None if self.enabled is None else dict(self.enabled)

    async def install(self, path):
        await self._enter("install", path)
        return self.install_result

    async def uninstall(self, plugin_id):
        await self._enter("uninstall", plugin_id)
        return self.uninstall_result

    async def reload(self):
        await self._enter("reload")

    async def load_unzipped(self, path):
        await self._enter("load_unzipped", path)
        return self.load_result

    async def set_plugin_enabled(self, plugin_id, enabled):
        await self._enter("set_plugin_enabled", plugin_id, enabled)
        if self.set_enabled_result:
            self.enabled[plugin_id] = enabled
        return self.set_enabled_result


class FakePicker:
    def __init__(self, path: str | None = "/tmp/plugin"):
        self.path = path
        self.calls = 0
        self.gate: asyncio.Event | None = None
        self.error: BaseException | None = None

    async def select_directory(self):
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.path


class RecordingSink:
    def __init__(self):
        self.notifications = []

    def notify(self, notification):
        self.notifications.append(notification)

    @property
    def titles(self) -> list[str]:
        return [n.title for n in self.notifications]


FOO = Plugin(id="a", name="Foo", version="1.0", author="Ada", description="Formats code")
BAR = Plugin(id="b", name="Bar", version="2.1", author="Bob", description="Lints\n\nMore text")


def make_plugin_dir(root: Path, name: str, **manifest) -> Path:
    """Write a plugin directory with a plugin.json manifest."""
    d = root / name.replace(" ", "_")
    d.mkdir(parents=True)
    data = {"name": name, **manifest}
    (d / "plugin.json").write_text(json.dumps(data))
    (d / "main.py").write_text("print('hello')\n")
    return d
