"""Plugin host interface: the operations the controller consumes.

The host discovers, validates, loads and persists plugins. This package only
calls it; ``plugdesk.hosts`` ships a filesystem implementation.
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol, Sequence, Union

from .models import Plugin

PluginRecord = Union[Plugin, Mapping[str, Any]]


class HostTimeoutError(TimeoutError):
    """A host or picker call did not complete within its time budget."""

    def __init__(self, operation: str, timeout: float):
        super().__init__(f"timed out after {timeout:g}s waiting for host {operation}")
        self.operation = operation
        self.timeout = timeout


class PluginHost(Protocol):
    async def list_plugins(self) -> Sequence[PluginRecord]: ...

    async def get_enabled_plugins(self) -> Mapping[str, bool] | None: ...

    async def install(self, path: str) -> Any:
        """Return ``True``, ``"already-installed"``, or anything else for invalid."""
        ...

    async def uninstall(self, plugin_id: str) -> bool: ...

    async def reload(self) -> None: ...

    async def load_unzipped(self, path: str) -> bool: ...

    async def set_plugin_enabled(self, plugin_id: str, enabled: bool) -> bool: ...


class DirectoryPicker(Protocol):
    async def select_directory(self) -> str | None:
        """Ask the user for a directory. ``None`` or ``""`` means cancelled."""
        ...
