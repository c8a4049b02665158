"""Lifecycle controller: install, uninstall, load-unpacked and toggle workflows.

Each workflow keeps the registry store consistent with the plugin host:

  install         pick dir -> host.install -> host.reload -> store.refresh
  uninstall       request -> confirm -> host.uninstall -> host.reload -> store.refresh
  load_unpacked   [pick dir] -> host.load_unzipped -> host.reload -> store.refresh
  toggle          optimistic map write -> host.set_plugin_enabled -> revert on failure

Host exceptions never escape a workflow. Install, uninstall and load-unpacked
share one lock so their refreshes cannot interleave; toggles are serialized per
plugin id.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Awaitable

from plugdesk.core.config import DEFAULT_HOST_TIMEOUT, DEFAULT_NOTIFICATION_DURATION_MS

from .host import HostTimeoutError
from .models import InstallOutcome, classify_install_result
from .notify import Notification, Severity

if TYPE_CHECKING:
    from .host import DirectoryPicker, PluginHost
    from .notify import NotificationSink
    from .registry import RegistryStore

logger = logging.getLogger(__name__)

# Errors raised when the user dismisses the directory dialog mid-flight.
CANCELLATION_ERROR_PATTERNS = ("Cannot read properties", "dialog:openDirectory")

FALLBACK_NAME = "this plugin"

_INSTALL_NOTICES = {
    InstallOutcome.INSTALLED: (
        "Success",
        "Plugin was installed successfully",
        Severity.SUCCESS,
    ),
    InstallOutcome.ALREADY_INSTALLED: (
        "Plugin Already Installed",
        "This plugin is already installed",
        Severity.INFORMATIONAL,
    ),
    InstallOutcome.INVALID: (
        "Invalid Plugin Directory",
        "The selected directory does not contain a valid plugin structure",
        Severity.DESTRUCTIVE,
    ),
}


def is_cancellation_error(error: BaseException) -> bool:
    message = str(error)
    return any(pattern in message for pattern in CANCELLATION_ERROR_PATTERNS)


class LifecycleController:
    """Orchestrates plugin lifecycle workflows against a host."""

    def __init__(
        self,
        host: PluginHost,
        picker: DirectoryPicker,
        store: RegistryStore,
        sink: NotificationSink,
        host_timeout: float | None = DEFAULT_HOST_TIMEOUT,
        picker_timeout: float | None = None,
        notification_duration_ms: int = DEFAULT_NOTIFICATION_DURATION_MS,
    ) -> None:
        self._host = host
        self._picker = picker
        self._store = store
        self._sink = sink
        self.host_timeout = host_timeout
        self.picker_timeout = picker_timeout
        self.notification_duration_ms = notification_duration_ms

        self._workflow_lock = asyncio.Lock()
        self._toggle_locks: dict[str, asyncio.Lock] = {}
        self._toggle_users: dict[str, int] = {}
        self._selecting_directory = False
        self._install_queued = False
        self._pending_removal: str | None = None
        self._confirm_open = False

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def store(self) -> RegistryStore:
        return self._store

    @property
    def selecting_directory(self) -> bool:
        return self._selecting_directory

    @property
    def install_queued(self) -> bool:
        """True while an install holds the guard but waits for another workflow."""
        return self._install_queued

    @property
    def pending_removal(self) -> str | None:
        return self._pending_removal

    @property
    def confirm_open(self) -> bool:
        return self._confirm_open

    @property
    def busy(self) -> bool:
        return self._workflow_lock.locked()

    @property
    def confirmation_message(self) -> str:
        return (
            f'Are you sure you want to remove "{self._display_name(self._pending_removal)}"? '
            "This action cannot be undone."
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _notify(self, title: str, description: str, severity: Severity) -> None:
        self._sink.notify(
            Notification(title, description, severity, self.notification_duration_ms)
        )

    def _display_name(self, plugin_id: str | None) -> str:
        plugin = self._store.find(plugin_id) if plugin_id else None
        return plugin.name if plugin else FALLBACK_NAME

    async def _call(self, operation: str, awaitable: Awaitable[Any], timeout: float | None) -> Any:
        if timeout is None:
            return await awaitable
        try:
            return await asyncio.wait_for(awaitable, timeout)
        except asyncio.TimeoutError as e:
            raise HostTimeoutError(operation, timeout) from e

    def _host_call(self, operation: str, awaitable: Awaitable[Any]) -> Awaitable[Any]:
        return self._call(operation, awaitable, self.host_timeout)

    async def _pick_directory(self) -> str | None:
        path = await self._call(
            "directory selection", self._picker.select_directory(), self.picker_timeout
        )
        return str(path) if path else None

    async def _commit(self) -> None:
        """Have the host commit its state, then pull it into the store."""
        await self._host_call("reload", self._host.reload())
        await self._store.refresh()

    # ------------------------------------------------------------------
    # Install
    # ------------------------------------------------------------------

    async def install(self) -> InstallOutcome | None:
        """Pick a directory and install it. Returns None on cancel, no-op or error."""
        if self._selecting_directory:
            logger.debug("Directory selection already in progress, ignoring install")
            return None

        self._selecting_directory = True
        self._install_queued = True
        try:
            async with self._workflow_lock:
                self._install_queued = False
                path = await self._pick_directory()
                if not path:
                    logger.debug("Directory selection cancelled")
                    return None

                result = await self._host_call("install", self._host.install(path))
                outcome = classify_install_result(result)
                if outcome is InstallOutcome.INSTALLED:
                    await self._commit()
                    logger.info(f"Installed plugin from {path}")
                else:
                    logger.info(f"Install from {path} not applied: {outcome.value}")
                self._notify(*_INSTALL_NOTICES[outcome])
                return outcome
        except Exception as e:
            logger.error(f"Failed to install plugin: {e}", exc_info=True)
            if isinstance(e, HostTimeoutError) or not is_cancellation_error(e):
                self._notify(
                    "Installation Failed",
                    str(e) or "An unexpected error occurred while installing the plugin",
                    Severity.DESTRUCTIVE,
                )
            return None
        finally:
            self._selecting_directory = False
            self._install_queued = False

    # ------------------------------------------------------------------
    # Uninstall
    # ------------------------------------------------------------------

    def request_removal(self, plugin_id: str) -> None:
        """Stage *plugin_id* and open the confirmation gate. No host call."""
        self._pending_removal = plugin_id
        self._confirm_open = True

    def cancel_removal(self) -> None:
        self._confirm_open = False
        self._pending_removal = None

    async def confirm_removal(self) -> bool:
        """Uninstall the staged plugin. Returns True if the host removed it."""
        plugin_id = self._pending_removal
        if not plugin_id:
            return False
        # Consume the token before any await so a repeated confirm is a no-op.
        self._pending_removal = None
        self._confirm_open = False

        name = self._display_name(plugin_id)
        try:
            async with self._workflow_lock:
                removed = await self._host_call("uninstall", self._host.uninstall(plugin_id))
                if not removed:
                    logger.warning(f"Host refused to uninstall plugin '{plugin_id}'")
                    self._notify(
                        "Failed to Remove Plugin",
                        f"Could not remove {name}. Please try again.",
                        Severity.DESTRUCTIVE,
                    )
                    return False
                await self._commit()
                logger.info(f"Uninstalled plugin '{plugin_id}'")
                self._notify(
                    "Plugin Removed",
                    f"{name} has been successfully removed",
                    Severity.SUCCESS,
                )
                return True
        except Exception:
            logger.exception(f"Host raised while uninstalling plugin '{plugin_id}'")
            self._notify(
                "Error",
                f"An error occurred while removing {name}",
                Severity.DESTRUCTIVE,
            )
            return False
        finally:
            self._confirm_open = False
            self._pending_removal = None

    # ------------------------------------------------------------------
    # Load unpacked
    # ------------------------------------------------------------------

    async def load_unpacked(self, path: str | None = None) -> bool:
        """Load a raw plugin directory in place. Failures are only logged."""
        try:
            async with self._workflow_lock:
                if path is None:
                    path = await self._pick_directory()
                if not path:
                    return False
                loaded = await self._host_call("load_unzipped", self._host.load_unzipped(path))
                if not loaded:
                    logger.warning(f"Host could not load unpacked plugin from {path}")
                    return False
                await self._commit()
                logger.info(f"Loaded unpacked plugin from {path}")
                return True
        except HostTimeoutError as e:
            logger.error(f"Failed to load unpacked plugin: {e}")
            self._notify("Load Failed", str(e), Severity.DESTRUCTIVE)
            return False
        except Exception:
            logger.exception("Failed to load unpacked plugin")
            return False

    # ------------------------------------------------------------------
    # Toggle
    # ------------------------------------------------------------------

    async def toggle(self, plugin_id: str) -> bool:
        """Flip *plugin_id*'s enabled state. Returns True if the host persisted it."""
        lock = self._toggle_locks.setdefault(plugin_id, asyncio.Lock())
        self._toggle_users[plugin_id] = self._toggle_users.get(plugin_id, 0) + 1
        try:
            async with lock:
                return await self._toggle_locked(plugin_id)
        finally:
            self._toggle_users[plugin_id] -= 1
            if not self._toggle_users[plugin_id]:
                del self._toggle_users[plugin_id]
                del self._toggle_locks[plugin_id]

    async def _toggle_locked(self, plugin_id: str) -> bool:
        previous = self._store.is_enabled(plugin_id)
        new_state = not previous
        persisted = False
        with self._store.pinned(plugin_id):
            self._store.set_enabled(plugin_id, new_state)
            try:
                persisted = bool(
                    await self._host_call(
                        "set_plugin_enabled",
                        self._host.set_plugin_enabled(plugin_id, new_state),
                    )
                )
                if persisted:
                    state = "enabled" if new_state else "disabled"
                    logger.info(f"Plugin {plugin_id} {state}")
                else:
                    logger.error(f"Failed to update plugin state for {plugin_id}")
            except HostTimeoutError as e:
                logger.error(f"Error toggling plugin {plugin_id}: {e}")
                self._notify("Update Failed", str(e), Severity.DESTRUCTIVE)
            except Exception:
                logger.exception(f"Error toggling plugin {plugin_id}")
            finally:
                if not persisted:
                    self._store.set_enabled(plugin_id, previous)
        return persisted
