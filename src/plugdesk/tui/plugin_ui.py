"""Interactive plugin manager page.

Full-screen prompt_toolkit Application with keyboard navigation:
  Up/Down/j/k    navigate plugins
  Space/Enter    enable or disable the selected plugin
  i              install a plugin from a directory
  l              load an unpacked plugin directory
  r/u            remove the selected plugin (asks for confirmation)
  /              search installed plugins
  q/Escape       close
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Awaitable

from prompt_toolkit import Application
from prompt_toolkit.filters import Condition
from prompt_toolkit.formatted_text import FormattedText
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.layout import (
    FormattedTextControl,
    HSplit,
    Layout,
    Window,
)
from prompt_toolkit.layout.dimension import Dimension

from plugdesk.core.utils import truncate
from plugdesk.plugins.notify import Notification, Severity
from plugdesk.plugins.search import SearchIndex, has_query

from .renderer import icon_glyph

if TYPE_CHECKING:
    from plugdesk.plugins.controller import LifecycleController
    from plugdesk.plugins.models import Plugin

NOTICE_STYLES = {
    Severity.SUCCESS: "fg:ansigreen bold",
    Severity.INFORMATIONAL: "fg:ansicyan bold",
    Severity.DESTRUCTIVE: "fg:ansired bold",
    Severity.NEUTRAL: "bold",
}


# ── Collaborators ───────────────────────────────────────────────────


class StatusSink:
    """Keeps the most recent notification for the status bar."""

    def __init__(self) -> None:
        self.last: Notification | None = None
        self.app: Application | None = None

    def notify(self, notification: Notification) -> None:
        self.last = notification
        if self.app is not None:
            self.app.invalidate()


class InlinePicker:
    """Directory picker that asks for the path inside the page itself."""

    def __init__(self) -> None:
        self.buffer = ""
        self._future: asyncio.Future[str | None] | None = None

    @property
    def active(self) -> bool:
        return self._future is not None and not self._future.done()

    async def select_directory(self) -> str | None:
        self.buffer = ""
        self._future = asyncio.get_running_loop().create_future()
        try:
            return await self._future
        finally:
            self._future = None
            self.buffer = ""

    def submit(self) -> None:
        if self.active:
            self._future.set_result(self.buffer.strip() or None)

    def cancel(self) -> None:
        if self.active:
            self._future.set_result(None)


# ── State ───────────────────────────────────────────────────────────


class _UIState:
    def __init__(self, controller: LifecycleController, picker: InlinePicker, sink: StatusSink):
        self.controller = controller
        self.store = controller.store
        self.search = SearchIndex(self.store)
        self.picker = picker
        self.sink = sink
        self.cursor = 0
        self.searching = False
        self.search_term = ""
        self.result_cursor = 0

    @property
    def plugins(self) -> tuple[Plugin, ...]:
        return self.store.plugins

    @property
    def results(self) -> list[Plugin]:
        return self.search.filter(self.search_term)

    @property
    def show_results(self) -> bool:
        return self.searching and has_query(self.search_term)

    @property
    def selected(self) -> Plugin | None:
        items = self.plugins
        if not items:
            return None
        self.clamp_cursor()
        return items[self.cursor]

    def clamp_cursor(self) -> None:
        self.cursor = max(0, min(self.cursor, len(self.plugins) - 1))

    def move_cursor(self, delta: int) -> None:
        if self.show_results:
            count = len(self.results)
            if count:
                self.result_cursor = max(0, min(count - 1, self.result_cursor + delta))
            return
        count = len(self.plugins)
        if count:
            self.cursor = max(0, min(count - 1, self.cursor + delta))

    def start_search(self) -> None:
        self.searching = True
        self.result_cursor = 0

    def type_search(self, text: str) -> None:
        self.search_term += text
        self.result_cursor = 0

    def end_search(self, select: bool) -> None:
        """Close the search panel, optionally jumping to the highlighted result."""
        results = self.results if self.show_results else []
        if select and results:
            chosen = results[min(self.result_cursor, len(results) - 1)]
            self.cursor = self.plugins.index(chosen)
        self.searching = False


# ── Rendering ───────────────────────────────────────────────────────


def _render_header(state: _UIState) -> FormattedText:
    parts: list[tuple[str, str]] = [("bold", "  Plugins  ")]
    if state.searching:
        parts.append(("", "search: "))
        parts.append(("bold", f"{state.search_term}█"))
    elif state.search_term:
        parts.append(("dim", f"search: {state.search_term}"))
    else:
        parts.append(("dim", "/ to search"))
    parts.append(("", "\n"))
    return FormattedText(parts)


def _render_content(state: _UIState) -> FormattedText:
    parts: list[tuple[str, str]] = []
    if state.controller.selecting_directory:
        _render_directory_overlay(state, parts)
    elif state.controller.confirm_open:
        _render_confirm(state, parts)
    elif state.show_results:
        _render_results(state, parts)
    elif state.store.loading and not state.store.loaded:
        parts.append(("italic", "  Loading plugins...\n"))
    elif not state.plugins:
        parts.append(("italic", "  You haven't installed any plugins\n\n"))
        parts.append(("", "  press 'i' to add a plugin\n"))
    else:
        _render_installed(state, parts)
    return FormattedText(parts)


def _render_installed(state: _UIState, parts: list) -> None:
    state.clamp_cursor()
    parts.append(("bold", "     Plugin                    Version   Status    Description\n"))
    parts.append(("", "  " + "─" * 76 + "\n"))
    for i, p in enumerate(state.plugins):
        prefix = " > " if i == state.cursor else "   "
        style = "bold" if i == state.cursor else ""
        name = truncate(p.name, 22).ljust(22)
        ver = truncate(p.version or "-", 8).ljust(8)
        if state.store.is_enabled(p.id):
            status, st_style = "[on] ", "fg:ansigreen"
        else:
            status, st_style = "[off]", "fg:ansiyellow"
        parts.append((style, f"  {prefix}{icon_glyph(p.icon)} {name}  {ver}  "))
        parts.append((st_style, status.ljust(8)))
        parts.append(("dim", f"  {truncate(p.summary, 30)}\n"))


def _render_results(state: _UIState, parts: list) -> None:
    results = state.results
    if not results:
        parts.append(("italic", "  No plugins found\n"))
        return
    for i, p in enumerate(results):
        prefix = " > " if i == state.result_cursor else "   "
        style = "bold" if i == state.result_cursor else ""
        parts.append((style, f"  {prefix}{icon_glyph(p.icon)} {p.name}\n"))
        parts.append(("dim", f"       {truncate(p.summary, 70)}\n"))


def _render_directory_overlay(state: _UIState, parts: list) -> None:
    if state.controller.install_queued:
        parts.append(("bold", "  Install Queued\n\n"))
        parts.append(("", "  Waiting for the current operation to finish...\n"))
        return
    parts.append(("bold", "  Directory Selection In Progress\n\n"))
    if state.picker.active:
        parts.append(("", "  Enter the plugin directory:\n"))
        parts.append(("bold", f"  > {state.picker.buffer}█\n"))
    else:
        parts.append(("", "  Please complete the directory selection before continuing.\n"))


def _render_confirm(state: _UIState, parts: list) -> None:
    parts.append(("bold", f"  {state.controller.confirmation_message}\n\n"))
    parts.append(("", "  [y] Remove   [n] Cancel\n"))


def _render_statusbar(state: _UIState) -> FormattedText:
    parts: list[tuple[str, str]] = []
    notice = state.sink.last
    if notice is not None:
        parts.append((NOTICE_STYLES.get(notice.severity, "bold"), f"  {notice.title}: "))
        parts.append(("", f"{notice.description}\n"))
    else:
        parts.append(("", "\n"))
    if state.picker.active or state.searching:
        parts.append(("", "  Enter: confirm  Esc: cancel"))
    elif state.controller.confirm_open:
        parts.append(("", "  y: remove  n: cancel"))
    elif state.controller.selecting_directory:
        parts.append(("", "  q: close"))
    else:
        parts.append(("", "  ↑↓: navigate  space: enable/disable  i: install  "))
        parts.append(("", "l: load unpacked  r: remove  /: search  q: close"))
    return FormattedText(parts)


# ── Application ─────────────────────────────────────────────────────


def _build_key_bindings(state: _UIState) -> KeyBindings:
    kb = KeyBindings()

    picking = Condition(lambda: state.picker.active)
    confirming = Condition(lambda: state.controller.confirm_open and not state.picker.active)
    searching = Condition(lambda: state.searching and not state.picker.active)
    installing = Condition(lambda: state.controller.selecting_directory)
    idle = ~picking & ~confirming & ~searching
    browsing = idle & ~installing

    def _spawn(event, coro: Awaitable) -> None:
        task = event.app.create_background_task(coro)
        task.add_done_callback(lambda _t: event.app.invalidate())

    # ── Browsing ──
    @kb.add("up", filter=~picking & ~confirming & ~installing)
    @kb.add("k", filter=browsing)
    def _up(event):
        state.move_cursor(-1)

    @kb.add("down", filter=~picking & ~confirming & ~installing)
    @kb.add("j", filter=browsing)
    def _down(event):
        state.move_cursor(1)

    @kb.add("space", filter=browsing)
    @kb.add("enter", filter=browsing)
    def _toggle(event):
        plugin = state.selected
        if plugin is not None:
            _spawn(event, state.controller.toggle(plugin.id))

    @kb.add("i", filter=browsing)
    def _install(event):
        _spawn(event, state.controller.install())

    @kb.add("l", filter=browsing)
    def _load_unpacked(event):
        _spawn(event, state.controller.load_unpacked())

    @kb.add("r", filter=browsing)
    @kb.add("u", filter=browsing)
    def _remove(event):
        plugin = state.selected
        if plugin is not None:
            state.controller.request_removal(plugin.id)

    @kb.add("/", filter=browsing)
    def _search(event):
        state.start_search()

    @kb.add("q", filter=idle)
    @kb.add("escape", filter=idle)
    def _quit(event):
        event.app.exit()

    # ── Confirmation ──
    @kb.add("y", filter=confirming)
    def _yes(event):
        _spawn(event, state.controller.confirm_removal())

    @kb.add("n", filter=confirming)
    @kb.add("escape", filter=confirming)
    def _no(event):
        state.controller.cancel_removal()

    # ── Directory input ──
    @kb.add("enter", filter=picking)
    def _submit_path(event):
        state.picker.submit()

    @kb.add("escape", filter=picking)
    def _cancel_path(event):
        state.picker.cancel()

    @kb.add("backspace", filter=picking)
    def _path_backspace(event):
        state.picker.buffer = state.picker.buffer[:-1]

    @kb.add("<any>", filter=picking)
    def _path_char(event):
        if event.data.isprintable():
            state.picker.buffer += event.data

    # ── Search input ──
    @kb.add("enter", filter=searching)
    def _search_select(event):
        state.end_search(select=True)

    @kb.add("escape", filter=searching)
    def _search_close(event):
        state.end_search(select=False)

    @kb.add("backspace", filter=searching)
    def _search_backspace(event):
        state.search_term = state.search_term[:-1]
        state.result_cursor = 0

    @kb.add("<any>", filter=searching)
    def _search_char(event):
        if event.data.isprintable():
            state.type_search(event.data)

    return kb


async def run_plugin_ui(
    controller: LifecycleController, picker: InlinePicker, sink: StatusSink
) -> None:
    """Run the full-screen plugin manager until the user closes it."""
    state = _UIState(controller, picker, sink)

    header = Window(
        content=FormattedTextControl(lambda: _render_header(state)),
        height=1,
    )
    separator = Window(height=1, char="─", style="class:separator")
    content_area = Window(
        content=FormattedTextControl(lambda: _render_content(state)),
        height=Dimension(min=5, preferred=20),
    )
    status_bar = Window(
        content=FormattedTextControl(lambda: _render_statusbar(state)),
        height=2,
        style="reverse",
    )

    layout = Layout(
        HSplit(
            [
                header,
                separator,
                content_area,
                separator,
                status_bar,
            ]
        )
    )

    app: Application = Application(
        layout=layout,
        key_bindings=_build_key_bindings(state),
        full_screen=True,
        mouse_support=False,
        refresh_interval=0.5,
    )
    sink.app = app
    try:
        await app.run_async()
    finally:
        sink.app = None
        picker.cancel()
