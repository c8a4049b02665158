"""Rich-based output for plugin listings and notifications."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from plugdesk.plugins.models import MarkupIcon, TokenIcon
from plugdesk.plugins.notify import Notification, Severity

if TYPE_CHECKING:
    from plugdesk.plugins.models import Icon, Plugin

console = Console()

SEVERITY_STYLES = {
    Severity.SUCCESS: "green",
    Severity.INFORMATIONAL: "cyan",
    Severity.DESTRUCTIVE: "bold red",
    Severity.NEUTRAL: "",
}


def icon_glyph(icon: Icon) -> str:
    """Single-cell stand-in for a plugin icon on a terminal."""
    if isinstance(icon, TokenIcon):
        return icon.value[:2]
    if isinstance(icon, MarkupIcon):
        return "◆"
    return "P"


class ConsoleSink:
    """Notification sink that prints to the terminal."""

    def __init__(self, out: Console | None = None):
        self.console = out or console

    def notify(self, notification: Notification) -> None:
        style = SEVERITY_STYLES.get(notification.severity, "")
        self.console.print(f"[{style}]{notification.title}[/{style}]" if style else notification.title)
        self.console.print(f"  {escape(notification.description)}", style="dim")


def render_plugin_table(
    plugins: Iterable[Plugin], enabled: dict[str, bool], out: Console | None = None
) -> None:
    table = Table(box=None, pad_edge=False, show_edge=False)
    table.add_column("", width=2)
    table.add_column("Plugin", style="bold")
    table.add_column("Id", style="dim")
    table.add_column("Version")
    table.add_column("Status")
    table.add_column("Description", style="dim", overflow="ellipsis", no_wrap=True)
    for p in plugins:
        status = "[green]on[/green]" if enabled.get(p.id, False) else "[dim]off[/dim]"
        ver = f"v{p.version}" if p.version else "-"
        table.add_row(
            escape(icon_glyph(p.icon)), escape(p.name), escape(p.id), ver, status, escape(p.summary)
        )
    (out or console).print(table)
