"""Public API for the plugdesk TUI package."""

from .plugin_ui import InlinePicker, StatusSink, run_plugin_ui
from .renderer import ConsoleSink, render_plugin_table

__all__ = ["ConsoleSink", "InlinePicker", "StatusSink", "render_plugin_table", "run_plugin_ui"]
