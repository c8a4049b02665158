"""Directory pickers for the CLI: a fixed path, or a terminal prompt."""

from __future__ import annotations

from pathlib import Path

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import PathCompleter


class StaticPicker:
    """Returns the same path every time; ``None`` behaves as a cancelled dialog."""

    def __init__(self, path: str | Path | None):
        self.path = str(path) if path else None

    async def select_directory(self) -> str | None:
        return self.path


class PromptPicker:
    """Asks for a directory on the terminal with path completion."""

    def __init__(self, message: str = "plugin directory: "):
        self.message = message
        self._session: PromptSession | None = None

    async def select_directory(self) -> str | None:
        if self._session is None:
            self._session = PromptSession(
                completer=PathCompleter(only_directories=True, expanduser=True),
            )
        try:
            text = await self._session.prompt_async(self.message)
        except (KeyboardInterrupt, EOFError):
            return None
        text = text.strip()
        return str(Path(text).expanduser()) if text else None
