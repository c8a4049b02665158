"""Text and path helpers: description summaries, slugs, short paths."""

from __future__ import annotations

import re
from pathlib import Path

_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")
_SLUG_STRIP = re.compile(r"[^a-z0-9]+")


def first_paragraph(text: str) -> str:
    """Return the first paragraph of *text*, else its first line, else all of it."""
    if not text:
        return ""
    paragraphs = _PARAGRAPH_BREAK.split(text)
    if len(paragraphs) > 1 and paragraphs[0].strip():
        return paragraphs[0].strip()
    lines = text.split("\n")
    if len(lines) > 1 and lines[0].strip():
        return lines[0].strip()
    return text


def slugify(name: str) -> str:
    """Lowercase *name* and collapse non-alphanumerics to single hyphens."""
    return _SLUG_STRIP.sub("-", name.lower()).strip("-")


def short_cwd(p: Path) -> str:
    """Return path relative to home directory, using ~ prefix."""
    try:
        rel = p.relative_to(Path.home())
        return f"~/{rel}" if str(rel) != "." else "~"
    except ValueError:
        return str(p)


def truncate(text: str, width: int) -> str:
    """Cut *text* to *width* characters, marking the cut with an ellipsis."""
    if len(text) <= width:
        return text
    if width <= 1:
        return text[:width]
    return text[: width - 1] + "…"
