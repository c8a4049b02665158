"""Plugin data models: Plugin, icon variants, InstallOutcome."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Union

from plugdesk.core.utils import first_paragraph

ALREADY_INSTALLED = "already-installed"


@dataclass(frozen=True)
class MarkupIcon:
    """Inline vector markup (an ``<svg>`` document)."""

    markup: str


@dataclass(frozen=True)
class TokenIcon:
    """Opaque display token, e.g. an emoji or an icon name."""

    value: str


Icon = Union[MarkupIcon, TokenIcon, None]


def is_svg_markup(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    trimmed = value.strip()
    return trimmed.startswith("<svg") and trimmed.endswith("</svg>")


def parse_icon(raw: Any) -> Icon:
    """Classify a host-reported icon value."""
    if isinstance(raw, (MarkupIcon, TokenIcon)):
        return raw
    if is_svg_markup(raw):
        return MarkupIcon(raw.strip())
    if raw:
        return TokenIcon(str(raw))
    return None


def _author_name(raw: Any) -> str:
    if isinstance(raw, Mapping):
        return str(raw.get("name", ""))
    return str(raw) if raw else ""


@dataclass(frozen=True)
class Plugin:
    """An installed plugin as reported by the host. Identity is ``id``."""

    id: str
    name: str
    version: str = ""
    author: str = ""
    description: str = ""
    icon: Icon = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Plugin:
        plugin_id = str(data.get("id", ""))
        if not plugin_id:
            raise ValueError(f"plugin record has no id: {dict(data)!r}")
        return cls(
            id=plugin_id,
            name=str(data.get("name") or plugin_id),
            version=str(data.get("version") or ""),
            author=_author_name(data.get("author")),
            description=str(data.get("description") or ""),
            icon=parse_icon(data.get("icon")),
        )

    @property
    def summary(self) -> str:
        return first_paragraph(self.description)


class InstallOutcome(str, Enum):
    INSTALLED = "installed"
    ALREADY_INSTALLED = ALREADY_INSTALLED
    INVALID = "invalid"


def classify_install_result(result: Any) -> InstallOutcome:
    """Map the host's tri-state install result. Only a literal ``True`` is success."""
    if result is True:
        return InstallOutcome.INSTALLED
    if isinstance(result, str) and result == ALREADY_INSTALLED:
        return InstallOutcome.ALREADY_INSTALLED
    return InstallOutcome.INVALID
