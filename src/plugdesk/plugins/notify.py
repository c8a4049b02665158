"""Notifications: severity levels, the Notification record, the sink protocol."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from plugdesk.core.config import DEFAULT_NOTIFICATION_DURATION_MS


class Severity(str, Enum):
    SUCCESS = "success"
    INFORMATIONAL = "informational"
    DESTRUCTIVE = "destructive"
    NEUTRAL = "neutral"


@dataclass(frozen=True)
class Notification:
    title: str
    description: str
    severity: Severity = Severity.NEUTRAL
    duration_ms: int = DEFAULT_NOTIFICATION_DURATION_MS


class NotificationSink(Protocol):
    """Fire-and-forget receiver of workflow outcomes."""

    def notify(self, notification: Notification) -> None: ...
