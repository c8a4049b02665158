"""Plugins: models, registry store, search, lifecycle controller."""

from .controller import LifecycleController
from .host import DirectoryPicker, HostTimeoutError, PluginHost
from .models import (
    ALREADY_INSTALLED,
    InstallOutcome,
    MarkupIcon,
    Plugin,
    TokenIcon,
    classify_install_result,
    parse_icon,
)
from .notify import Notification, NotificationSink, Severity
from .registry import RegistryStore
from .search import SearchIndex, filter_plugins, has_query

__all__ = [
    "ALREADY_INSTALLED",
    "DirectoryPicker",
    "HostTimeoutError",
    "InstallOutcome",
    "LifecycleController",
    "MarkupIcon",
    "Notification",
    "NotificationSink",
    "Plugin",
    "PluginHost",
    "RegistryStore",
    "SearchIndex",
    "Severity",
    "TokenIcon",
    "classify_install_result",
    "filter_plugins",
    "has_query",
    "parse_icon",
]
