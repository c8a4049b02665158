"""Hosts: filesystem plugin host and directory pickers."""

from .local import LocalPluginHost, is_valid_plugin_id, load_plugin, read_manifest
from .pickers import PromptPicker, StaticPicker

__all__ = [
    "LocalPluginHost",
    "PromptPicker",
    "StaticPicker",
    "is_valid_plugin_id",
    "load_plugin",
    "read_manifest",
]
