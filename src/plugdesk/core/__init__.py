"""Core: configuration, logging setup, text helpers."""

from .config import Config, load_config
from .log import setup_logging

__all__ = ["Config", "load_config", "setup_logging"]
