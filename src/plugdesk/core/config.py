"""Configuration: env, data paths, host timeouts."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_HOST_TIMEOUT = 30.0
DEFAULT_NOTIFICATION_DURATION_MS = 3000


@dataclass
class Config:
    data_dir: Path = field(default_factory=lambda: Path.home() / ".plugdesk")
    host_timeout: float | None = DEFAULT_HOST_TIMEOUT
    picker_timeout: float | None = None  # None = wait for the user indefinitely
    notification_duration_ms: int = DEFAULT_NOTIFICATION_DURATION_MS
    log_level: str = "WARNING"
    verbose: bool = False

    def __post_init__(self) -> None:
        self.data_dir = Path(self.data_dir).expanduser()
        self.host_timeout = _timeout(self.host_timeout)
        self.picker_timeout = _timeout(self.picker_timeout)

    @property
    def plugins_dir(self) -> Path:
        return self.data_dir / "plugins"

    @property
    def settings_path(self) -> Path:
        return self.data_dir / "settings.json"

    @property
    def unpacked_path(self) -> Path:
        return self.data_dir / "unpacked.json"

    @property
    def log_path(self) -> Path:
        return self.data_dir / "plugdesk.log"


def _timeout(value) -> float | None:
    """Normalize a timeout; zero or negative means unbounded."""
    if value is None:
        return None
    value = float(value)
    return value if value > 0 else None


def _read_settings(path: Path) -> dict:
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text())
    except (json.JSONDecodeError, OSError):
        return {}
    return data if isinstance(data, dict) else {}


def _apply_settings(config: Config, path: Path) -> None:
    """Apply a single settings.json file to config."""
    data = _read_settings(path)
    if "hostTimeout" in data:
        config.host_timeout = _timeout(data["hostTimeout"])
    if "pickerTimeout" in data:
        config.picker_timeout = _timeout(data["pickerTimeout"])
    if isinstance(data.get("notificationDuration"), int):
        config.notification_duration_ms = data["notificationDuration"]
    if isinstance(data.get("logLevel"), str):
        config.log_level = data["logLevel"].upper()


def load_config(
    data_dir: str | Path | None = None,
    verbose: bool = False,
) -> Config:
    """Load config with priority: CLI args > env > .env > settings.json > defaults."""
    load_dotenv()

    config = Config()
    if home := os.getenv("PLUGDESK_HOME"):
        config.data_dir = Path(home).expanduser()
    if data_dir:
        config.data_dir = Path(data_dir).expanduser()

    _apply_settings(config, config.settings_path)

    if env_timeout := os.getenv("PLUGDESK_HOST_TIMEOUT"):
        config.host_timeout = _timeout(env_timeout)
    if env_picker := os.getenv("PLUGDESK_PICKER_TIMEOUT"):
        config.picker_timeout = _timeout(env_picker)
    if env_level := os.getenv("PLUGDESK_LOG_LEVEL"):
        config.log_level = env_level.upper()

    if verbose:
        config.verbose = True
        config.log_level = "DEBUG"

    return config
