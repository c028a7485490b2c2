"""Configuration management for PyAssetSync.

Values are resolved from environment variables first, then from the user's
config file (``~/.config/pyassetsync/config.json``).
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)

# Default seconds between two ticks of the ``watch`` command
DEFAULT_TICK_INTERVAL: float = 1.0


class Config:
    """Configuration manager for PyAssetSync."""

    def __init__(self, config_dir: Optional[Path] = None):
        """Initialize configuration.

        Args:
            config_dir: Directory holding config.json. Defaults to
                ~/.config/pyassetsync/
        """
        if config_dir is None:
            config_dir = Path.home() / ".config" / "pyassetsync"
        self.config_dir = config_dir
        self.config_file = self.config_dir / "config.json"

    def _load(self) -> dict[str, Any]:
        if not self.config_file.exists():
            return {}
        try:
            with open(self.config_file, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to load config file {self.config_file}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: dict[str, Any]) -> None:
        self.config_dir.mkdir(parents=True, exist_ok=True)
        with open(self.config_file, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

    @property
    def data_path(self) -> Optional[str]:
        """Absolute path of the project's Assets directory."""
        return os.environ.get("PYASSETSYNC_DATA_PATH") or self._load().get(
            "data_path"
        )

    @property
    def tick_interval(self) -> float:
        """Seconds between two ticks of the watch loop."""
        value = os.environ.get("PYASSETSYNC_TICK_INTERVAL") or self._load().get(
            "tick_interval"
        )
        if value is None:
            return DEFAULT_TICK_INTERVAL
        try:
            return float(value)
        except (TypeError, ValueError):
            logger.warning(f"Invalid tick interval {value!r}, using default")
            return DEFAULT_TICK_INTERVAL

    def save_data_path(self, data_path: str) -> None:
        """Store the default Assets directory in the config file."""
        data = self._load()
        data["data_path"] = data_path
        self._save(data)

    def get_config_path(self) -> Path:
        return self.config_file


config = Config()
