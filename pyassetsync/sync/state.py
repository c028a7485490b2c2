"""Persistence of the binding store.

The store is kept in a single JSON file, by default at the well-known
``Assets/Settings/external_assets.json`` location inside the project.
"""

import json
import logging
from pathlib import Path

from ..exceptions import AssetSyncError, SettingsError
from ..paths import to_absolute
from .store import BindingStore

logger = logging.getLogger(__name__)

SETTINGS_ASSET_PATH = "Assets/Settings/external_assets.json"


def default_settings_file(data_path: str) -> Path:
    """Return the default settings file location for a project."""
    return Path(to_absolute(data_path, SETTINGS_ASSET_PATH))


class SettingsManager:
    """Loads and saves the binding store as JSON."""

    def __init__(self, settings_file: Path):
        """Initialize settings manager.

        Args:
            settings_file: JSON file holding bindings and global flags
        """
        self.settings_file = Path(settings_file)

    def load(self, data_path: str) -> BindingStore:
        """Load the binding store.

        A missing settings file yields a new, empty store marked dirty so
        that it gets created on the next save.

        Args:
            data_path: Absolute path the ``Assets`` root maps to

        Returns:
            Loaded BindingStore

        Raises:
            SettingsError: If the file cannot be read or parsed
        """
        if not self.settings_file.exists():
            logger.info(f"No settings found at {self.settings_file}, creating new")
            store = BindingStore(data_path=data_path)
            store.mark_dirty()
            return store

        try:
            with open(self.settings_file, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise SettingsError(
                f"Failed to load settings from {self.settings_file}: {e}"
            ) from e

        if not isinstance(data, dict):
            raise SettingsError(f"Invalid settings file: {self.settings_file}")

        try:
            store = BindingStore.from_dict(data, data_path=data_path)
        except (AssetSyncError, ValueError, AttributeError, TypeError) as e:
            raise SettingsError(
                f"Invalid settings file {self.settings_file}: {e}"
            ) from e

        logger.debug(f"Loaded {len(store)} binding(s) from {self.settings_file}")
        return store

    def save(self, store: BindingStore) -> None:
        """Write the store to disk and clear its dirty flag.

        Raises:
            SettingsError: If the file cannot be written
        """
        try:
            self.settings_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.settings_file, "w", encoding="utf-8") as f:
                json.dump(store.to_dict(), f, indent=2)
        except OSError as e:
            raise SettingsError(
                f"Failed to save settings to {self.settings_file}: {e}"
            ) from e
        store.dirty = False
        logger.debug(f"Saved {len(store)} binding(s) to {self.settings_file}")

    def save_if_dirty(self, store: BindingStore) -> bool:
        """Save the store if it has unsaved changes.

        Returns:
            True if the store was written
        """
        if not store.dirty:
            return False
        self.save(store)
        return True
