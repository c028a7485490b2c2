"""Sync engine for PyAssetSync - keeps external files and assets in sync."""

from .binding import Binding, FileMeta
from .comparator import BindingComparator, SyncAction, SyncDecision, SyncDirection
from .engine import ConfirmationPrompt, SyncEngine
from .modes import BindingState, SyncMode
from .operations import FileOperations
from .state import SETTINGS_ASSET_PATH, SettingsManager, default_settings_file
from .store import BindingStore

__all__ = [
    "SyncEngine",
    "SyncMode",
    "BindingState",
    "Binding",
    "FileMeta",
    "BindingStore",
    "BindingComparator",
    "SyncAction",
    "SyncDecision",
    "SyncDirection",
    "ConfirmationPrompt",
    "FileOperations",
    "SettingsManager",
    "SETTINGS_ASSET_PATH",
    "default_settings_file",
]
