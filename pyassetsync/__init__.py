"""PyAssetSync - keep external files and project assets in sync."""

from .exceptions import (
    AssetSyncError,
    BindingExistsError,
    BindingNotFoundError,
    MissingMandatoryFileError,
    PathOutsideRootError,
    SettingsError,
)
from .paths import (
    get_meta_file_path,
    to_absolute,
    to_absolute_from_relative,
    to_relative_from_base,
    to_virtual_relative,
    unify_directory_separators,
)

__version__ = "0.1.0"

__all__ = [
    "AssetSyncError",
    "BindingExistsError",
    "BindingNotFoundError",
    "MissingMandatoryFileError",
    "PathOutsideRootError",
    "SettingsError",
    "get_meta_file_path",
    "to_absolute",
    "to_absolute_from_relative",
    "to_relative_from_base",
    "to_virtual_relative",
    "unify_directory_separators",
]
