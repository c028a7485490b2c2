"""Custom exceptions for PyAssetSync."""


class AssetSyncError(Exception):
    """Base exception for all PyAssetSync errors."""

    pass


class PathOutsideRootError(AssetSyncError):
    """Raised when a path does not lie under the expected root directory."""

    def __init__(self, path: str, root: str):
        self.path = path
        self.root = root
        super().__init__(f"Path '{path}' is not located under root '{root}'")


class MissingMandatoryFileError(AssetSyncError):
    """Raised when the file required by a binding's sync mode does not exist."""

    def __init__(self, path: str, mode_name: str):
        self.path = path
        self.mode_name = mode_name
        super().__init__(f"File required by mode {mode_name} doesn't exist: {path}")


class BindingExistsError(AssetSyncError):
    """Raised when registering a second binding for the same asset path."""

    pass


class BindingNotFoundError(AssetSyncError):
    """Raised when no binding matches the given asset path."""

    pass


class SettingsError(AssetSyncError):
    """Raised when the bindings settings file cannot be read or is invalid."""

    pass
