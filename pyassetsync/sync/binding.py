"""Binding between an external file and an asset inside the project tree."""

from dataclasses import dataclass, field
from typing import Any, Optional, Union

from ..paths import (
    to_absolute,
    to_absolute_from_relative,
    to_relative_from_base,
)
from .modes import BindingState, SyncMode
from .operations import FileOperations

_default_operations = FileOperations()


@dataclass
class FileMeta:
    """Cached filesystem metadata of one side of a binding."""

    exists: bool = False
    """Whether the file existed at the last refresh"""

    mtime: float = 0.0
    """Last modification time (Unix timestamp), 0.0 when missing"""


@dataclass(eq=False)
class Binding:
    """A tracked pair of an external (source) file and an asset file.

    Bindings compare by identity: two bindings with equal fields are still
    distinct entries of a store.

    Examples:
        >>> binding = Binding.create(
        ...     "/proj/external/logo.png", "Assets/Textures/logo.png", "/proj/Assets"
        ... )
        >>> binding.external_path_stored
        './../external/logo.png'
    """

    external_path_stored: str
    """External file path relative to ``data_path`` (portable form)"""

    asset_path: str
    """Virtual ``Assets/...`` path of the asset"""

    mode: SyncMode = SyncMode.SOURCE_TO_ASSET
    """Direction(s) this binding is synchronized in"""

    auto_update: bool = True
    """Whether automatic ticks process this binding"""

    notify_before_update: bool = True
    """Whether a confirmation is requested before an automatic update"""

    data_path: str = field(default="", repr=False)
    """Absolute path the virtual ``Assets`` root maps to (not persisted)"""

    request_update: bool = field(default=False, repr=False)
    """One-shot manual update request (not persisted)"""

    external_path: str = field(default="", init=False, repr=False)
    """Absolute path of the external file"""

    asset_absolute_path: str = field(default="", init=False, repr=False)
    """Absolute path of the asset"""

    source_meta: FileMeta = field(default_factory=FileMeta, init=False, repr=False)
    asset_meta: FileMeta = field(default_factory=FileMeta, init=False, repr=False)

    def __post_init__(self) -> None:
        """Validate paths and normalize the sync mode."""
        if not self.external_path_stored and not self.asset_path:
            raise ValueError("A binding needs an external path or an asset path")
        if not isinstance(self.mode, SyncMode):
            self.mode = SyncMode.from_string(self.mode)

    @classmethod
    def create(
        cls,
        external_absolute_path: str,
        asset_path: str,
        data_path: str,
        mode: Union[SyncMode, str] = SyncMode.SOURCE_TO_ASSET,
        auto_update: bool = True,
        notify_before_update: bool = True,
    ) -> "Binding":
        """Create a binding from an absolute external path.

        Args:
            external_absolute_path: Absolute path of the external file
            asset_path: Virtual ``Assets/...`` path of the asset
            data_path: Absolute path the ``Assets`` root maps to
            mode: Sync mode of the binding
            auto_update: Whether automatic ticks process the binding
            notify_before_update: Whether to confirm automatic updates

        Returns:
            New Binding with absolute paths already resolved
        """
        binding = cls(
            external_path_stored=to_relative_from_base(
                data_path, external_absolute_path
            ),
            asset_path=asset_path,
            mode=mode,  # type: ignore[arg-type]
            auto_update=auto_update,
            notify_before_update=notify_before_update,
            data_path=data_path,
        )
        binding.external_path = external_absolute_path
        if asset_path:
            binding.asset_absolute_path = to_absolute(data_path, asset_path)
        return binding

    def regenerate_absolute_paths(self) -> None:
        """Recreate absolute paths of the external file and the asset.

        Must be called after loading a binding and before refreshing its
        metadata.
        """
        if self.external_path_stored:
            self.external_path = to_absolute_from_relative(
                self.data_path, self.external_path_stored
            )
        if self.asset_path:
            self.asset_absolute_path = to_absolute(self.data_path, self.asset_path)

    def refresh_metadata(self, file_ops: Optional[FileOperations] = None) -> None:
        """Re-stat both files and update the cached metadata."""
        if not self.external_path or not self.asset_absolute_path:
            self.regenerate_absolute_paths()

        ops = file_ops or _default_operations
        self.source_meta = self._stat(ops, self.external_path)
        self.asset_meta = self._stat(ops, self.asset_absolute_path)

    @staticmethod
    def _stat(ops: FileOperations, path: str) -> FileMeta:
        if not path:
            return FileMeta()
        exists, mtime = ops.stat(path)
        return FileMeta(exists=exists, mtime=mtime if exists else 0.0)

    def get_state(
        self, refresh: bool = True, file_ops: Optional[FileOperations] = None
    ) -> BindingState:
        """Return the asset state relative to the source file.

        Args:
            refresh: Refresh cached metadata before comparing
            file_ops: Filesystem operations used for the refresh

        Returns:
            BindingState comparing source and asset modification times
        """
        if refresh:
            self.refresh_metadata(file_ops)
        source_mtime = self.source_meta.mtime
        asset_mtime = self.asset_meta.mtime
        if source_mtime == asset_mtime:
            return BindingState.SAME_AS_SOURCE
        if source_mtime < asset_mtime:
            return BindingState.NEWER_THAN_SOURCE
        return BindingState.OLDER_THAN_SOURCE

    def is_asset_up_to_date(
        self, refresh: bool = True, file_ops: Optional[FileOperations] = None
    ) -> bool:
        """Return True if both files exist and share a modification time."""
        state = self.get_state(refresh=refresh, file_ops=file_ops)
        return (
            self.source_meta.exists
            and self.asset_meta.exists
            and state == BindingState.SAME_AS_SOURCE
        )

    def consume_update_request(self) -> bool:
        """Return and clear the pending manual update request."""
        requested = self.request_update
        self.request_update = False
        return requested

    def to_dict(self) -> dict[str, Any]:
        """Convert binding to dictionary for JSON serialization."""
        return {
            "externalFilePath": self.external_path_stored,
            "assetPath": self.asset_path,
            "mode": self.mode.value,
            "autoUpdate": self.auto_update,
            "notifyBeforeUpdate": self.notify_before_update,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], data_path: str = "") -> "Binding":
        """Create Binding from dictionary and resolve its absolute paths.

        Args:
            data: Dictionary as produced by :meth:`to_dict`
            data_path: Absolute path the ``Assets`` root maps to

        Returns:
            Binding instance
        """
        binding = cls(
            external_path_stored=data.get("externalFilePath", ""),
            asset_path=data.get("assetPath", ""),
            mode=data.get("mode", SyncMode.SOURCE_TO_ASSET.value),
            auto_update=data.get("autoUpdate", True),
            notify_before_update=data.get("notifyBeforeUpdate", True),
            data_path=data_path,
        )
        if data_path:
            binding.regenerate_absolute_paths()
        return binding
