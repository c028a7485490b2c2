"""Ordered collection of bindings plus global synchronization flags."""

import logging
from collections.abc import Iterator
from typing import Any, Optional, Union

from ..exceptions import BindingExistsError, BindingNotFoundError
from .binding import Binding
from .modes import SyncMode

logger = logging.getLogger(__name__)


class BindingStore:
    """Stores bindings between external files and assets.

    Every mutation marks the store dirty so the persistence layer knows it
    has to be saved.
    """

    def __init__(
        self,
        data_path: str,
        auto_synchronization: bool = True,
        notify_before_update: bool = True,
    ):
        """Initialize binding store.

        Args:
            data_path: Absolute path the virtual ``Assets`` root maps to
            auto_synchronization: Global switch for automatic synchronization
            notify_before_update: Global switch for update confirmations
        """
        self.data_path = data_path
        self.auto_synchronization = auto_synchronization
        self.notify_before_update = notify_before_update
        self.dirty = False
        self._bindings: list[Binding] = []

    def __iter__(self) -> Iterator[Binding]:
        # Iterate over a snapshot so bindings can be unregistered mid-iteration
        return iter(list(self._bindings))

    def __len__(self) -> int:
        return len(self._bindings)

    @property
    def bindings(self) -> list[Binding]:
        """Registered bindings in insertion order."""
        return list(self._bindings)

    def mark_dirty(self) -> None:
        self.dirty = True

    def contains_asset(self, asset_path: str) -> bool:
        """Check if the asset already has a related binding.

        Args:
            asset_path: Virtual ``Assets/...`` path (compared verbatim)

        Returns:
            True if a binding exists for this asset path
        """
        return any(binding.asset_path == asset_path for binding in self._bindings)

    def find_by_asset(self, asset_path: str) -> Binding:
        """Return the binding registered for ``asset_path``.

        Raises:
            BindingNotFoundError: If no binding matches
        """
        for binding in self._bindings:
            if binding.asset_path == asset_path:
                return binding
        raise BindingNotFoundError(f"No binding registered for asset: {asset_path}")

    def register(
        self,
        external_absolute_path: str,
        asset_path: str,
        mode: Union[SyncMode, str] = SyncMode.SOURCE_TO_ASSET,
        auto_update: bool = True,
        notify_before_update: bool = True,
    ) -> Binding:
        """Register a new binding.

        Args:
            external_absolute_path: Absolute path of the external file
            asset_path: Virtual ``Assets/...`` path of the asset
            mode: Sync mode of the new binding
            auto_update: Whether automatic ticks process the binding
            notify_before_update: Whether to confirm automatic updates

        Returns:
            The registered Binding

        Raises:
            BindingExistsError: If the asset already has a binding
        """
        if self.contains_asset(asset_path):
            raise BindingExistsError(f"Asset already has a binding: {asset_path}")

        binding = Binding.create(
            external_absolute_path,
            asset_path,
            self.data_path,
            mode=mode,
            auto_update=auto_update,
            notify_before_update=notify_before_update,
        )
        self._bindings.append(binding)
        self.mark_dirty()
        logger.info(f"Registered binding {binding.external_path} -> {asset_path}")
        return binding

    def add(self, binding: Binding) -> None:
        """Append an already constructed binding (used when loading)."""
        if self.contains_asset(binding.asset_path):
            raise BindingExistsError(
                f"Asset already has a binding: {binding.asset_path}"
            )
        binding.data_path = self.data_path
        self._bindings.append(binding)

    def unregister(self, binding: Binding) -> None:
        """Unregister a binding. Neither file is deleted.

        Raises:
            ValueError: If the binding is not part of this store
        """
        for index, registered in enumerate(self._bindings):
            if registered is binding:
                del self._bindings[index]
                self.mark_dirty()
                logger.info(f"Unregistered binding for {binding.asset_path}")
                return
        raise ValueError(f"Binding is not registered: {binding.asset_path}")

    def request_update(self, binding: Binding) -> None:
        """Queue a one-shot manual update for the next tick."""
        binding.request_update = True

    def set_auto_update(self, binding: Binding, enabled: bool) -> None:
        binding.auto_update = enabled
        self.mark_dirty()

    def set_notify_before_update(self, binding: Binding, enabled: bool) -> None:
        binding.notify_before_update = enabled
        self.mark_dirty()

    def set_mode(self, binding: Binding, mode: Union[SyncMode, str]) -> None:
        if not isinstance(mode, SyncMode):
            mode = SyncMode.from_string(mode)
        binding.mode = mode
        self.mark_dirty()

    def set_auto_synchronization(self, enabled: bool) -> None:
        self.auto_synchronization = enabled
        self.mark_dirty()

    def set_global_notify(self, enabled: bool) -> None:
        self.notify_before_update = enabled
        self.mark_dirty()

    def to_dict(self) -> dict[str, Any]:
        """Convert store to dictionary for JSON serialization."""
        return {
            "autoSynchronization": self.auto_synchronization,
            "notifyBeforeUpdate": self.notify_before_update,
            "externalAssets": [binding.to_dict() for binding in self._bindings],
        }

    @classmethod
    def from_dict(
        cls, data: dict[str, Any], data_path: Optional[str] = None
    ) -> "BindingStore":
        """Create BindingStore from dictionary.

        Absolute paths of every binding are regenerated against ``data_path``.
        """
        store = cls(
            data_path=data_path or "",
            auto_synchronization=data.get("autoSynchronization", True),
            notify_before_update=data.get("notifyBeforeUpdate", True),
        )
        for item in data.get("externalAssets", []):
            store.add(Binding.from_dict(item, data_path=store.data_path))
        return store
