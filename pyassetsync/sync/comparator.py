"""Binding comparison logic for sync operations."""

from dataclasses import dataclass
from enum import Enum

from ..exceptions import MissingMandatoryFileError
from .binding import Binding
from .modes import BindingState, SyncMode


class SyncAction(str, Enum):
    """Actions that can be taken for a binding during a tick."""

    UPDATE = "update"
    """Overwrite the existing destination file"""

    CREATE = "create"
    """Copy into a destination that doesn't exist yet"""

    SKIP = "skip"
    """Skip binding (no action needed or allowed)"""


class SyncDirection(str, Enum):
    """Direction of a copy."""

    SOURCE_TO_ASSET = "sourceToAsset"
    ASSET_TO_SOURCE = "assetToSource"


@dataclass
class SyncDecision:
    """Represents a decision about how to sync a binding."""

    action: SyncAction
    """Action to take"""

    reason: str
    """Human-readable reason for this decision"""

    binding: Binding
    """Binding the decision applies to"""

    direction: SyncDirection = SyncDirection.SOURCE_TO_ASSET
    """Direction of the copy (meaningless for SKIP)"""

    @property
    def source_path(self) -> str:
        """Absolute path of the file copied from."""
        if self.direction == SyncDirection.SOURCE_TO_ASSET:
            return self.binding.external_path
        return self.binding.asset_absolute_path

    @property
    def destination_path(self) -> str:
        """Absolute path of the file copied to."""
        if self.direction == SyncDirection.SOURCE_TO_ASSET:
            return self.binding.asset_absolute_path
        return self.binding.external_path

    @property
    def destination_exists(self) -> bool:
        if self.direction == SyncDirection.SOURCE_TO_ASSET:
            return self.binding.asset_meta.exists
        return self.binding.source_meta.exists


class BindingComparator:
    """Decides which copies a binding needs based on its cached metadata.

    The binding's metadata must be refreshed by the caller; the comparator
    never touches the filesystem.
    """

    def compare(self, binding: Binding) -> list[SyncDecision]:
        """Determine the sync actions for a binding.

        Args:
            binding: Binding with freshly refreshed metadata

        Returns:
            List of SyncDecision objects, a single SKIP if nothing is to be done

        Raises:
            MissingMandatoryFileError: If the file required by the mode is missing
        """
        self._check_preconditions(binding)

        mode = binding.mode
        state = binding.get_state(refresh=False)
        decisions: list[SyncDecision] = []

        if mode.updates_asset:
            if binding.asset_meta.exists:
                if state == BindingState.OLDER_THAN_SOURCE:
                    decisions.append(
                        SyncDecision(
                            action=SyncAction.UPDATE,
                            reason="Source file is newer than asset",
                            binding=binding,
                            direction=SyncDirection.SOURCE_TO_ASSET,
                        )
                    )
            else:
                decisions.append(
                    SyncDecision(
                        action=SyncAction.CREATE,
                        reason="No corresponding asset yet",
                        binding=binding,
                        direction=SyncDirection.SOURCE_TO_ASSET,
                    )
                )
            if mode == SyncMode.TWO_WAY and state == BindingState.NEWER_THAN_SOURCE:
                decisions.append(self._asset_to_source(binding))

        elif mode == SyncMode.ASSET_TO_SOURCE:
            if not binding.source_meta.exists or (
                state == BindingState.NEWER_THAN_SOURCE
            ):
                decisions.append(self._asset_to_source(binding))

        if decisions:
            return decisions

        return [
            SyncDecision(
                action=SyncAction.SKIP,
                reason=self._skip_reason(mode, state),
                binding=binding,
            )
        ]

    def _check_preconditions(self, binding: Binding) -> None:
        mode = binding.mode
        # Every mode copies between both sides, so both paths must be resolved
        if not binding.external_path:
            raise MissingMandatoryFileError(
                f"<no external file path for {binding.asset_path}>", mode.value
            )
        if not binding.asset_absolute_path:
            raise MissingMandatoryFileError(
                f"<no asset path for {binding.external_path_stored}>", mode.value
            )
        if mode.requires_source and not binding.source_meta.exists:
            raise MissingMandatoryFileError(binding.external_path, mode.value)
        if mode.requires_asset and not binding.asset_meta.exists:
            raise MissingMandatoryFileError(binding.asset_absolute_path, mode.value)
        if (
            mode == SyncMode.TWO_WAY
            and not binding.source_meta.exists
            and not binding.asset_meta.exists
        ):
            raise MissingMandatoryFileError(
                f"{binding.external_path} and {binding.asset_absolute_path}",
                mode.value,
            )

    def _asset_to_source(self, binding: Binding) -> SyncDecision:
        if binding.source_meta.exists:
            return SyncDecision(
                action=SyncAction.UPDATE,
                reason="Asset is newer than source file",
                binding=binding,
                direction=SyncDirection.ASSET_TO_SOURCE,
            )
        return SyncDecision(
            action=SyncAction.CREATE,
            reason="No corresponding source file yet",
            binding=binding,
            direction=SyncDirection.ASSET_TO_SOURCE,
        )

    @staticmethod
    def _skip_reason(mode: SyncMode, state: BindingState) -> str:
        if state == BindingState.SAME_AS_SOURCE:
            return "Files are in sync"
        if state == BindingState.NEWER_THAN_SOURCE:
            return f"Asset is newer but sync mode {mode.value} prevents action"
        return f"Source is newer but sync mode {mode.value} prevents action"
