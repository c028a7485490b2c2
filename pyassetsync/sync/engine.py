"""Core sync engine for executing binding synchronization."""

import logging
from typing import Callable, Optional, Protocol

from ..exceptions import MissingMandatoryFileError, SettingsError
from .binding import Binding
from .comparator import BindingComparator, SyncAction, SyncDecision, SyncDirection
from .operations import FileOperations
from .state import SettingsManager
from .store import BindingStore

logger = logging.getLogger(__name__)


class ConfirmationPrompt(Protocol):
    """Asks the user a yes/no question."""

    def confirm(self, title: str, message: str) -> bool: ...


def _new_stats() -> dict:
    return {
        "updates": 0,
        "creates": 0,
        "skips": 0,
        "errors": 0,
        "declined": 0,
    }


class SyncEngine:
    """Core sync engine that synchronizes every eligible binding on each tick.

    The engine is single-threaded: a tick runs to completion, evaluating
    bindings in store order, and a confirmation prompt blocks until answered.
    """

    def __init__(
        self,
        store: BindingStore,
        file_ops: Optional[FileOperations] = None,
        prompt: Optional[ConfirmationPrompt] = None,
        on_refresh: Optional[Callable[[], None]] = None,
        persistence: Optional[SettingsManager] = None,
    ):
        """Initialize sync engine.

        Args:
            store: Bindings and global flags to synchronize
            file_ops: Filesystem operations (defaults to FileOperations)
            prompt: Confirmation prompt for automatic updates. Without one,
                bindings needing a confirmation are skipped.
            on_refresh: Called after every successful copy
            persistence: Used to save the store after flag changes
        """
        self.store = store
        self.file_ops = file_ops or FileOperations()
        self.prompt = prompt
        self.on_refresh = on_refresh
        self.persistence = persistence
        self.comparator = BindingComparator()

    def tick(self) -> dict:
        """Run one synchronization pass over all bindings.

        Returns:
            Dictionary with sync statistics

        Examples:
            >>> engine = SyncEngine(store, prompt=prompt)
            >>> stats = engine.tick()
            >>> print(f"Updated {stats['updates']} file(s)")
        """
        stats = _new_stats()
        if not self.store.auto_synchronization:
            logger.debug("Auto synchronization disabled, skipping tick")
            return stats

        for binding in self.store:
            if not (binding.auto_update or binding.request_update):
                continue
            manual = binding.consume_update_request()
            self._sync_binding(binding, manual, stats)

        return stats

    def update_binding(self, binding: Binding) -> dict:
        """Synchronize a single binding right away as a manual update.

        Unlike :meth:`tick` this ignores the global auto synchronization
        switch and the binding's auto update flag, and never asks for
        confirmation.

        Returns:
            Dictionary with sync statistics
        """
        stats = _new_stats()
        binding.consume_update_request()
        self._sync_binding(binding, True, stats)
        return stats

    def plan(self, binding: Binding) -> list[SyncDecision]:
        """Refresh a binding and return the decisions a tick would take.

        Raises:
            MissingMandatoryFileError: If the file required by the mode is missing
        """
        binding.refresh_metadata(self.file_ops)
        return self.comparator.compare(binding)

    def _sync_binding(self, binding: Binding, manual: bool, stats: dict) -> None:
        try:
            decisions = self.plan(binding)
        except MissingMandatoryFileError as e:
            logger.error(f"Skipping {binding.asset_path}: {e}")
            stats["errors"] += 1
            return
        except OSError as e:
            logger.error(
                f"Failed to read file information for {binding.asset_path}: {e}"
            )
            stats["errors"] += 1
            return

        for decision in decisions:
            if decision.action == SyncAction.SKIP:
                logger.debug(f"Skipping {binding.asset_path}: {decision.reason}")
                stats["skips"] += 1
                continue

            if not self._should_proceed(decision, manual):
                if self.prompt is None:
                    logger.warning(
                        f"Confirmation required for {binding.asset_path} "
                        f"but no prompt is available"
                    )
                    stats["skips"] += 1
                else:
                    self._disable_auto_update(binding)
                    stats["declined"] += 1
                break

            if self._apply(decision):
                key = "updates" if decision.action == SyncAction.UPDATE else "creates"
                stats[key] += 1
            else:
                stats["errors"] += 1

    def _should_proceed(self, decision: SyncDecision, manual: bool) -> bool:
        binding = decision.binding
        if (
            manual
            or not self.store.notify_before_update
            or not binding.notify_before_update
        ):
            return True
        if self.prompt is None:
            return False
        title, message = self._confirmation_text(decision)
        return self.prompt.confirm(title, message)

    @staticmethod
    def _confirmation_text(decision: SyncDecision) -> tuple[str, str]:
        binding = decision.binding
        suffix = "If you refuse, automatic update will be disabled."
        if decision.direction == SyncDirection.SOURCE_TO_ASSET:
            title = "External asset modified"
            if decision.action == SyncAction.CREATE:
                message = (
                    f"There is no corresponding asset at path: {binding.asset_path}\n"
                    f"Should it be created now? {suffix}"
                )
            else:
                message = (
                    f"External asset version is newer than asset at path: "
                    f"{binding.asset_path}\nShould asset be updated? {suffix}"
                )
        else:
            title = "Asset modified"
            if decision.action == SyncAction.CREATE:
                message = (
                    f"There is no external file at path: {binding.external_path}\n"
                    f"Should it be created from {binding.asset_path}? {suffix}"
                )
            else:
                message = (
                    f"Asset {binding.asset_path} is newer than external file: "
                    f"{binding.external_path}\nShould external file be updated? "
                    f"{suffix}"
                )
        return title, message

    def _disable_auto_update(self, binding: Binding) -> None:
        logger.warning(
            f"Update of {binding.asset_path} refused, automatic update disabled"
        )
        self.store.set_auto_update(binding, False)
        if self.persistence is None:
            return
        try:
            self.persistence.save_if_dirty(self.store)
        except SettingsError as e:
            logger.error(f"Failed to save settings: {e}")

    def _apply(self, decision: SyncDecision) -> bool:
        """Execute a copy decision.

        The destination is deleted before copying when it exists. If the copy
        fails after the delete, the destination stays absent and the next
        tick recreates it.

        Returns:
            True if the copy succeeded
        """
        source = decision.source_path
        destination = decision.destination_path
        try:
            if decision.action == SyncAction.UPDATE and decision.destination_exists:
                self.file_ops.delete(destination)
            self.file_ops.copy(source, destination)
        except (OSError, ValueError) as e:
            logger.error(
                f"Error during external asset {decision.action.value} "
                f"({decision.direction.value}) of {decision.binding.asset_path}: {e}"
            )
            return False

        logger.info(
            f"{decision.action.value.capitalize()}d {destination} from {source}"
        )
        if self.on_refresh is not None:
            try:
                self.on_refresh()
            except Exception as e:
                # The copy already happened; only the host refresh failed
                logger.error(
                    f"Refresh after syncing {decision.binding.asset_path} failed: {e}"
                )
        return True
