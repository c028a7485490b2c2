"""Adapters connecting the sync engine collaborators to the terminal."""

import logging

import click

from ..output import OutputFormatter

logger = logging.getLogger(__name__)


class ClickConfirmationPrompt:
    """Confirmation prompt backed by ``click.confirm``.

    Implements the engine's ConfirmationPrompt protocol. With ``assume_yes``
    every question is answered with yes without prompting.
    """

    def __init__(self, out: OutputFormatter, assume_yes: bool = False):
        self.out = out
        self.assume_yes = assume_yes

    def confirm(self, title: str, message: str) -> bool:
        if self.assume_yes:
            logger.debug(f"Auto-confirmed: {title}")
            return True
        self.out.warning(title)
        return click.confirm(message, default=False)


class AssetRefreshNotifier:
    """Refresh callback fired by the engine after every successful copy."""

    def __init__(self) -> None:
        self.count = 0

    def __call__(self) -> None:
        self.count += 1
        logger.debug(f"Asset database refresh #{self.count}")
