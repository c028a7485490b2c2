"""Filesystem operations used by the sync engine."""

import logging
import shutil
import stat
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class FileOperations:
    """Thin wrapper over stat/copy/delete with a common interface.

    Every method may raise ``OSError``; the sync engine catches it per binding.
    """

    def exists(self, path: PathLike) -> bool:
        """Return True if ``path`` is an existing file."""
        return Path(path).is_file()

    def stat(self, path: PathLike) -> tuple[bool, float]:
        """Stat a file.

        Args:
            path: Path of the file

        Returns:
            Tuple of (exists, last modification time). A missing file, or a
            path that is not a regular file, reports (False, 0.0).
        """
        try:
            path_stat = Path(path).stat()
        except (FileNotFoundError, NotADirectoryError):
            return False, 0.0
        if not stat.S_ISREG(path_stat.st_mode):
            return False, 0.0
        return True, path_stat.st_mtime

    def copy(self, source: PathLike, destination: PathLike) -> None:
        """Copy a file, preserving its modification time.

        Args:
            source: File to copy
            destination: Destination path; parent directories are created

        Raises:
            ValueError: If either path is empty
            IsADirectoryError: If the destination is an existing directory
        """
        if not str(source) or not str(destination):
            raise ValueError(
                f"Cannot copy with an empty path: {source!r} -> {destination!r}"
            )
        destination_path = Path(destination)
        if destination_path.is_dir():
            raise IsADirectoryError(f"Destination is a directory: {destination}")
        # Ensure parent directory exists
        destination_path.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, destination_path)
        logger.debug(f"Copied {source} -> {destination}")

    def delete(self, path: PathLike) -> None:
        """Delete a file permanently."""
        Path(path).unlink()
        logger.debug(f"Deleted {path}")
