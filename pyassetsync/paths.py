"""Path translation between absolute filesystem paths and virtual Assets paths.

All containment checks compare path segments rather than substrings, so a
root such as ``/proj/Assets`` never matches ``/proj/AssetsBackup``.
"""

import os
import posixpath

from .exceptions import PathOutsideRootError

# =============================================================================
# Constants
# =============================================================================

# Token every virtual (project-relative) path starts with
ASSETS_FOLDER_NAME: str = "Assets"

# Extension of the sibling metadata file kept next to each asset
META_FILE_EXTENSION: str = ".meta"


# =============================================================================
# Separator helpers
# =============================================================================


def unify_directory_separators(path: str) -> str:
    """Map both ``/`` and ``\\`` to the platform-specific separator.

    Args:
        path: Path to unify separators for

    Returns:
        Path with unified directory separators
    """
    return path.replace("/", os.sep).replace("\\", os.sep)


def _split_segments(path: str) -> list[str]:
    """Split a path into normalized segments.

    The first segment is kept even when empty, so absolute POSIX paths
    start with ``""`` and Windows paths start with their drive.
    """
    unified = path.replace("\\", "/").strip()
    if not unified:
        return []
    head, *rest = posixpath.normpath(unified).split("/")
    return [head] + [segment for segment in rest if segment]


def _is_segment_prefix(base: list[str], target: list[str]) -> bool:
    if len(base) > len(target):
        return False
    return all(
        os.path.normcase(a) == os.path.normcase(b) for a, b in zip(base, target)
    )


# =============================================================================
# Virtual root conversion
# =============================================================================


def to_virtual_relative(root_absolute: str, absolute_path: str) -> str:
    """Convert an absolute path to a virtual path starting with ``Assets``.

    Args:
        root_absolute: Absolute path of the directory the virtual root maps to
        absolute_path: Absolute path located under ``root_absolute``

    Returns:
        ``/``-separated virtual path, e.g. ``Assets/Textures/wood.png``

    Raises:
        PathOutsideRootError: If ``absolute_path`` is not under ``root_absolute``
    """
    root_segments = _split_segments(root_absolute)
    path_segments = _split_segments(absolute_path)
    if not root_segments or not _is_segment_prefix(root_segments, path_segments):
        raise PathOutsideRootError(absolute_path, root_absolute)
    return "/".join([ASSETS_FOLDER_NAME, *path_segments[len(root_segments) :]])


def to_absolute(root_absolute: str, virtual_path: str) -> str:
    """Convert a virtual ``Assets/...`` path to an absolute path.

    Args:
        root_absolute: Absolute path of the directory the virtual root maps to
        virtual_path: Path starting with ``Assets``

    Returns:
        Absolute path using platform separators

    Raises:
        PathOutsideRootError: If ``virtual_path`` does not start with ``Assets``
    """
    segments = _split_segments(virtual_path)
    if not segments or segments[0] != ASSETS_FOLDER_NAME:
        raise PathOutsideRootError(virtual_path, ASSETS_FOLDER_NAME)
    return os.path.normpath(
        os.path.join(unify_directory_separators(root_absolute), *segments[1:])
    )


# =============================================================================
# Base-relative conversion
# =============================================================================


def is_relative_path(path: str) -> bool:
    """Return True if ``path`` is a ``.``-prefixed relative path."""
    return path == "." or path.startswith(("./", ".\\"))


def to_relative_from_base(base_absolute: str, target_absolute: str) -> str:
    """Compute a ``.``-prefixed relative path from a base directory to a target.

    The base is walked upwards one segment at a time, adding ``..`` for every
    step, until it contains the target.

    Args:
        base_absolute: Absolute directory to compute the path from
        target_absolute: Absolute path to compute the path to

    Returns:
        Relative path such as ``./../external/file.txt``. If base and target
        share no common ancestor (e.g. different drives), ``target_absolute``
        is returned unchanged; use :func:`is_relative_path` to detect this.
    """
    base_segments = _split_segments(base_absolute)
    target_segments = _split_segments(target_absolute)

    levels_up = 0
    while base_segments:
        if _is_segment_prefix(base_segments, target_segments):
            remainder = target_segments[len(base_segments) :]
            return "/".join([".", *[".."] * levels_up, *remainder])
        base_segments = base_segments[:-1]
        levels_up += 1

    return target_absolute


def to_absolute_from_relative(base_absolute: str, relative_path: str) -> str:
    """Resolve a ``.``-prefixed relative path against a base directory.

    Args:
        base_absolute: Absolute directory the path is relative to
        relative_path: Path produced by :func:`to_relative_from_base`

    Returns:
        Normalized absolute path. A path that could not be relativized is
        returned normalized as-is.
    """
    if not is_relative_path(relative_path):
        return os.path.normpath(unify_directory_separators(relative_path))
    return os.path.normpath(
        unify_directory_separators(base_absolute)
        + unify_directory_separators(relative_path[1:])
    )


def get_meta_file_path(path: str) -> str:
    """Return the path of the metadata file kept next to ``path``."""
    return f"{path}{META_FILE_EXTENSION}"
