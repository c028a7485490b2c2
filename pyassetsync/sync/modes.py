"""Sync modes and binding states."""

from enum import Enum


class SyncMode(str, Enum):
    """Direction(s) in which a binding may be synchronized."""

    SOURCE_TO_ASSET = "sourceToAsset"
    """Asset is updated from the external source file"""

    ASSET_TO_SOURCE = "assetToSource"
    """External source file is updated from the asset"""

    TWO_WAY = "twoWay"
    """Whichever side is newer overwrites the other"""

    @classmethod
    def from_string(cls, value: str) -> "SyncMode":
        """Parse a sync mode from its name or abbreviation.

        Args:
            value: Mode value (e.g. "twoWay"), enum name (e.g. "TWO_WAY")
                or abbreviation ("sta", "ats", "tw")

        Returns:
            Matching SyncMode

        Raises:
            ValueError: If the value doesn't name a sync mode
        """
        normalized = value.strip()
        abbreviations = {
            "sta": cls.SOURCE_TO_ASSET,
            "ats": cls.ASSET_TO_SOURCE,
            "tw": cls.TWO_WAY,
        }
        if normalized.lower() in abbreviations:
            return abbreviations[normalized.lower()]

        for mode in cls:
            if normalized.lower() in (mode.value.lower(), mode.name.lower()):
                return mode

        valid = ", ".join(mode.value for mode in cls)
        raise ValueError(f"Invalid sync mode: {value}. Valid modes: {valid}")

    @property
    def updates_asset(self) -> bool:
        """Whether the asset may be overwritten from the source."""
        return self in (SyncMode.SOURCE_TO_ASSET, SyncMode.TWO_WAY)

    @property
    def updates_source(self) -> bool:
        """Whether the source may be overwritten from the asset."""
        return self in (SyncMode.ASSET_TO_SOURCE, SyncMode.TWO_WAY)

    @property
    def requires_source(self) -> bool:
        return self == SyncMode.SOURCE_TO_ASSET

    @property
    def requires_asset(self) -> bool:
        return self == SyncMode.ASSET_TO_SOURCE

    def __str__(self) -> str:
        return self.value


class BindingState(str, Enum):
    """Asset modification state relative to its source file."""

    OLDER_THAN_SOURCE = "olderThanSource"
    SAME_AS_SOURCE = "sameAsSource"
    NEWER_THAN_SOURCE = "newerThanSource"
