"""Mount table models."""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class MountEntry:
    """A single active mount read from the live mount table.

    Attributes:
        source: Mount source token (device, bind source, or pseudo-fs name).
        target: Absolute mount point path with escapes decoded.
    """

    source: str
    target: str
