"""Environment model.

An environment is an existing chroot directory whose bind-mounted tree
is torn down by chrootctl. It is never created here.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class Environment:
    """A chroot environment identified by name and path.

    Attributes:
        name: Short environment name (directory name under the chroots dir).
        path: Nominal path as given by the caller.
        canonical_path: Path with symlinks resolved, used for containment.
        alternate_root: Underlying mount root when the nominal path is an
            overlay (e.g. encrypted storage), or None.
    """

    name: str
    path: str
    canonical_path: str
    alternate_root: str | None = field(default=None)

    def __post_init__(self) -> None:
        """Validate environment data after initialization."""
        if not self.name:
            msg = "Environment name cannot be empty"
            raise ValueError(msg)
        if not self.canonical_path.startswith("/"):
            msg = f"Canonical path must be absolute, got {self.canonical_path!r}"
            raise ValueError(msg)

    @property
    def mount_root(self) -> str:
        """Root that teardown acts on: the alternate root when one is set."""
        return self.alternate_root or self.canonical_path
