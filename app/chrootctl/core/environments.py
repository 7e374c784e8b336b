"""Environment lookup on disk.

Resolves environment names to canonical paths and applies the
encrypted-storage alternate root when an environment carries the
encryption marker.
"""

import logging
from pathlib import Path

from chrootctl.core.settings import TeardownSettings
from chrootctl.models.environment import Environment

logger = logging.getLogger(__name__)


def environment_path(name: str, chroots_dir: Path) -> Path:
    """Map a name or path argument to an environment path.

    Arguments containing a slash are taken as paths; anything else is a
    name under the chroots directory.
    """
    if "/" in name:
        return Path(name)
    return chroots_dir / name


def resolve_environment(name: str, settings: TeardownSettings) -> Environment | None:
    """Resolve an environment name to an Environment.

    Args:
        name: Environment name or path.
        settings: Settings providing the chroots dir and encryption marker.

    Returns:
        Environment with canonical path and alternate root, or None if the
        environment does not exist.
    """
    path = environment_path(name, settings.chroots_dir)
    if not path.is_dir():
        logger.debug("Environment %s not found at %s", name, path)
        return None

    canonical = path.resolve()
    alternate: str | None = None
    if (canonical / settings.encrypted_marker).exists():
        alternate = str(settings.encrypted_mount_root / str(canonical).lstrip("/"))
        logger.debug("Environment %s is encrypted, mounted at %s", name, alternate)

    return Environment(
        name=canonical.name or name,
        path=str(path),
        canonical_path=str(canonical),
        alternate_root=alternate,
    )


def missing_environment(name: str, settings: TeardownSettings) -> Environment:
    """Build a placeholder Environment for a name that did not resolve.

    Args:
        name: Environment name or path as given.
        settings: Settings providing the chroots dir.

    Returns:
        Environment pointing at the absolute path that was looked up.
    """
    path = environment_path(name, settings.chroots_dir).absolute()
    return Environment(name=path.name or name, path=str(path), canonical_path=str(path))


def list_environments(chroots_dir: Path) -> list[str]:
    """List environment names under a chroots directory.

    Args:
        chroots_dir: Directory holding environments.

    Returns:
        Sorted directory names; empty if the directory does not exist.
    """
    if not chroots_dir.is_dir():
        return []
    return sorted(entry.name for entry in chroots_dir.iterdir() if entry.is_dir())
