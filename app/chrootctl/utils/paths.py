"""Path containment helpers."""

import posixpath


def normalize(path: str) -> str:
    """Normalize an absolute path and strip any trailing slash (except '/')."""
    normalized = posixpath.normpath(path)
    # normpath keeps a leading '//' per POSIX
    if normalized.startswith("//"):
        normalized = "/" + normalized.lstrip("/")
    return normalized


def is_within(path: str, root: str) -> bool:
    """Check if path is root itself or a descendant of it.

    Comparison is purely textual on normalized paths; callers pass
    canonical (symlink-resolved) paths.

    Args:
        path: Path to test.
        root: Containing directory.

    Returns:
        True if path equals root or lies beneath it.
    """
    path = normalize(path)
    root = normalize(root)
    if root == "/":
        return path.startswith("/")
    return path == root or path.startswith(root + "/")
