"""Console styles for chrootctl output.

Every style the CLI prints with has a built-in default. A user can restyle
any of them from a ``[styles]`` table in ~/.config/chrootctl/theme.toml,
for example::

    [styles]
    process_blocker = "bold red"
    muted = "grey50"

Unknown names and unparsable style strings are ignored with a warning.
"""

import logging
import tomllib
from functools import lru_cache
from pathlib import Path

from rich.errors import StyleSyntaxError
from rich.style import Style
from rich.theme import Theme

from chrootctl.core.paths import get_user_theme_path

logger = logging.getLogger(__name__)

DEFAULT_STYLES: dict[str, str] = {
    "muted": "#b2bec3",
    "dim": "#b2bec3",
    "bold_header": "bold #69B9A1",
    "border": "#29526d",
    "success": "#03b971",
    "warning": "#f5b332",
    "error": "bold #f53263",
    "info": "#0ec1c8",
    # Process tables: helpers versus processes that keep an environment busy
    "process_core": "#226666",
    "process_blocker": "bold #f5b332",
}


def read_style_overrides(path: Path) -> dict[str, str]:
    """Read valid style overrides from a theme file.

    Args:
        path: TOML file with an optional ``[styles]`` table.

    Returns:
        Style name to style string for every usable entry; empty if the
        file is missing or unreadable.
    """
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError:
        return {}
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("Ignoring theme file %s: %s", path, e)
        return {}

    table = data.get("styles", {})
    if not isinstance(table, dict):
        logger.warning("Ignoring theme file %s: [styles] must be a table", path)
        return {}

    overrides: dict[str, str] = {}
    for name, value in table.items():
        if name not in DEFAULT_STYLES:
            logger.warning("Unknown style %r in %s", name, path)
            continue
        if not isinstance(value, str):
            logger.warning("Style %r in %s must be a string", name, path)
            continue
        try:
            Style.parse(value)
        except StyleSyntaxError as e:
            logger.warning("Invalid style %r in %s: %s", name, path, e)
            continue
        overrides[name] = value
    return overrides


def build_theme(overrides: dict[str, str] | None = None) -> Theme:
    """Build the Rich theme from the defaults plus overrides."""
    return Theme({**DEFAULT_STYLES, **(overrides or {})})


@lru_cache(maxsize=1)
def get_theme() -> Theme:
    """Theme for the shared consoles, read once per process."""
    return build_theme(read_style_overrides(get_user_theme_path()))
