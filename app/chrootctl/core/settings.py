"""Teardown settings and their TOML storage.

Settings are stored in ~/.config/chrootctl/config.toml. Every key is
optional; a missing file yields the defaults. Command-line flags override
the loaded values for a single run.
"""

import logging
import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from chrootctl.core.paths import DEFAULT_CHROOTS_DIR, get_settings_path

logger = logging.getLogger(__name__)


class TeardownSettings(BaseModel):
    """Configuration for environment teardown.

    Attributes:
        chroots_dir: Directory holding the environments.
        retries: Consecutive failed unmount passes before asking what to do.
            None means patient: never ask, keep retrying.
        pause_seconds: Pause between unmount passes.
        core_marker: KEY=VALUE environment entry marking infrastructure
            helpers that never block teardown.
        shared_mounts: Bind points, relative to an environment root, that
            must be switched to slave propagation before unmounting.
        encrypted_marker: File whose presence marks an encrypted environment.
        encrypted_mount_root: Directory under which encrypted environments
            are actually mounted.
        symlink_policy: Restricted-symlink policy file holding the shared
            exemption for the chroots directory, if the host has one.
    """

    model_config = ConfigDict(extra="forbid")

    chroots_dir: Path = DEFAULT_CHROOTS_DIR
    retries: Annotated[
        int | None,
        Field(ge=1, description="Failed passes before escalation (None = patient)"),
    ] = 5
    pause_seconds: Annotated[
        float,
        Field(gt=0, le=10, description="Pause between unmount passes"),
    ] = 0.1
    core_marker: str = "CHROOTCTL=CORE"
    shared_mounts: list[str] = Field(default_factory=lambda: ["var/host/media"])
    encrypted_marker: str = ".ecryptfs"
    encrypted_mount_root: Path = Path("/run/chrootctl/encrypted")
    symlink_policy: Path | None = None

    @field_validator("core_marker")
    @classmethod
    def validate_core_marker(cls, v: str) -> str:
        """Require a non-empty KEY=VALUE pair."""
        key, sep, _ = v.partition("=")
        if not sep or not key:
            msg = f"core_marker must be KEY=VALUE, got {v!r}"
            raise ValueError(msg)
        return v

    @field_validator("shared_mounts")
    @classmethod
    def validate_shared_mounts(cls, v: list[str]) -> list[str]:
        """Normalize bind points to relative paths."""
        return [p.strip("/") for p in v if p.strip("/")]


class SettingsError(Exception):
    """Base exception for settings errors."""


class SettingsParseError(SettingsError):
    """Raised when the settings file is not valid TOML."""


def load_settings(path: Path | None = None) -> TeardownSettings:
    """Load teardown settings from a TOML file.

    Args:
        path: Path to the settings file. If None, uses the default path.

    Returns:
        Validated TeardownSettings. Defaults if the file does not exist.

    Raises:
        SettingsParseError: If the TOML syntax is invalid.
        SettingsError: If the file cannot be read or fails validation.
    """
    settings_path = path or get_settings_path()

    if not settings_path.exists():
        logger.debug("No settings file at %s, using defaults", settings_path)
        return TeardownSettings()

    try:
        with open(settings_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise SettingsParseError(f"Invalid TOML syntax in {settings_path}: {e}") from e
    except OSError as e:
        raise SettingsError(f"Failed to read settings: {e}") from e

    # TOML has no null; "patient" spells unlimited retries
    if data.get("retries") == "patient":
        data["retries"] = None

    try:
        return TeardownSettings.model_validate(data)
    except ValidationError as e:
        raise SettingsError(f"Invalid settings in {settings_path}: {e}") from e


def save_settings(settings: TeardownSettings, path: Path | None = None) -> Path:
    """Save teardown settings to a TOML file atomically.

    Args:
        settings: Settings to save.
        path: Destination. If None, uses the default path.

    Returns:
        Path where the settings were saved.

    Raises:
        SettingsError: If the file cannot be written.
    """
    settings_path = path or get_settings_path()
    settings_path.parent.mkdir(parents=True, exist_ok=True)

    data = settings_to_dict(settings)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=settings_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(settings_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise SettingsError(f"Failed to write settings: {e}") from e

    return settings_path


def settings_to_dict(settings: TeardownSettings) -> dict[str, object]:
    """Convert settings to a TOML-serializable dictionary.

    Args:
        settings: Settings to convert.

    Returns:
        Dictionary with paths as strings and no None values.
    """
    result: dict[str, object] = {
        "chroots_dir": str(settings.chroots_dir),
        "retries": settings.retries if settings.retries is not None else "patient",
        "pause_seconds": settings.pause_seconds,
        "core_marker": settings.core_marker,
        "shared_mounts": list(settings.shared_mounts),
        "encrypted_marker": settings.encrypted_marker,
        "encrypted_mount_root": str(settings.encrypted_mount_root),
    }
    if settings.symlink_policy is not None:
        result["symlink_policy"] = str(settings.symlink_policy)
    return result
