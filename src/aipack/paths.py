"""Canonical names and OS lookups for aipack directories."""

from __future__ import annotations

from pathlib import Path

from aipack.errors import ConfigurationError, PathUnresolvable

AIPACK_BASE = ".aipack-base"
AIPACK_DIR_NAME = ".aipack"
CONFIG_FILE_NAME = "config.toml"

PACK_CUSTOM = Path("pack") / "custom"
PACK_INSTALLED = Path("pack") / "installed"
PACK_DOWNLOAD = Path("pack") / "download"
SUPPORT_PACK = Path("support") / "pack"

SESSION_DIR_NAME = ".session"
TMP_DIR_NAME = "tmp"
TMP_PREFIX = "$tmp"


def home_dir() -> Path:
    """Return the user home directory, which must exist."""
    try:
        home = Path.home()
    except RuntimeError as exc:
        raise ConfigurationError(f"No home dir found, cannot locate ~/{AIPACK_BASE}") from exc
    if not home.exists():
        raise ConfigurationError(f"Home dir '{home}' does not exist", raw=str(home))
    return home


def current_dir() -> Path:
    """Return the canonical process working directory."""
    try:
        return Path.cwd().resolve(strict=True)
    except OSError as exc:
        raise PathUnresolvable(f"Cannot read current dir: {exc}") from exc
