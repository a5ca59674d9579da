"""Create or refresh the base and workspace directory layouts."""

from __future__ import annotations

import logging
from pathlib import Path

from aipack.path_set import PathSet, find_workspace_root
from aipack.paths import AIPACK_DIR_NAME, SESSION_DIR_NAME, current_dir
from aipack.roots import BaseRoot

log = logging.getLogger(__name__)

BASE_CONFIG_TOML = """\
# This `~/.aipack-base/config.toml` file is the base config for all of the aipack
# workspaces (`.aipack/` container folders).

[default_options]
# `model` is required to run an agent. This is the fallback for any workspace
# that does not define its model in its own config.toml.
model = "gpt-4.1-mini"

# How many inputs can be processed at the same time (defaults to 1 if absent)
input_concurrency = 2

# Temperature (unset by default)
# temperature = 0.0

[default_options.model_aliases]
high = "o4-mini-high"
med = "o4-mini"
low = "o4-mini-low"
cheap = "gpt-4.1-nano"
"""

WORKSPACE_CONFIG_TOML = """\
# This `.aipack/config.toml` file overrides the base `~/.aipack-base/config.toml`.
# Any property from the base config.toml can be overridden here for this
# workspace (the parent directory of this .aipack/ directory).

[default_options]
# model = "gpt-4.1-mini"
# temperature = 0.0
# input_concurrency = 6
"""

SESSION_GITIGNORE_ENTRY = f"{AIPACK_DIR_NAME}/{SESSION_DIR_NAME}/"


def _write_if_missing(path: Path, content: str, created: list[str]) -> None:
    if path.exists():
        return
    path.write_text(content)
    created.append(str(path))


def _ensure_dir(path: Path, created: list[str]) -> None:
    if path.is_dir():
        return
    path.mkdir(parents=True, exist_ok=True)
    created.append(str(path))


def ensure_gitignore_entry(wks_root: Path) -> bool:
    """Add the session dir to ``.gitignore``; return True when written."""
    gitignore = wks_root / ".gitignore"
    if gitignore.exists():
        content = gitignore.read_text()
        for line in content.splitlines():
            stripped = line.strip()
            if stripped in (SESSION_GITIGNORE_ENTRY, SESSION_GITIGNORE_ENTRY.rstrip("/")):
                return False
        with open(gitignore, "a") as f:
            if content and not content.endswith("\n"):
                f.write("\n")
            f.write(f"{SESSION_GITIGNORE_ENTRY}\n")
    else:
        gitignore.write_text(f"{SESSION_GITIGNORE_ENTRY}\n")
    return True


def init_base(base_root: BaseRoot | None = None) -> tuple[BaseRoot, list[str]]:
    """Create ``~/.aipack-base`` with its config and pack dirs."""
    base_root = base_root if base_root is not None else BaseRoot.new()
    created: list[str] = []
    _ensure_dir(base_root.path, created)
    _write_if_missing(base_root.config_path(), BASE_CONFIG_TOML, created)
    _ensure_dir(base_root.pack_custom_dir(), created)
    _ensure_dir(base_root.pack_installed_dir(), created)
    _ensure_dir(base_root.pack_download_dir(), created)
    log.debug("Base init at %s created %d entries", base_root.path, len(created))
    return base_root, created


def init_workspace(ref_dir: Path | str | None = None) -> tuple[PathSet, list[str]]:
    """Create or refresh ``.aipack/`` for a workspace.

    The workspace is *ref_dir* when given, else the discovered workspace,
    else the current dir.
    """
    if ref_dir is not None:
        wks_root = Path(ref_dir)
    else:
        cwd = current_dir()
        wks_root = find_workspace_root(cwd) or cwd

    path_set = PathSet.from_workspace_root(wks_root)
    marker = path_set.workspace_marker
    assert marker is not None and path_set.workspace_root is not None

    created: list[str] = []
    _ensure_dir(marker.path, created)
    _write_if_missing(marker.config_path(), WORKSPACE_CONFIG_TOML, created)
    if ensure_gitignore_entry(path_set.workspace_root):
        created.append(str(path_set.workspace_root / ".gitignore"))
    log.debug("Workspace init at %s created %d entries", marker.path, len(created))
    return path_set, created
