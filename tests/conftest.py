"""Shared fixtures: isolated home dir, workspace and path contexts."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from aipack.context import PathContext
from aipack.path_set import PathSet


@pytest.fixture()
def home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """``Path.home()`` → ``<tmp>/home`` (created)."""
    home_dir = tmp_path.resolve() / "home"
    home_dir.mkdir()
    monkeypatch.setattr(Path, "home", staticmethod(lambda: home_dir))
    return home_dir


@pytest.fixture()
def base_dir(home: Path) -> Path:
    """``~/.aipack-base`` (created)."""
    base = home / ".aipack-base"
    base.mkdir()
    return base


@pytest.fixture()
def workspace(tmp_path: Path, home: Path) -> Path:
    """A project dir with an initialized ``.aipack/`` marker."""
    wks = tmp_path.resolve() / "proj"
    (wks / ".aipack").mkdir(parents=True)
    return wks


@pytest.fixture()
def wks_ctx(workspace: Path, home: Path) -> PathContext:
    """Context rooted at the workspace, with cwd at ``<workspace>/src``."""
    cwd = workspace / "src"
    cwd.mkdir()
    return PathContext(
        home_dir=home,
        current_dir=cwd,
        path_set=PathSet.from_workspace_root(workspace),
    )


@pytest.fixture()
def no_wks_ctx(tmp_path: Path, home: Path) -> PathContext:
    """Context without any workspace."""
    cwd = tmp_path.resolve() / "elsewhere"
    cwd.mkdir()
    return PathContext(home_dir=home, current_dir=cwd, path_set=PathSet.base_only())


@pytest.fixture()
def make_pack() -> Callable[[Path, str, str], Path]:
    """Create `<repo_dir>/<namespace>/<name>` holding one agent file."""

    def _make(repo_dir: Path, namespace: str, name: str) -> Path:
        pack = repo_dir / namespace / name
        pack.mkdir(parents=True)
        (pack / "main.aip").write_text("# agent\n")
        return pack

    return _make
