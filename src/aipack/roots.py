"""Typed wrappers for the two aipack roots.

``BaseRoot`` is the user-wide ``~/.aipack-base`` and ``WorkspaceMarker`` is
the per-project ``<workspace>/.aipack``. Both expose only explicit accessors
(``path``, ``exists()``, ``join()``) so a call site always states which root
it joins against. Neither asserts existence on construction.
"""

from __future__ import annotations

from pathlib import Path

from aipack.paths import (
    AIPACK_BASE,
    AIPACK_DIR_NAME,
    CONFIG_FILE_NAME,
    PACK_CUSTOM,
    PACK_DOWNLOAD,
    PACK_INSTALLED,
    SESSION_DIR_NAME,
    SUPPORT_PACK,
    TMP_DIR_NAME,
    home_dir,
)


class BaseRoot:
    """Absolute path of ``~/.aipack-base``."""

    __slots__ = ("_path",)

    def __init__(self, path: Path):
        self._path = path

    @classmethod
    def new(cls, home: Path | None = None) -> BaseRoot:
        """Build from the home directory (looked up when not given)."""
        return cls((home if home is not None else home_dir()) / AIPACK_BASE)

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.exists()

    def join(self, leaf: str | Path) -> Path:
        return self._path / leaf

    def config_path(self) -> Path:
        return self.join(CONFIG_FILE_NAME)

    def pack_custom_dir(self) -> Path:
        return self.join(PACK_CUSTOM)

    def pack_installed_dir(self) -> Path:
        return self.join(PACK_INSTALLED)

    def pack_download_dir(self) -> Path:
        return self.join(PACK_DOWNLOAD)

    def support_pack_dir(self) -> Path:
        return self.join(SUPPORT_PACK)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, BaseRoot) and other._path == self._path

    def __hash__(self) -> int:
        return hash((BaseRoot, self._path))

    def __repr__(self) -> str:
        return f"BaseRoot({str(self._path)!r})"


class WorkspaceMarker:
    """Absolute path of ``<workspace_root>/.aipack``."""

    __slots__ = ("_path",)

    def __init__(self, path: Path):
        self._path = path

    @classmethod
    def for_workspace(cls, workspace_root: Path) -> WorkspaceMarker:
        """Build from an already canonical workspace root."""
        return cls(workspace_root / AIPACK_DIR_NAME)

    @property
    def path(self) -> Path:
        return self._path

    def workspace_root(self) -> Path:
        return self._path.parent

    def exists(self) -> bool:
        return self._path.exists()

    def join(self, leaf: str | Path) -> Path:
        return self._path / leaf

    def config_path(self) -> Path:
        return self.join(CONFIG_FILE_NAME)

    def pack_custom_dir(self) -> Path:
        return self.join(PACK_CUSTOM)

    def support_pack_dir(self) -> Path:
        return self.join(SUPPORT_PACK)

    def session_tmp_dir(self, session_uid: str) -> Path:
        """``.aipack/.session/<session_uid>/tmp``"""
        return self.join(Path(SESSION_DIR_NAME) / session_uid / TMP_DIR_NAME)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, WorkspaceMarker) and other._path == self._path

    def __hash__(self) -> int:
        return hash((WorkspaceMarker, self._path))

    def __repr__(self) -> str:
        return f"WorkspaceMarker({str(self._path)!r})"
