"""The path context: home dir, current dir and the aipack path set.

``PathContext.resolve`` turns any path-like input into one concrete path.
Rules are applied in order, the first match wins:

1. ``~/`` prefix is replaced with the home dir.
2. Absolute paths are used as-is.
3. ``$tmp/...`` resolves under ``.aipack/.session/<session>/tmp``.
4. Pack references (``ns@name[$scope]/sub``) resolve under their pack or
   support dir.
5. Relative paths join onto ``base_dir`` if given, else the dir implied
   by the mode.

The result is lexically collapsed; the filesystem is not consulted for
that step and the target does not need to exist.
"""

from __future__ import annotations

import logging
import os
import uuid
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from aipack.errors import WorkspaceRequired
from aipack.pack_dirs import resolve_pack_ref_base
from aipack.pack_ref import PackRef, extract_pack_reference
from aipack.path_set import PathSet
from aipack.paths import AIPACK_BASE, TMP_PREFIX, current_dir, home_dir

log = logging.getLogger(__name__)


class PathMode(Enum):
    """Base dir used for plain relative paths."""

    CURRENT_DIR = "current"
    WORKSPACE_DIR = "workspace"
    WORKSPACE_MARKER_DIR = "marker"


@dataclass(frozen=True)
class Session:
    """Opaque run identifier scoping the ``$tmp`` root."""

    uid: str

    @classmethod
    def new(cls) -> Session:
        return cls(uid=str(uuid.uuid4()))

    def __str__(self) -> str:
        return self.uid


def _collapse(path: Path) -> Path:
    return Path(os.path.normpath(path))


def _is_tmp_path(path: Path) -> bool:
    return path.parts[:1] == (TMP_PREFIX,)


@dataclass(frozen=True)
class PathContext:
    home_dir: Path
    current_dir: Path
    path_set: PathSet

    @classmethod
    def new(cls, workspace: Path | str | None = None) -> PathContext:
        """Build the process context.

        With *workspace* the given root is used as-is; otherwise the
        workspace is discovered upward from the current dir.
        """
        cwd = current_dir()
        home = home_dir()
        if workspace is not None:
            path_set = PathSet.from_workspace_root(workspace)
        else:
            path_set = PathSet.discover(cwd)
        return cls(home_dir=home, current_dir=cwd, path_set=path_set)

    # -- Getters --

    def workspace_root(self) -> Path | None:
        return self.path_set.workspace_root

    def try_workspace_root(self, context: str) -> Path:
        wks_root = self.path_set.workspace_root
        if wks_root is None:
            raise WorkspaceRequired(context)
        return wks_root

    # -- Resolvers --

    def resolve(
        self,
        session: Session | str,
        raw_path: str | Path,
        mode: PathMode = PathMode.WORKSPACE_DIR,
        base_dir: Path | None = None,
    ) -> Path:
        """Resolve *raw_path* to a concrete path (which may not exist).

        *base_dir* only applies to plain relative paths, where it takes
        precedence over *mode*.
        """
        text = str(raw_path)
        path = self.home_dir / text[2:] if text.startswith("~/") else Path(text)

        if path.is_absolute():
            final = path
        elif _is_tmp_path(path):
            final = self.resolve_tmp_path(session, path)
        elif (ref_text := extract_pack_reference(text)) is not None:
            final = self.resolve_pack_ref_path(ref_text, text[len(ref_text) :])
        else:
            final = self._relative_base(text, mode, base_dir) / path

        resolved = _collapse(final)
        log.debug("Resolved %r (%s) to %s", text, mode.value, resolved)
        return resolved

    def resolve_tmp_path(self, session: Session | str, path: Path) -> Path:
        tmp_dir = self.path_set.tmp_dir(str(session))
        if tmp_dir is None:
            raise WorkspaceRequired(f"Cannot resolve tmp path '{path}'", raw=str(path))
        return tmp_dir.joinpath(*path.parts[1:])

    def resolve_pack_ref_path(self, ref_text: str, remainder: str = "") -> Path:
        """Resolve a reference prefix, then append *remainder* after it."""
        pack_ref = PackRef.parse(ref_text)
        path = resolve_pack_ref_base(self, pack_ref)
        if pack_ref.sub_path:
            path = path / pack_ref.sub_path
        remainder = remainder.lstrip("/")
        if remainder:
            path = path / remainder
        return path

    def _relative_base(self, text: str, mode: PathMode, base_dir: Path | None) -> Path:
        if base_dir is not None:
            return base_dir
        if mode is PathMode.CURRENT_DIR:
            return self.current_dir
        if mode is PathMode.WORKSPACE_DIR:
            return self.try_workspace_root(
                f"Cannot resolve '{text}' for workspace, because no workspace is available"
            )
        marker = self.path_set.workspace_marker
        if marker is None:
            raise WorkspaceRequired(
                f"Cannot resolve '{text}' relative to the '.aipack' directory", raw=text
            )
        return marker.path

    # -- Display helpers --

    def path_to_tilde(self, path: str | Path) -> Path:
        """Rewrite an absolute path under the home dir as ``~/...``."""
        path = Path(path)
        if not path.is_absolute():
            return path
        try:
            rel = path.relative_to(self.home_dir)
        except ValueError:
            return path
        return Path("~") if rel == Path(".") else Path("~") / rel

    def tilde_to_path(self, path: str | Path) -> Path:
        """Rewrite a ``~/...`` path under the home dir."""
        text = str(path)
        if text == "~":
            return self.home_dir
        if text.startswith("~/"):
            return self.home_dir / text[2:]
        return Path(path)

    def display_path(self, path: str | Path) -> Path:
        """Base paths shown with ``~``, workspace paths shown relative."""
        path = Path(path)
        if AIPACK_BASE in path.parts:
            return self.path_to_tilde(path)
        wks_root = self.path_set.workspace_root
        if wks_root is not None and path.is_absolute():
            try:
                return path.relative_to(wks_root)
            except ValueError:
                return path
        return path
