"""Workspace discovery and the layered set of aipack directories."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from aipack.errors import AipackError, PathUnresolvable
from aipack.paths import AIPACK_DIR_NAME, current_dir
from aipack.roots import BaseRoot, WorkspaceMarker

log = logging.getLogger(__name__)


class RepoKind(Enum):
    """Pack repository kinds, declared in precedence order."""

    WKS_CUSTOM = "wks_custom"
    BASE_CUSTOM = "base_custom"
    BASE_INSTALLED = "base_installed"

    @property
    def pretty(self) -> str:
        return _REPO_KIND_PRETTY[self]


_REPO_KIND_PRETTY: dict[RepoKind, str] = {
    RepoKind.WKS_CUSTOM: "workspace custom - .aipack/pack/custom",
    RepoKind.BASE_CUSTOM: "base custom - ~/.aipack-base/pack/custom",
    RepoKind.BASE_INSTALLED: "base installed - ~/.aipack-base/pack/installed",
}


@dataclass(frozen=True)
class RepoRoot:
    """One searchable pack repository directory."""

    kind: RepoKind
    path: Path


@dataclass(frozen=True)
class PathSet:
    """Optional workspace root and marker, plus the mandatory base root."""

    workspace_root: Path | None
    workspace_marker: WorkspaceMarker | None
    base_root: BaseRoot

    def __post_init__(self) -> None:
        if self.workspace_marker is not None and self.workspace_root is None:
            raise ValueError("workspace_marker requires workspace_root")

    # -- Constructors --

    @classmethod
    def discover(cls, start_dir: Path | None = None) -> PathSet:
        """Locate the nearest workspace from *start_dir* (cwd by default).

        Falls back to a base-only set when no workspace is found.
        """
        start = start_dir if start_dir is not None else current_dir()
        wks_root = find_workspace_root(start)
        if wks_root is not None:
            return cls.from_workspace_root(wks_root)
        log.debug("No workspace found from %s, using base root only", start)
        return cls.base_only()

    @classmethod
    def from_workspace_root(cls, path: Path | str, base_root: BaseRoot | None = None) -> PathSet:
        """Build the full set rooted at *path*.

        The marker is constructed even when ``.aipack/`` is absent, so init
        flows can create it afterwards.
        """
        path = Path(path)
        if not path.exists():
            raise PathUnresolvable(
                f"Cannot run aip, workspace path does not exist {path}", raw=str(path), root=path
            )
        try:
            wks_root = path.resolve(strict=True)
        except OSError as exc:
            raise PathUnresolvable(
                f"Cannot canonicalize workspace path for {path}: {exc}", raw=str(path), root=path
            ) from exc
        return cls(
            workspace_root=wks_root,
            workspace_marker=WorkspaceMarker.for_workspace(wks_root),
            base_root=base_root if base_root is not None else BaseRoot.new(),
        )

    @classmethod
    def base_only(cls, base_root: BaseRoot | None = None) -> PathSet:
        return cls(
            workspace_root=None,
            workspace_marker=None,
            base_root=base_root if base_root is not None else BaseRoot.new(),
        )

    # -- Derived paths --

    def repo_roots(self) -> list[RepoRoot]:
        """Existing pack repositories, in precedence order.

        - ``<wks>/.aipack/pack/custom`` (only with a workspace)
        - ``~/.aipack-base/pack/custom``
        - ``~/.aipack-base/pack/installed``
        """
        candidates: list[RepoRoot] = []
        if self.workspace_marker is not None:
            candidates.append(RepoRoot(RepoKind.WKS_CUSTOM, self.workspace_marker.pack_custom_dir()))
        candidates.append(RepoRoot(RepoKind.BASE_CUSTOM, self.base_root.pack_custom_dir()))
        candidates.append(RepoRoot(RepoKind.BASE_INSTALLED, self.base_root.pack_installed_dir()))

        roots = [root for root in candidates if root.path.is_dir()]
        log.debug("Repo roots: %s", [str(root.path) for root in roots])
        return roots

    def config_files(self) -> list[Path]:
        """Base config (always) then workspace config (only if present)."""
        files = [self.base_root.config_path()]
        if self.workspace_marker is not None:
            wks_config = self.workspace_marker.config_path()
            if wks_config.is_file():
                files.append(wks_config)
        return files

    def tmp_dir(self, session_uid: str) -> Path | None:
        if self.workspace_marker is None:
            return None
        return self.workspace_marker.session_tmp_dir(session_uid)


def find_workspace_root(start_dir: Path) -> Path | None:
    """Return the nearest ancestor of *start_dir* holding a ``.aipack/`` dir.

    A level whose marker is missing, or whose path set cannot be built,
    is skipped and the walk continues with its parent.
    """
    candidate: Path | None = start_dir
    while candidate is not None:
        if (candidate / AIPACK_DIR_NAME).is_dir():
            try:
                PathSet.from_workspace_root(candidate)
            except AipackError as exc:
                log.debug("Skipping workspace candidate %s: %s", candidate, exc)
            else:
                log.debug("Workspace found at %s", candidate)
                return candidate
        parent = candidate.parent
        candidate = parent if parent != candidate else None
    return None
