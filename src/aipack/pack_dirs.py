"""Locating pack directories across repository roots."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from aipack.errors import MalformedReference, ReferenceNotFound, WorkspaceRequired
from aipack.pack_ref import PackRef, SubPathScope
from aipack.path_set import RepoKind

if TYPE_CHECKING:
    from aipack.context import PathContext

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class PackDir:
    namespace: str
    name: str
    path: Path
    repo_kind: RepoKind

    def to_dict(self) -> dict[str, str]:
        return {
            "namespace": self.namespace,
            "name": self.name,
            "path": str(self.path),
            "repo": self.repo_kind.value,
        }


def _sorted_subdirs(parent: Path) -> list[Path]:
    try:
        return sorted(p for p in parent.iterdir() if p.is_dir())
    except OSError as exc:
        log.warning("Cannot list pack dir %s: %s", parent, exc)
        return []


def lookup_pack_dirs(
    context: PathContext,
    namespace: str | None = None,
    name: str | None = None,
) -> list[PackDir]:
    """Return ``<root>/<namespace>/<name>`` dirs in repo precedence order.

    Filters apply when *namespace* and/or *name* are given. Within a single
    repo root, namespaces and names are sorted.
    """
    found: list[PackDir] = []
    for repo in context.path_set.repo_roots():
        if namespace is not None:
            ns_dirs = [repo.path / namespace] if (repo.path / namespace).is_dir() else []
        else:
            ns_dirs = _sorted_subdirs(repo.path)
        for ns_dir in ns_dirs:
            if name is not None:
                pack_dirs = [ns_dir / name] if (ns_dir / name).is_dir() else []
            else:
                pack_dirs = _sorted_subdirs(ns_dir)
            found.extend(
                PackDir(namespace=ns_dir.name, name=p.name, path=p, repo_kind=repo.kind)
                for p in pack_dirs
            )
    return found


def resolve_pack_ref_base(context: PathContext, pack_ref: PackRef) -> Path:
    """Return the base dir of *pack_ref*, before its sub path.

    ``PACK_DIR`` searches the repo roots; the support scopes are plain joins
    and the returned path may not exist.

    A reference without a namespace only comes from ``PackRef.parse`` on
    bare text such as ``"coder"``. Path resolution and glob expansion only
    hand over text containing ``@``, so they always carry a namespace and
    never hit the ambiguity check.
    """
    if pack_ref.scope is SubPathScope.PACK_DIR:
        pack_dirs = lookup_pack_dirs(context, pack_ref.namespace, pack_ref.name)
        if not pack_dirs:
            raise ReferenceNotFound(
                f"Cannot find the base path for '{pack_ref}' (no pack dir in "
                f"{[repo.kind.pretty for repo in context.path_set.repo_roots()]})",
                raw=str(pack_ref),
            )
        first = pack_dirs[0]
        if pack_ref.namespace is None:
            rivals = sorted(
                {d.namespace for d in pack_dirs if d.repo_kind is first.repo_kind}
            )
            if len(rivals) > 1:
                raise MalformedReference(
                    f"Pack reference '{pack_ref}' is ambiguous, it matches "
                    f"{', '.join(f'{ns}@{pack_ref.name}' for ns in rivals)}. Add a namespace.",
                    raw=str(pack_ref),
                )
        log.debug("Resolved %s to %s (%s)", pack_ref, first.path, first.repo_kind.value)
        return first.path

    identity = pack_ref.identity()
    if pack_ref.scope is SubPathScope.BASE_SUPPORT:
        return context.path_set.base_root.support_pack_dir() / identity.as_path()

    marker = context.path_set.workspace_marker
    if marker is None:
        raise WorkspaceRequired(
            f"Cannot load reference support file in workspace for '{pack_ref}'",
            raw=str(pack_ref),
        )
    return marker.support_pack_dir() / identity.as_path()
