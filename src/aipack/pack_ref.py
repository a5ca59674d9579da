"""Pack reference parsing.

A pack reference addresses a pack, or a file within or related to it::

    [namespace@]name[$base|$workspace][/sub_path]

For example ``pro@coder/explain`` parses to namespace ``pro``, name
``coder``, scope ``PACK_DIR`` and sub path ``explain``. The ``$base`` and
``$workspace`` suffixes address the pack *support* directory instead:

- ``pro@coder$base/some-file.txt`` -> ``~/.aipack-base/support/pack/pro/coder/some-file.txt``
- ``pro@coder$workspace/some-file.txt`` -> ``.aipack/support/pack/pro/coder/some-file.txt``
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from aipack.errors import MalformedReference

_IDENTITY_RE = re.compile(r"^[A-Za-z_-][A-Za-z0-9_-]*$")
_GLOB_WILDCARDS = ("*", "?", "[")


class SubPathScope(Enum):
    PACK_DIR = "pack_dir"
    BASE_SUPPORT = "base"
    WORKSPACE_SUPPORT = "workspace"


_SCOPE_SUFFIXES: dict[str, SubPathScope] = {
    "base": SubPathScope.BASE_SUPPORT,
    "workspace": SubPathScope.WORKSPACE_SUPPORT,
}


@dataclass(frozen=True)
class PackIdentity:
    namespace: str
    name: str

    @staticmethod
    def validate_namespace(namespace: str) -> None:
        _validate_identity_part("namespace", namespace)

    @staticmethod
    def validate_name(name: str) -> None:
        _validate_identity_part("name", name)

    def as_path(self) -> Path:
        return Path(self.namespace) / self.name

    def __str__(self) -> str:
        return f"{self.namespace}@{self.name}"


def _validate_identity_part(label: str, value: str) -> None:
    if not value:
        raise MalformedReference(
            f"Pack {label} '{value}' is not valid. Cause: {label} cannot be empty", raw=value
        )
    if not _IDENTITY_RE.match(value):
        raise MalformedReference(
            f"Pack {label} '{value}' is not valid. Cause: {label} can only contain "
            "alphanumeric characters, hyphens and underscores, and cannot start with a number",
            raw=value,
        )


@dataclass(frozen=True)
class RawPackRef:
    """Syntactic split of a reference; ``name`` may still carry ``$scope``."""

    namespace: str | None
    name: str
    sub_path: str | None


def parse_raw_ref(full_ref: str) -> RawPackRef:
    """Split *full_ref* on ``@`` and then on the first ``/``."""
    parts = full_ref.split("@")
    if len(parts) > 2:
        raise MalformedReference(
            f"Invalid pack reference format: '{full_ref}'. Too many '@' symbols.", raw=full_ref
        )
    if len(parts) == 2:
        namespace, rest = parts
        if not namespace:
            raise MalformedReference(
                f"Invalid pack reference format: '{full_ref}'. "
                "Namespace cannot be empty when '@' is present.",
                raw=full_ref,
            )
        if not rest:
            raise MalformedReference(
                f"Invalid pack reference format: '{full_ref}'. "
                "Pack name/path part cannot be empty after '@'.",
                raw=full_ref,
            )
    else:
        namespace, rest = None, full_ref

    name, _, sub_path = rest.partition("/")
    if not name:
        raise MalformedReference(
            f"Invalid pack reference format: '{full_ref}'. Pack name cannot be empty.",
            raw=full_ref,
        )
    return RawPackRef(namespace=namespace, name=name, sub_path=sub_path or None)


@dataclass(frozen=True)
class PackRef:
    """A validated reference with its sub path scope."""

    namespace: str | None
    name: str
    scope: SubPathScope
    sub_path: str | None

    @classmethod
    def parse(cls, full_ref: str) -> PackRef:
        return cls.from_raw(parse_raw_ref(full_ref), full_ref)

    @classmethod
    def from_raw(cls, raw: RawPackRef, full_ref: str | None = None) -> PackRef:
        origin = full_ref if full_ref is not None else str(raw)
        if raw.namespace is not None:
            PackIdentity.validate_namespace(raw.namespace)

        name, sep, scope_part = raw.name.partition("$")
        if sep:
            if not name:
                raise MalformedReference(
                    f"Invalid pack reference format: '{origin}'. "
                    "Pack name cannot be empty before '$'.",
                    raw=origin,
                )
            if not scope_part:
                raise MalformedReference(
                    f"Invalid pack reference scope in '{origin}'. Scope cannot be empty "
                    "after '$'. Expected '$base' or '$workspace'",
                    raw=origin,
                )
            scope = _SCOPE_SUFFIXES.get(scope_part)
            if scope is None:
                raise MalformedReference(
                    f"Invalid pack reference scope in '{origin}'. Expected '$base' or "
                    f"'$workspace', found '${scope_part}'.",
                    raw=origin,
                )
        else:
            scope = SubPathScope.PACK_DIR
        PackIdentity.validate_name(name)

        if raw.sub_path is not None:
            if "$" in raw.sub_path:
                raise MalformedReference(
                    f"Invalid pack reference format: '{origin}'. "
                    "Character '$' is not allowed in the sub-path.",
                    raw=origin,
                )
            if ".." in raw.sub_path.split("/"):
                raise MalformedReference(
                    f"Invalid pack reference format: '{origin}'. Sub-path cannot contain '..'.",
                    raw=origin,
                )

        return cls(namespace=raw.namespace, name=name, scope=scope, sub_path=raw.sub_path)

    def identity(self) -> PackIdentity:
        """Return the full identity; requires a namespace."""
        if self.namespace is None:
            raise MalformedReference(
                f"Pack reference '{self}' needs a namespace (e.g. 'ns@{self.name}')",
                raw=str(self),
            )
        return PackIdentity(namespace=self.namespace, name=self.name)

    def __str__(self) -> str:
        text = f"{self.namespace}@{self.name}" if self.namespace else self.name
        if self.scope is SubPathScope.BASE_SUPPORT:
            text += "$base"
        elif self.scope is SubPathScope.WORKSPACE_SUPPORT:
            text += "$workspace"
        if self.sub_path:
            text += f"/{self.sub_path}"
        return text


def extract_pack_reference(text: str) -> str | None:
    """Return the leading pack reference in a path or glob, if any.

    A reference needs an ``@`` before the first wildcard. It is the text up
    to the last ``/`` before that wildcard (or all of *text* when there is
    no wildcard). When the ``@`` comes after that ``/`` the whole text is
    returned, so parsing it reports the malformed reference.
    """
    if "@" not in text:
        return None
    positions = [pos for pos in (text.find(w) for w in _GLOB_WILDCARDS) if pos >= 0]
    if not positions:
        return text
    head = text[: min(positions)]
    if "@" not in head:
        return None
    reference = head[: head.rfind("/") + 1]
    return reference if "@" in reference else text


def looks_like_pack_ref(text: str) -> bool:
    """Cheap textual check shared by path resolution and glob expansion."""
    return extract_pack_reference(text) is not None
