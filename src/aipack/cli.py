from __future__ import annotations

import difflib
import json
import logging
import os
from pathlib import Path

import click

from aipack import __version__
from aipack.config import load_config
from aipack.context import PathContext, PathMode, Session
from aipack.errors import AipackError
from aipack.init import init_base, init_workspace
from aipack.pack_dirs import lookup_pack_dirs
from aipack.pack_ref import PackIdentity

log = logging.getLogger(__name__)

_MODE_CHOICES = {mode.value: mode for mode in PathMode}


class _AipackClickError(click.ClickException):
    """ClickException carrying the error code of an ``AipackError``."""

    def __init__(self, error: AipackError):
        super().__init__(str(error))
        self.code = error.code


class _JsonAwareGroup(click.Group):
    """Click group whose every failure is a single JSON line on stdout.

    Commands raise ``AipackError`` subclasses and never format output
    themselves. The group turns them into ``_AipackClickError`` so the
    error class's ``code`` (``WORKSPACE_REQUIRED``, ``REFERENCE_NOT_FOUND``
    and so on) travels next to the message as
    ``{"ok": false, "error": ..., "code": ...}``. Plain click usage errors
    carry no code. An unknown command name gets close-match suggestions.
    """

    def resolve_command(self, ctx, args):  # type: ignore[override]
        try:
            return super().resolve_command(ctx, args)
        except click.UsageError:
            if not args:
                raise
            raise click.UsageError(self._unknown_command_message(ctx, args[0])) from None

    def _unknown_command_message(self, ctx: click.Context, cmd_name: str) -> str:
        matches = difflib.get_close_matches(cmd_name, self.list_commands(ctx), n=2, cutoff=0.5)
        hint = f" Did you mean: {', '.join(matches)}?" if matches else ""
        return f"No such command '{cmd_name}'.{hint}"

    def invoke(self, ctx):  # type: ignore[override]
        try:
            return super().invoke(ctx)
        except AipackError as e:
            raise _AipackClickError(e) from e

    def main(self, args=None, standalone_mode=True, **kwargs):  # type: ignore[override]
        try:
            rv = super().main(args=args, standalone_mode=False, **kwargs)
        except click.ClickException as e:
            click.echo(json.dumps(_error_payload(e), default=str))
            if standalone_mode:
                raise SystemExit(e.exit_code) from None
            return e.exit_code
        except click.Abort:
            if standalone_mode:
                click.echo("Aborted!", err=True)
                raise SystemExit(1) from None
            raise
        if standalone_mode:
            raise SystemExit(rv or 0)
        return rv


def _error_payload(error: click.ClickException) -> dict[str, object]:
    payload: dict[str, object] = {"ok": False, "error": error.format_message()}
    code = getattr(error, "code", None)
    if code:
        payload["code"] = code
    return payload


def _configure_logging() -> None:
    level = os.environ.get("AIPACK_LOG_LEVEL")
    if level:
        logging.basicConfig(level=level.upper(), format="%(levelname)s %(name)s: %(message)s")


@click.group(cls=_JsonAwareGroup)
@click.version_option(version=__version__)
def main():
    """Resolve aipack workspaces, packs and pack references.

    \b
    Quick start:
      aip init                         Create .aipack/ in the current directory
      aip init-base                    Create ~/.aipack-base/
      aip paths                        Show workspace, base and pack repo dirs
      aip resolve pro@coder/doc.md     Resolve a path or pack reference
      aip list pro                     List packs in the 'pro' namespace

    \b
    Pack references:
      [namespace@]name[$base|$workspace][/sub_path]
    """
    _configure_logging()


def _apply_workspace_option(fn):  # type: ignore[no-untyped-def]
    return click.option(
        "--workspace",
        "-w",
        "workspace",
        default=None,
        type=click.Path(exists=True, file_okay=False),
        help="Workspace root (default: discovered from the current directory).",
    )(fn)


def _echo(payload: object) -> None:
    click.echo(json.dumps(payload, default=str))


def _str_or_none(path: Path | None) -> str | None:
    return str(path) if path is not None else None


# -- init --


@main.command()
@click.argument(
    "path",
    required=False,
    type=click.Path(exists=True, file_okay=False),
)
def init(path: str | None):
    """Create or refresh the .aipack/ workspace marker.

    Uses PATH, else the nearest workspace above the current directory,
    else the current directory.
    """
    path_set, created = init_workspace(path)
    _echo(
        {
            "workspace": _str_or_none(path_set.workspace_root),
            "marker": _str_or_none(
                path_set.workspace_marker.path if path_set.workspace_marker else None
            ),
            "created": created,
        }
    )


@main.command("init-base")
def init_base_cmd():
    """Create or refresh ~/.aipack-base/."""
    base_root, created = init_base()
    _echo({"base": str(base_root.path), "created": created})


# -- paths --


@main.command()
@_apply_workspace_option
def paths(workspace: str | None):
    """Show the workspace, base root, pack repo dirs and config files."""
    ctx = PathContext.new(workspace)
    path_set = ctx.path_set
    _echo(
        {
            "home": str(ctx.home_dir),
            "current_dir": str(ctx.current_dir),
            "workspace": _str_or_none(path_set.workspace_root),
            "marker": _str_or_none(
                path_set.workspace_marker.path if path_set.workspace_marker else None
            ),
            "base": str(path_set.base_root.path),
            "repo_roots": [
                {"kind": repo.kind.value, "path": str(repo.path)}
                for repo in path_set.repo_roots()
            ],
            "config_files": [str(p) for p in path_set.config_files()],
        }
    )


# -- resolve --


@main.command()
@click.argument("path")
@click.option(
    "--mode",
    "-m",
    type=click.Choice(sorted(_MODE_CHOICES)),
    default=PathMode.WORKSPACE_DIR.value,
    show_default=True,
    help="Base dir for plain relative paths.",
)
@click.option(
    "--base-dir",
    default=None,
    type=click.Path(file_okay=False),
    help="Explicit base dir for relative paths (overrides --mode).",
)
@click.option("--session", "session_uid", default=None, help="Session id scoping $tmp.")
@click.option("--tilde", is_flag=True, help="Show paths under the home dir as ~/...")
@_apply_workspace_option
def resolve(
    path: str,
    mode: str,
    base_dir: str | None,
    session_uid: str | None,
    tilde: bool,
    workspace: str | None,
):
    """Resolve PATH (absolute, ~/, $tmp/, pack reference or relative)."""
    ctx = PathContext.new(workspace)
    session = Session(session_uid) if session_uid else Session.new()
    resolved = ctx.resolve(
        session,
        path,
        _MODE_CHOICES[mode],
        Path(base_dir) if base_dir is not None else None,
    )
    shown = ctx.path_to_tilde(resolved) if tilde else resolved
    _echo(
        {
            "input": path,
            "path": str(shown),
            "display": str(ctx.display_path(resolved)),
            "session": str(session),
        }
    )


# -- list --


def _split_list_filter(pack_filter: str | None) -> tuple[str | None, str | None]:
    """``ns`` filters a namespace, ``ns@name`` one pack, ``@name`` a name."""
    if not pack_filter:
        return None, None
    namespace, _, name = pack_filter.partition("@")
    if namespace:
        PackIdentity.validate_namespace(namespace)
    if name:
        PackIdentity.validate_name(name)
    return namespace or None, name or None


@main.command("list")
@click.argument("pack_filter", required=False, metavar="[NAMESPACE[@NAME]]")
@_apply_workspace_option
def list_packs(pack_filter: str | None, workspace: str | None):
    """List packs found in the workspace and base repo dirs."""
    namespace, name = _split_list_filter(pack_filter)
    ctx = PathContext.new(workspace)
    pack_dirs = lookup_pack_dirs(ctx, namespace, name)
    _echo(
        [
            {**pack_dir.to_dict(), "display": str(ctx.display_path(pack_dir.path))}
            for pack_dir in pack_dirs
        ]
    )


# -- config --


@main.command()
@_apply_workspace_option
def config(workspace: str | None):
    """Show the merged base and workspace configuration."""
    ctx = PathContext.new(workspace)
    _echo(
        {
            "files": [str(p) for p in ctx.path_set.config_files()],
            "config": load_config(ctx.path_set),
        }
    )
