"""Tests for PathContext.resolve and the tilde display helpers."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from aipack.context import PathContext, PathMode, Session
from aipack.errors import MalformedReference, ReferenceNotFound, WorkspaceRequired
from aipack.path_set import PathSet
from aipack.roots import BaseRoot

SESSION = Session("0000-session")


@pytest.fixture()
def fake_home_ctx() -> PathContext:
    """Pure context on ``/home/u``; nothing touches the filesystem."""
    home = Path("/home/u")
    return PathContext(
        home_dir=home,
        current_dir=Path("/work/cwd"),
        path_set=PathSet.base_only(BaseRoot.new(home)),
    )


class TestAbsoluteAndTilde:
    @pytest.mark.parametrize("mode", list(PathMode))
    @pytest.mark.parametrize("base_dir", [None, Path("/some/base")])
    def test_absolute_unchanged(
        self, wks_ctx: PathContext, mode: PathMode, base_dir: Path | None
    ) -> None:
        assert wks_ctx.resolve(SESSION, "/etc/aipack/file.txt", mode, base_dir) == Path(
            "/etc/aipack/file.txt"
        )

    def test_absolute_collapsed(self, fake_home_ctx: PathContext) -> None:
        assert fake_home_ctx.resolve(SESSION, "/a/b/../c/./d") == Path("/a/c/d")

    @pytest.mark.parametrize("mode", list(PathMode))
    def test_tilde_expanded_for_every_mode(
        self, fake_home_ctx: PathContext, mode: PathMode
    ) -> None:
        resolved = fake_home_ctx.resolve(SESSION, "~/.aipack-base/x", mode)
        assert resolved == Path("/home/u/.aipack-base/x")

    def test_tilde_with_at_sign_is_not_a_reference(self, fake_home_ctx: PathContext) -> None:
        assert fake_home_ctx.resolve(SESSION, "~/mail/me@host.txt") == Path(
            "/home/u/mail/me@host.txt"
        )

    @pytest.mark.parametrize(
        "path", ["/home/u", "/home/u/a", "/home/u/.aipack-base/pack/installed/x/y.md"]
    )
    def test_tilde_round_trip(self, fake_home_ctx: PathContext, path: str) -> None:
        p = Path(path)
        assert fake_home_ctx.tilde_to_path(fake_home_ctx.path_to_tilde(p)) == p

    def test_path_to_tilde(self, fake_home_ctx: PathContext) -> None:
        assert fake_home_ctx.path_to_tilde("/home/u/a/b") == Path("~/a/b")
        assert fake_home_ctx.path_to_tilde("/home/user2/a") == Path("/home/user2/a")
        assert fake_home_ctx.path_to_tilde("rel/a") == Path("rel/a")

    def test_tilde_to_path_passthrough(self, fake_home_ctx: PathContext) -> None:
        assert fake_home_ctx.tilde_to_path("~user/a") == Path("~user/a")


class TestRelative:
    def test_workspace_mode(self, wks_ctx: PathContext, workspace: Path) -> None:
        assert wks_ctx.resolve(SESSION, "relative/file") == workspace / "relative" / "file"

    def test_current_dir_mode(self, wks_ctx: PathContext, workspace: Path) -> None:
        resolved = wks_ctx.resolve(SESSION, "../file", PathMode.CURRENT_DIR)
        assert resolved == workspace / "file"

    def test_marker_mode(self, wks_ctx: PathContext, workspace: Path) -> None:
        resolved = wks_ctx.resolve(SESSION, "config.toml", PathMode.WORKSPACE_MARKER_DIR)
        assert resolved == workspace / ".aipack" / "config.toml"

    def test_explicit_base_dir_wins(self, no_wks_ctx: PathContext, tmp_path: Path) -> None:
        resolved = no_wks_ctx.resolve(SESSION, "a/b.txt", PathMode.WORKSPACE_DIR, tmp_path)
        assert resolved == tmp_path / "a" / "b.txt"

    def test_workspace_mode_without_workspace_fails(self, no_wks_ctx: PathContext) -> None:
        with pytest.raises(WorkspaceRequired, match="no workspace is available"):
            no_wks_ctx.resolve(SESSION, "relative/file", PathMode.WORKSPACE_DIR)

    def test_marker_mode_without_workspace_fails(self, no_wks_ctx: PathContext) -> None:
        with pytest.raises(WorkspaceRequired):
            no_wks_ctx.resolve(SESSION, "relative/file", PathMode.WORKSPACE_MARKER_DIR)

    def test_current_dir_mode_without_workspace(self, no_wks_ctx: PathContext) -> None:
        resolved = no_wks_ctx.resolve(SESSION, "f.txt", PathMode.CURRENT_DIR)
        assert resolved == no_wks_ctx.current_dir / "f.txt"

    def test_target_need_not_exist(self, wks_ctx: PathContext, workspace: Path) -> None:
        resolved = wks_ctx.resolve(SESSION, "no/such/dir/../file.md")
        assert resolved == workspace / "no" / "such" / "file.md"
        assert not resolved.exists()


class TestTmp:
    def test_sessions_are_disjoint(self, wks_ctx: PathContext, workspace: Path) -> None:
        a = wks_ctx.resolve(Session("A"), "$tmp/sub/file.txt")
        b = wks_ctx.resolve(Session("B"), "$tmp/sub/file.txt")
        assert a == workspace / ".aipack" / ".session" / "A" / "tmp" / "sub" / "file.txt"
        assert b == workspace / ".aipack" / ".session" / "B" / "tmp" / "sub" / "file.txt"
        assert a != b

    def test_bare_tmp(self, wks_ctx: PathContext, workspace: Path) -> None:
        assert wks_ctx.resolve("s1", "$tmp") == workspace / ".aipack" / ".session" / "s1" / "tmp"

    def test_mode_ignored(self, wks_ctx: PathContext, workspace: Path) -> None:
        resolved = wks_ctx.resolve(SESSION, "$tmp/x", PathMode.CURRENT_DIR, Path("/elsewhere"))
        assert resolved.parent == workspace / ".aipack" / ".session" / str(SESSION) / "tmp"

    def test_without_workspace_fails(self, no_wks_ctx: PathContext) -> None:
        with pytest.raises(WorkspaceRequired, match="tmp path"):
            no_wks_ctx.resolve(SESSION, "$tmp/file.txt")

    def test_tmp_prefix_must_be_whole_component(
        self, wks_ctx: PathContext, workspace: Path
    ) -> None:
        assert wks_ctx.resolve(SESSION, "$tmpfoo/x") == workspace / "$tmpfoo" / "x"

    def test_new_session_ids_differ(self) -> None:
        assert Session.new() != Session.new()


class TestPackReference:
    def test_workspace_support(self, wks_ctx: PathContext, workspace: Path) -> None:
        resolved = wks_ctx.resolve(SESSION, "pro@coder$workspace/so/data.md")
        assert resolved == workspace / ".aipack" / "support" / "pack" / "pro" / "coder" / "so" / "data.md"

    def test_base_support(self, wks_ctx: PathContext, home: Path) -> None:
        resolved = wks_ctx.resolve(SESSION, "pro@coder$base/data.json")
        assert resolved == home / ".aipack-base" / "support" / "pack" / "pro" / "coder" / "data.json"

    def test_workspace_support_without_workspace(self, no_wks_ctx: PathContext) -> None:
        with pytest.raises(WorkspaceRequired):
            no_wks_ctx.resolve(SESSION, "pro@coder$workspace/data.md")

    def test_installed_pack(
        self, wks_ctx: PathContext, base_dir: Path, make_pack: Callable[..., Path]
    ) -> None:
        pack = make_pack(base_dir / "pack" / "installed", "pro", "rust10x")
        resolved = wks_ctx.resolve(SESSION, "pro@rust10x/guide/base/some.md")
        assert resolved == pack / "guide" / "base" / "some.md"

    def test_reference_without_sub_path(
        self, wks_ctx: PathContext, base_dir: Path, make_pack: Callable[..., Path]
    ) -> None:
        pack = make_pack(base_dir / "pack" / "installed", "pro", "coder")
        assert wks_ctx.resolve(SESSION, "pro@coder") == pack

    def test_glob_remainder_appended(
        self, wks_ctx: PathContext, base_dir: Path, make_pack: Callable[..., Path]
    ) -> None:
        pack = make_pack(base_dir / "pack" / "custom", "jc", "rust10x")
        resolved = wks_ctx.resolve(SESSION, "jc@rust10x/common/**/*.md")
        assert resolved == pack / "common" / "**" / "*.md"

    def test_missing_pack(self, wks_ctx: PathContext) -> None:
        with pytest.raises(ReferenceNotFound, match="pro@ghost"):
            wks_ctx.resolve(SESSION, "pro@ghost/file.md")

    def test_malformed(self, wks_ctx: PathContext) -> None:
        with pytest.raises(MalformedReference):
            wks_ctx.resolve(SESSION, "a@b@c/file.md")

    @pytest.mark.parametrize("text", ["dir/ns@pack*/x.md", "pro@coder*.md"])
    def test_at_sign_before_wildcard_must_parse(self, wks_ctx: PathContext, text: str) -> None:
        with pytest.raises(MalformedReference):
            wks_ctx.resolve(SESSION, text)

    def test_at_sign_after_wildcard_is_relative(
        self, wks_ctx: PathContext, workspace: Path
    ) -> None:
        assert wks_ctx.resolve(SESSION, "src/*/a@b") == workspace / "src" / "*" / "a@b"


class TestDisplay:
    def test_workspace_relative(self, wks_ctx: PathContext, workspace: Path) -> None:
        assert wks_ctx.display_path(workspace / "src" / "main.rs") == Path("src/main.rs")

    def test_base_paths_use_tilde(self, wks_ctx: PathContext, home: Path) -> None:
        path = home / ".aipack-base" / "pack" / "installed" / "pro" / "coder"
        assert wks_ctx.display_path(path) == Path("~/.aipack-base/pack/installed/pro/coder")

    def test_outside_paths_unchanged(self, no_wks_ctx: PathContext) -> None:
        assert no_wks_ctx.display_path("/opt/x") == Path("/opt/x")


class TestNew:
    def test_discovers_from_cwd(
        self, workspace: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        sub = workspace / "deep"
        sub.mkdir()
        monkeypatch.chdir(sub)
        ctx = PathContext.new()
        assert ctx.workspace_root() == workspace
        assert ctx.current_dir == sub

    def test_explicit_workspace(
        self, workspace: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)
        ctx = PathContext.new(workspace)
        assert ctx.workspace_root() == workspace

    def test_try_workspace_root(self, no_wks_ctx: PathContext) -> None:
        with pytest.raises(WorkspaceRequired, match="Cannot list"):
            no_wks_ctx.try_workspace_root("Cannot list")
