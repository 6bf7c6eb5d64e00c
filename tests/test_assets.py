from __future__ import annotations

import re

import pytest

from hyprdots_installer.errors import BackupFailure
from hyprdots_installer.lib import assets
from hyprdots_installer.lib.assets import (
    FileCopyEntry,
    apply_copy_plan,
    backup_dir_for,
    copy_tree,
    plan_config_copy,
    rewrite_home_paths,
)
from hyprdots_installer.steps import ApplyConfigStep, BackupConfigStep

BACKUP_RE = re.compile(r"^\.config\.backup\.\d{8}_\d{6}$")


def _tree(root):
    return {
        str(p.relative_to(root)): p.read_bytes()
        for p in sorted(root.rglob("*"))
        if p.is_file()
    }


def _existing_config(home):
    cfg = home / ".config"
    (cfg / "hypr").mkdir(parents=True)
    (cfg / "hypr" / "hyprland.conf").write_text("old", encoding="utf-8")
    (cfg / "kitty").mkdir()
    (cfg / "kitty" / "kitty.conf").write_text("font_size 11", encoding="utf-8")
    return cfg


def test_backup_dir_naming(tmp_path):
    cfg = tmp_path / ".config"
    assert backup_dir_for(cfg, "20260101_120000") == tmp_path / ".config.backup.20260101_120000"
    assert backup_dir_for(cfg, "20260101_120000", overwrite=True).name == ".config.backup.20260101_120000.overwrite"


def test_backup_accepted_is_complete_copy(make_ctx, home, arch_state):
    cfg = _existing_config(home)
    before = _tree(cfg)

    state = BackupConfigStep().run(make_ctx(confirm=lambda q, d: True), arch_state)

    backups = [p for p in home.iterdir() if BACKUP_RE.match(p.name)]
    assert len(backups) == 1
    assert _tree(backups[0]) == before
    assert state["execution"]["decisions"]["config_backup"] == str(backups[0])


def test_backup_declined_creates_nothing(make_ctx, home, arch_state):
    _existing_config(home)
    BackupConfigStep().run(make_ctx(confirm=lambda q, d: False), arch_state)
    assert [p.name for p in home.iterdir()] == [".config"]


def test_no_config_dir_means_no_prompt(make_ctx, home, arch_state):
    def never(question, default):
        raise AssertionError("should not prompt")

    BackupConfigStep().run(make_ctx(confirm=never), arch_state)
    assert list(home.iterdir()) == []


def test_backup_failure_is_fatal(monkeypatch, make_ctx, home, arch_state):
    _existing_config(home)

    def boom(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr("hyprdots_installer.steps.step_25_backup_config.backup_tree", boom)
    with pytest.raises(BackupFailure):
        BackupConfigStep().run(make_ctx(), arch_state)


def test_copy_tree_merges_and_keeps_symlinks(tmp_path):
    src = tmp_path / "src"
    (src / "sub").mkdir(parents=True)
    (src / "sub" / "a.conf").write_text("a", encoding="utf-8")
    (src / "link").symlink_to("sub/a.conf")
    dst = tmp_path / "dst"
    (dst / "sub").mkdir(parents=True)
    (dst / "sub" / "mine.conf").write_text("mine", encoding="utf-8")

    written = copy_tree(src, dst)

    assert (dst / "sub" / "a.conf").read_text(encoding="utf-8") == "a"
    assert (dst / "sub" / "mine.conf").read_text(encoding="utf-8") == "mine"
    assert (dst / "link").is_symlink()
    assert written == [dst / "sub" / "a.conf"]


def test_rewrite_only_touches_text_files(tmp_path):
    text = tmp_path / "a.conf"
    text.write_text("path=/home/matt/wall.png\n", encoding="utf-8")
    binary = tmp_path / "b.bin"
    binary.write_bytes(b"\x00/home/matt/\xff")

    changed = rewrite_home_paths([text, binary], "/home/matt/", "/home/alice/")

    assert changed == [text]
    assert text.read_text(encoding="utf-8") == "path=/home/alice/wall.png\n"
    assert binary.read_bytes() == b"\x00/home/matt/\xff"


def test_failed_backup_leaves_destination_untouched(monkeypatch, tmp_path):
    src = tmp_path / "src" / "hypr"
    src.mkdir(parents=True)
    (src / "hyprland.conf").write_text("new", encoding="utf-8")
    dst = tmp_path / "cfg" / "hypr"
    dst.mkdir(parents=True)
    (dst / "hyprland.conf").write_text("old", encoding="utf-8")

    def boom(src, dst):
        raise OSError("permission denied")

    monkeypatch.setattr(assets, "backup_tree", boom)
    entry = FileCopyEntry(source=src, destination=dst)

    [outcome] = apply_copy_plan([entry], tmp_path / "bk")
    assert not outcome.copied
    assert "permission denied" in outcome.backup_error
    assert (dst / "hyprland.conf").read_text(encoding="utf-8") == "old"

    [outcome] = apply_copy_plan([entry], tmp_path / "bk", allow_unsafe_overwrite=True)
    assert outcome.copied
    assert (dst / "hyprland.conf").read_text(encoding="utf-8") == "new"


def test_apply_config_force_copy_law(make_ctx, home, dotfiles_repo, arch_state):
    ctx = make_ctx()
    (ctx.repo_dir).mkdir()
    copy_tree(dotfiles_repo, ctx.repo_dir)
    _existing_config(home)

    state = ApplyConfigStep().run(ctx, arch_state)

    source = _tree(ctx.repo_dir / ".config")
    dest = _tree(home / ".config")
    for rel, data in source.items():
        if rel.endswith(".bin"):
            assert dest[rel] == data
        else:
            assert dest[rel] == data.replace(b"/home/matt/", f"{home}/".encode())
    # Pre-existing entries not in the repository survive.
    assert dest["kitty/kitty.conf"] == b"font_size 11"

    overwrite_dirs = [p for p in home.iterdir() if p.name.endswith(".overwrite")]
    assert len(overwrite_dirs) == 1
    assert (overwrite_dirs[0] / "hypr" / "hyprland.conf").read_text(encoding="utf-8") == "old"
    assert not (overwrite_dirs[0] / "quickshell").exists()

    result = state["execution"]["results"]["config_copy"]
    assert result["copied"] == ["hypr", "quickshell"]
    assert result["rewritten_files"] == 2


def test_plan_has_one_entry_per_top_level_item(tmp_path):
    src = tmp_path / ".config"
    (src / "b").mkdir(parents=True)
    (src / "a.conf").write_text("", encoding="utf-8")
    plan = plan_config_copy(src, tmp_path / "home" / ".config")
    assert [e.destination.name for e in plan] == ["a.conf", "b"]
    assert all(e.backup for e in plan)
