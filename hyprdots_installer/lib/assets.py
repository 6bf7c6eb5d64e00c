from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)

BACKUP_TS_FORMAT = "%Y%m%d_%H%M%S"


def backup_timestamp(now: Optional[datetime] = None) -> str:
    return (now or datetime.now()).strftime(BACKUP_TS_FORMAT)


def backup_dir_for(config_dir: Path, timestamp: str, *, overwrite: bool = False) -> Path:
    """<config-dir>.backup.<ts>, or <config-dir>.backup.<ts>.overwrite."""
    name = f"{config_dir.name}.backup.{timestamp}"
    if overwrite:
        name += ".overwrite"
    return config_dir.with_name(name)


def _copy_entry(src: Path, dst: Path) -> None:
    if dst.is_symlink():
        dst.unlink()
    if src.is_symlink():
        if dst.is_file():
            dst.unlink()
        os.symlink(os.readlink(src), dst)
    else:
        shutil.copy2(src, dst)


def copy_tree(src: str | Path, dst: str | Path) -> List[Path]:
    """Recursively copy src over dst, merging into existing directories.

    Symlinks are recreated, not followed. Returns the regular files written.
    """

    s = Path(src)
    d = Path(dst)
    if not s.exists() and not s.is_symlink():
        raise FileNotFoundError(str(src))

    written: List[Path] = []
    if s.is_symlink() or s.is_file():
        if d.is_dir() and not d.is_symlink():
            shutil.rmtree(d)
        d.parent.mkdir(parents=True, exist_ok=True)
        _copy_entry(s, d)
        if not s.is_symlink():
            written.append(d)
        return written

    if d.is_symlink() or (d.exists() and not d.is_dir()):
        d.unlink()
    d.mkdir(parents=True, exist_ok=True)
    for root, dirs, files in os.walk(s):
        rel = Path(root).relative_to(s)
        out_dir = d / rel
        out_dir.mkdir(parents=True, exist_ok=True)
        for name in list(dirs):
            item = Path(root) / name
            if item.is_symlink():
                dirs.remove(name)
                target = out_dir / name
                if target.is_dir() and not target.is_symlink():
                    shutil.rmtree(target)
                _copy_entry(item, target)
        for name in files:
            item = Path(root) / name
            target = out_dir / name
            if target.is_dir() and not target.is_symlink():
                shutil.rmtree(target)
            _copy_entry(item, target)
            if not item.is_symlink():
                written.append(target)
    return written


def backup_tree(src: Path, dst: Path) -> Path:
    """Full recursive copy of src at dst; dst must not exist yet."""

    if src.is_dir() and not src.is_symlink():
        shutil.copytree(src, dst, symlinks=True)
    else:
        dst.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(src, dst, follow_symlinks=False)
    return dst


def rewrite_home_paths(paths: List[Path], template: str, replacement: str) -> List[Path]:
    """Replace template in text files only; binaries and symlinks are skipped."""

    changed: List[Path] = []
    needle = template.encode("utf-8")
    for p in paths:
        if p.is_symlink() or not p.is_file():
            continue
        data = p.read_bytes()
        if needle not in data or b"\0" in data:
            continue
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError:
            continue
        p.write_text(text.replace(template, replacement), encoding="utf-8")
        changed.append(p)
    return changed


@dataclass(frozen=True)
class FileCopyEntry:
    source: Path
    destination: Path
    backup: bool = True


@dataclass
class CopyOutcome:
    entry: FileCopyEntry
    backed_up_to: Optional[Path] = None
    copied: bool = False
    files: List[Path] = field(default_factory=list)
    backup_error: Optional[str] = None
    copy_error: Optional[str] = None


def plan_config_copy(source_dir: Path, dest_dir: Path) -> List[FileCopyEntry]:
    """One entry per top-level item of the source config directory."""

    return [
        FileCopyEntry(source=item, destination=dest_dir / item.name)
        for item in sorted(source_dir.iterdir())
    ]


def apply_copy_plan(
    plan: List[FileCopyEntry],
    backup_root: Path,
    *,
    allow_unsafe_overwrite: bool = False,
) -> List[CopyOutcome]:
    """Back up then force-copy each entry in turn.

    An entry whose backup failed is not overwritten unless
    allow_unsafe_overwrite is set.
    """

    outcomes: List[CopyOutcome] = []
    for entry in plan:
        outcome = CopyOutcome(entry=entry)
        outcomes.append(outcome)
        dst = entry.destination

        if entry.backup and (dst.exists() or dst.is_symlink()):
            logger.info("Backing up %s before overwriting...", dst.name)
            try:
                backup_root.mkdir(parents=True, exist_ok=True)
                outcome.backed_up_to = backup_tree(dst, backup_root / dst.name)
            except (OSError, shutil.Error) as e:
                outcome.backup_error = f"backup of {dst} failed: {e}"
                if not allow_unsafe_overwrite:
                    continue

        logger.info("Force copying %s...", entry.source.name)
        try:
            outcome.files = copy_tree(entry.source, dst)
            outcome.copied = True
        except (OSError, shutil.Error) as e:
            outcome.copy_error = f"copy of {entry.source} failed: {e}"
    return outcomes
