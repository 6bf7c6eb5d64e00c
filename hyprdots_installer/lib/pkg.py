from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Callable, Optional, Sequence

from ..errors import BootstrapFailure
from .command import CmdResult, Runner
from .scratch import ScratchPaths

logger = logging.getLogger(__name__)

OVERWRITE_ALL = ["--overwrite", "*"]


def _skipped(argv: Sequence[str]) -> CmdResult:
    return CmdResult(argv=list(argv), returncode=0, stdout="", stderr="")


# -- pacman / AUR (Arch family) ------------------------------------------------


def pacman_upgrade(runner: Runner, *, force: bool = False) -> CmdResult:
    argv = ["pacman", "-Syu", "--noconfirm"]
    if force:
        argv += OVERWRITE_ALL
    return runner(argv, sudo=True, check=False, capture=False)


def pacman_install(runner: Runner, packages: Sequence[str], *, force: bool = False) -> CmdResult:
    argv = ["pacman", "-S", "--needed", "--noconfirm"]
    if force:
        argv += OVERWRITE_ALL
    if not packages:
        return _skipped(argv)
    return runner([*argv, *packages], sudo=True, check=False, capture=False)


def pacman_install_file(runner: Runner, artifact: Path) -> CmdResult:
    return runner(["pacman", "-U", "--noconfirm", str(artifact)], sudo=True, check=False, capture=False)


def aur_install(
    runner: Runner, packages: Sequence[str], *, helper: str = "yay", force: bool = False
) -> CmdResult:
    argv = [helper, "-S", "--needed", "--noconfirm"]
    if force:
        argv += OVERWRITE_ALL
    if not packages:
        return _skipped(argv)
    # AUR helpers escalate on their own and refuse to run under sudo.
    return runner([*argv, *packages], check=False, capture=False)


def makepkg_install(runner: Runner, recipe_dir: Path) -> CmdResult:
    return runner(["makepkg", "-si", "--noconfirm"], cwd=str(recipe_dir), check=False, capture=False)


def bootstrap_aur_helper(
    runner: Runner,
    scratch: ScratchPaths,
    *,
    repo_url: str,
    helper: str = "yay",
    which: Callable[[str], Optional[str]] = shutil.which,
    tmp_root: Path = Path("/tmp"),
) -> bool:
    """Build and install the AUR helper from its recipe if it is missing.

    Returns True when a build happened. Any failure is fatal.
    """

    if which(helper) is not None:
        logger.info("%s is already installed", helper)
        return False

    logger.info("Installing %s AUR helper...", helper)
    build_dir = scratch.register(tmp_root / f"{helper}-bin")
    if build_dir.exists():
        shutil.rmtree(build_dir, ignore_errors=True)

    r = runner(["git", "clone", repo_url, str(build_dir)], check=False)
    if not r.ok:
        raise BootstrapFailure(f"Failed to clone {repo_url} (exit {r.returncode})")

    r = makepkg_install(runner, build_dir)
    if not r.ok:
        raise BootstrapFailure(f"Failed to build {helper} from {build_dir} (exit {r.returncode})")

    shutil.rmtree(build_dir, ignore_errors=True)
    return True


# -- dnf (Fedora family) ------------------------------------------------------


def dnf_upgrade(runner: Runner) -> CmdResult:
    return runner(["dnf", "upgrade", "-y", "--refresh"], sudo=True, check=False, capture=False)


def dnf_install(runner: Runner, packages: Sequence[str], *, force: bool = False) -> CmdResult:
    argv = ["dnf", "install", "-y"]
    if force:
        argv.append("--allowerasing")
    if not packages:
        return _skipped(argv)
    return runner([*argv, *packages], sudo=True, check=False, capture=False)


def dnf_is_installed(runner: Runner, package: str) -> bool:
    return runner(["dnf", "list", "--installed", package], check=False).ok


def dnf_remove(runner: Runner, packages: Sequence[str]) -> CmdResult:
    argv = ["dnf", "remove", "-y"]
    if not packages:
        return _skipped(argv)
    return runner([*argv, *packages], sudo=True, check=False, capture=False)


def enable_copr_repos(runner: Runner, repos: Sequence[str]) -> None:
    """Enable community (COPR) repositories; any failure is fatal."""

    for repo in repos:
        r = runner(["dnf", "copr", "enable", "-y", repo], sudo=True, check=False)
        if not r.ok:
            raise BootstrapFailure(f"Failed to enable COPR repository {repo} (exit {r.returncode})")
