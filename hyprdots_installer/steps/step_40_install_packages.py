from __future__ import annotations

import logging
from typing import Any, Dict, List

from ..config import FamilyConfig
from ..context import InstallCtx
from ..errors import BootstrapFailure, PackageInstallWarning, UserCancelled, record_warning
from ..lib import pkg
from ..lib.command import CmdResult
from ..lib.recipes import PackageSet, partition_packages
from ..logging_utils import log_success

logger = logging.getLogger(__name__)


class InstallPackagesStep:
    step_id = "40_install_packages"

    def _check(self, state: Dict[str, Any], r: CmdResult, what: str) -> bool:
        if r.ok:
            return True
        record_warning(state, PackageInstallWarning(f"{what} failed (exit {r.returncode})"))
        return False

    def _install_arch(
        self, ctx: InstallCtx, state: Dict[str, Any], family: FamilyConfig, primary: List[str], secondary: List[str]
    ) -> None:
        if ctx.force:
            logger.info("Updating system packages (force mode)...")
            self._check(state, pkg.pacman_upgrade(ctx.runner, force=True), "System upgrade")

        logger.info("Installing base development tools...")
        self._check(
            state, pkg.pacman_install(ctx.runner, family.prerequisites, force=ctx.force), "Base development tools"
        )

        pkg.bootstrap_aur_helper(
            ctx.runner,
            ctx.scratch,
            repo_url=ctx.cfg.yay_repo_url,
            which=ctx.which,
            tmp_root=ctx.tmp_root,
        )

        logger.info("Installing %d official repo packages with pacman...", len(primary))
        self._check(state, pkg.pacman_install(ctx.runner, primary, force=ctx.force), "pacman batch install")
        logger.info("Installing %d AUR packages with yay...", len(secondary))
        self._check(state, pkg.aur_install(ctx.runner, secondary, force=ctx.force), "yay batch install")

    def _install_fedora(
        self, ctx: InstallCtx, state: Dict[str, Any], family: FamilyConfig, primary: List[str], secondary: List[str]
    ) -> None:
        conflicting = [p for p in family.remove if pkg.dnf_is_installed(ctx.runner, p)]
        if conflicting:
            logger.info("Removing conflicting packages: %s", ", ".join(conflicting))
            self._check(state, pkg.dnf_remove(ctx.runner, conflicting), "Removal of conflicting packages")

        if ctx.force:
            logger.info("Updating system packages (force mode)...")
            self._check(state, pkg.dnf_upgrade(ctx.runner), "System upgrade")

        r = pkg.dnf_install(ctx.runner, family.prerequisites, force=ctx.force)
        if not r.ok:
            raise BootstrapFailure(f"Failed to install {', '.join(family.prerequisites)} (exit {r.returncode})")
        pkg.enable_copr_repos(ctx.runner, family.copr)

        logger.info("Installing %d packages with dnf...", len(primary))
        self._check(state, pkg.dnf_install(ctx.runner, primary, force=ctx.force), "dnf batch install")
        logger.info("Installing %d COPR packages with dnf...", len(secondary))
        self._check(state, pkg.dnf_install(ctx.runner, secondary, force=ctx.force), "dnf COPR batch install")

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        family_name = (state.get("distro") or {}).get("family")
        family = ctx.family(state)
        packages: PackageSet = state.get("packages") or PackageSet()

        primary, secondary = partition_packages(packages, family.official)
        plan = state.setdefault("execution", {}).setdefault("plan", {})
        plan["primary"] = primary
        plan["secondary"] = secondary

        if ctx.force:
            logger.info("FORCE REINSTALL MODE ENABLED - conflicting files will be overwritten")
        logger.info(
            "About to install %d packages (%d primary, %d community)", len(packages), len(primary), len(secondary)
        )
        if not ctx.confirm("Proceed with installation?", True):
            raise UserCancelled("Installation cancelled by user")

        if family_name == "arch":
            self._install_arch(ctx, state, family, primary, secondary)
        elif family_name == "fedora":
            self._install_fedora(ctx, state, family, primary, secondary)
        else:
            raise RuntimeError(f"no package strategy for family {family_name!r}")

        log_success(logger, "Package installation finished")
        return state
