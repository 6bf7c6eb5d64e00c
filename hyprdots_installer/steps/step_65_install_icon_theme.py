from __future__ import annotations

import logging
import shutil
from typing import Any, Dict

from ..context import InstallCtx
from ..errors import IconThemeWarning, record_warning
from ..logging_utils import log_success

logger = logging.getLogger(__name__)

INSTALL_VARIANTS = (["-a"], ["-c", "green", "-a"])


class InstallIconThemeStep:
    step_id = "65_install_icon_theme"

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        repos = ctx.cfg.icon_theme_repos
        if not ctx.family(state).icon_theme or not repos:
            return state

        work = ctx.scratch.register(ctx.tmp_root / "Tela-circle-icon-theme")
        if work.exists():
            shutil.rmtree(work, ignore_errors=True)

        installed = False
        try:
            cloned = False
            for url in repos:
                logger.info("Cloning icon theme repository %s...", url)
                if ctx.runner(["git", "clone", "--depth=1", url, str(work)], check=False).ok:
                    cloned = True
                    break
                shutil.rmtree(work, ignore_errors=True)
            if not cloned:
                record_warning(state, IconThemeWarning("Failed to clone icon theme repositories; skipping"))
                return state

            for args in INSTALL_VARIANTS:
                r = ctx.runner(["./install.sh", *args], cwd=str(work), sudo=True, check=False, capture=False)
                if r.ok:
                    installed = True
                    break
            if installed:
                log_success(logger, "Icon theme installed")
            else:
                record_warning(state, IconThemeWarning("Failed to install icon theme; skipping"))
        finally:
            shutil.rmtree(work, ignore_errors=True)
            state.setdefault("execution", {}).setdefault("results", {})["icon_theme"] = installed
        return state
