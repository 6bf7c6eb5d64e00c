from __future__ import annotations

import logging
import shutil
from typing import Any, Dict

from ..context import InstallCtx
from ..errors import CloneFailure
from ..logging_utils import log_success

logger = logging.getLogger(__name__)


class CloneDotfilesStep:
    step_id = "20_clone_dotfiles"

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        repo_dir = ctx.repo_dir
        if repo_dir.exists():
            logger.info("Removing existing %s directory...", repo_dir.name)
            shutil.rmtree(repo_dir)

        url = ctx.cfg.repo_url
        logger.info("Cloning from: %s", url)
        r = ctx.runner(["git", "clone", url, str(repo_dir)], check=False)
        if not r.ok:
            raise CloneFailure(
                f"Failed to clone repository from {url}. Check your connection or try "
                f"manually: git clone {url} {repo_dir}"
            )

        if not (repo_dir / ".config").is_dir():
            raise CloneFailure("Configuration directory not found in cloned repository; it may be incomplete.")

        recipes_root = ctx.recipes_root(state)
        if recipes_root is not None and not recipes_root.is_dir():
            logger.warning("%s directory not found in repository; no local recipes will be built", recipes_root.name)

        log_success(logger, "Repository cloned successfully")
        state["repo_dir"] = str(repo_dir)
        return state
