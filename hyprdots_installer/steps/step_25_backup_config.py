from __future__ import annotations

import logging
import shutil
from typing import Any, Dict

from ..context import InstallCtx
from ..errors import BackupFailure
from ..lib.assets import backup_dir_for, backup_timestamp, backup_tree
from ..logging_utils import log_success

logger = logging.getLogger(__name__)


class BackupConfigStep:
    step_id = "25_backup_config"

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        config_dir = ctx.config_dir
        decisions = state.setdefault("execution", {}).setdefault("decisions", {})
        if not config_dir.is_dir():
            decisions["config_backup"] = None
            return state

        target = backup_dir_for(config_dir, backup_timestamp())
        logger.info("Existing %s directory found; backup would be saved as %s", config_dir, target)
        if not ctx.confirm(f"Backup {config_dir.name}?", True):
            logger.warning("Skipping %s backup - existing files may be overwritten!", config_dir.name)
            decisions["config_backup"] = None
            return state

        logger.info("Creating backup at %s", target)
        try:
            backup_tree(config_dir, target)
        except (OSError, shutil.Error) as e:
            raise BackupFailure(f"Failed to back up {config_dir} to {target}: {e}") from e

        log_success(logger, "Backup created successfully")
        decisions["config_backup"] = str(target)
        return state
