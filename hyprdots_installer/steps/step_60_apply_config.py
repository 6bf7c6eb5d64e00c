from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List

from ..context import InstallCtx
from ..errors import BackupWarning, ConfigCopyWarning, record_warning
from ..lib.assets import (
    apply_copy_plan,
    backup_dir_for,
    backup_timestamp,
    plan_config_copy,
    rewrite_home_paths,
)
from ..logging_utils import log_success

logger = logging.getLogger(__name__)


class ApplyConfigStep:
    step_id = "60_apply_config"

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        source = ctx.repo_dir / ".config"
        ctx.config_dir.mkdir(parents=True, exist_ok=True)

        plan = plan_config_copy(source, ctx.config_dir)
        backup_root = backup_dir_for(ctx.config_dir, backup_timestamp(), overwrite=True)
        outcomes = apply_copy_plan(plan, backup_root, allow_unsafe_overwrite=ctx.cfg.allow_unsafe_overwrite)

        copied: List[Path] = []
        for o in outcomes:
            if o.backup_error:
                suffix = "; overwritten anyway" if o.copied else "; left untouched"
                record_warning(state, BackupWarning(f"{o.backup_error}{suffix}"))
            if o.copy_error:
                record_warning(state, ConfigCopyWarning(o.copy_error))
            copied.extend(o.files)

        logger.info("Fixing hardcoded paths for current user...")
        home = str(ctx.home).rstrip("/") + "/"
        rewritten = rewrite_home_paths(copied, ctx.cfg.template_home, home)

        state.setdefault("execution", {}).setdefault("results", {})["config_copy"] = {
            "backup_dir": str(backup_root) if backup_root.exists() else None,
            "copied": [o.entry.source.name for o in outcomes if o.copied],
            "skipped": [o.entry.source.name for o in outcomes if not o.copied],
            "rewritten_files": len(rewritten),
        }
        log_success(logger, "Configuration files copied (backups made of overwritten entries)")
        return state
