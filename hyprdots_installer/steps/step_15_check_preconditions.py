from __future__ import annotations

import logging
from typing import Any, Dict

from ..context import InstallCtx
from ..lib.preflight import check_disk_space, check_network, check_not_root, check_tool

logger = logging.getLogger(__name__)


class CheckPreconditionsStep:
    step_id = "15_check_preconditions"

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        check_not_root()
        check_network(ctx.runner, ctx.cfg.ping_host)
        check_tool(ctx.which, "git")
        free = check_disk_space(ctx.cfg.disk_path, ctx.cfg.min_free_bytes)

        state.setdefault("execution", {}).setdefault("decisions", {})["disk_free_bytes"] = free
        return state
