from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any, Dict

from ..context import InstallCtx
from ..lib.distro import detect_distro

logger = logging.getLogger(__name__)


class DetectEnvironmentStep:
    step_id = "10_detect_environment"

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        info = detect_distro(ctx.cfg.os_release_path)
        state["distro"] = asdict(info)
        return state
