from __future__ import annotations

import logging
from typing import Any, Dict

from ..context import InstallCtx
from ..lib.artifacts import write_static_artifacts

logger = logging.getLogger(__name__)


class WriteArtifactsStep:
    step_id = "80_write_artifacts"

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        logger.info("Writing environment, GTK theme and session scripts...")
        written = write_static_artifacts(ctx.home, with_fish=ctx.which("fish") is not None)
        state.setdefault("execution", {}).setdefault("results", {})["artifacts"] = [
            str(p.relative_to(ctx.home)) for p in written
        ]
        return state
