from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Protocol, Sequence

from .context import InstallCtx

logger = logging.getLogger(__name__)


class Step(Protocol):
    """A single installer step; runs exactly once per invocation."""

    step_id: str

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        ...


@dataclass(frozen=True)
class PipelineResult:
    state: Dict[str, Any]
    ran_steps: List[str]


def run_pipeline(*, ctx: InstallCtx, state: Dict[str, Any], steps: Sequence[Step]) -> PipelineResult:
    """Run steps in order; a fatal error stops the run where it is raised."""

    ran: List[str] = []
    for step in steps:
        state.setdefault("execution", {})["current_step"] = step.step_id
        logger.debug("Running step %s", step.step_id)
        state = step.run(ctx, state)
        ran.append(step.step_id)

    state.setdefault("execution", {})["current_step"] = None
    return PipelineResult(state=state, ran_steps=ran)
