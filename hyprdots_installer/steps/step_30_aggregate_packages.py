from __future__ import annotations

import logging
from typing import Any, Dict, List

from ..context import InstallCtx
from ..errors import RecipeParseWarning, record_warning
from ..lib.recipes import aggregate_packages, discover_recipes

logger = logging.getLogger(__name__)


class AggregatePackagesStep:
    step_id = "30_aggregate_packages"

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        family = ctx.family(state)

        logger.info("Aggregating dependencies from local build recipes...")
        parse_warnings: List[RecipeParseWarning] = []
        recipes = discover_recipes(ctx.recipes_root(state), parse_warnings)
        for w in parse_warnings:
            record_warning(state, w)

        packages = aggregate_packages([*family.official, *family.community], recipes)

        plan = state.setdefault("execution", {}).setdefault("plan", {})
        plan["recipes"] = [r.name for r in recipes]
        plan["packages"] = list(packages)
        state["packages"] = packages
        state["recipes"] = recipes
        logger.info("%d packages planned (%d recipes scanned)", len(packages), len(recipes))
        return state
