from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..config import FamilyConfig, RecipeSpec
from ..context import InstallCtx
from ..errors import RecipeBuildWarning, record_warning
from ..lib import pkg
from ..lib.recipes import DECLARATION_FILE, BuildRecipe, find_prebuilt

logger = logging.getLogger(__name__)


class BuildRecipesStep:
    step_id = "50_build_recipes"

    def _install_one(self, ctx: InstallCtx, state: Dict[str, Any], root: Path, name: str) -> Optional[str]:
        recipe_dir = root / name
        artifact = find_prebuilt(name, [recipe_dir, root])
        if artifact is not None:
            logger.info("Installing prebuilt package: %s", artifact.name)
            r = pkg.pacman_install_file(ctx.runner, artifact)
            how = "prebuilt"
        elif (recipe_dir / DECLARATION_FILE).is_file():
            logger.info("Building and installing from %s: %s", DECLARATION_FILE, name)
            r = pkg.makepkg_install(ctx.runner, recipe_dir)
            how = "built"
        else:
            record_warning(state, RecipeBuildWarning(f"Recipe not found and no {DECLARATION_FILE} to build: {name}"))
            return None

        if not r.ok:
            record_warning(state, RecipeBuildWarning(f"Installing {name} ({how}) failed (exit {r.returncode})"))
            return None
        return how

    def _queue(self, family: FamilyConfig, discovered: List[BuildRecipe]) -> List[RecipeSpec]:
        """Manifest recipes in order, then discovered recipe dirs not listed there."""

        queue = list(family.recipes)
        listed = {spec.name for spec in queue}
        for recipe in discovered:
            if recipe.path.name not in listed:
                listed.add(recipe.path.name)
                queue.append(RecipeSpec(name=recipe.path.name))
        return queue

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        family = ctx.family(state)
        root = ctx.recipes_root(state)
        results: Dict[str, Optional[str]] = {}

        if root is None:
            logger.info("No local build recipes for this distribution")
        else:
            logger.info("Installing custom meta-packages from %s...", root.name)
            for spec in self._queue(family, state.get("recipes") or []):
                if spec.unless_exists and Path(spec.unless_exists).exists():
                    logger.info("Skipping %s (%s already present)", spec.name, spec.unless_exists)
                    continue
                results[spec.name] = self._install_one(ctx, state, root, spec.name)

        state.setdefault("execution", {}).setdefault("results", {})["recipes"] = results
        return state
