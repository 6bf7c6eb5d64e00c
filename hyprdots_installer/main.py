from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from .config import load_config
from .context import InstallCtx, ask_yes_no
from .errors import InstallerError
from .lib.command import Runner, run_cmd
from .lib.scratch import ScratchPaths
from .logging_utils import DEFAULT_LOG_PATH, configure_logging, log_success
from .pipeline import run_pipeline
from .steps import (
    AggregatePackagesStep,
    ApplyConfigStep,
    BackupConfigStep,
    BuildRecipesStep,
    CheckPreconditionsStep,
    CloneDotfilesStep,
    DetectEnvironmentStep,
    EnableServicesStep,
    InstallIconThemeStep,
    InstallPackagesStep,
    RefreshCachesStep,
    WriteArtifactsStep,
)

logger = logging.getLogger(__name__)


def build_steps():
    return [
        DetectEnvironmentStep(),
        CheckPreconditionsStep(),
        CloneDotfilesStep(),
        BackupConfigStep(),
        AggregatePackagesStep(),
        InstallPackagesStep(),
        BuildRecipesStep(),
        ApplyConfigStep(),
        InstallIconThemeStep(),
        EnableServicesStep(),
        WriteArtifactsStep(),
        RefreshCachesStep(),
    ]


def summarize(state: Dict[str, Any]) -> None:
    warnings = (state.get("execution") or {}).get("warnings") or []
    if not warnings:
        log_success(logger, "Installation completed successfully!")
    else:
        logger.warning("Installation completed with %d warning(s):", len(warnings))
        for w in warnings:
            logger.warning("  [%s] %s", w.get("kind"), w.get("message"))
    logger.info("Please log out and log back in to start using your new configuration.")


def run(
    *,
    force: bool = False,
    manifest_path: Optional[str] = None,
    home: Optional[Path] = None,
    log_path: str = DEFAULT_LOG_PATH,
    runner: Runner = run_cmd,
    confirm: Callable[[str, bool], bool] = ask_yes_no,
    **ctx_overrides: Any,
) -> Dict[str, Any]:
    """Run the installer pipeline once, start to finish."""

    actual_log_path = configure_logging(log_path=log_path)
    cfg = load_config(manifest_path)

    state: Dict[str, Any] = {"execution": {"warnings": [], "log_path": actual_log_path}}

    with ScratchPaths() as scratch:
        ctx = InstallCtx(
            cfg=cfg,
            home=home or Path.home(),
            scratch=scratch,
            runner=runner,
            confirm=confirm,
            force=force,
            **ctx_overrides,
        )
        try:
            result = run_pipeline(ctx=ctx, state=state, steps=build_steps())
        except InstallerError:
            raise
        except Exception:
            logger.exception("Installer failed")
            raise
        state = result.state
        state["execution"]["ran_steps"] = result.ran_steps

    summarize(state)
    return state


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(
        prog="hyprdots-install",
        description="Install the Hyprland + Quickshell dotfiles and everything they depend on.",
    )
    p.add_argument(
        "--force",
        action="store_true",
        help="Upgrade the whole system first and overwrite conflicting files when installing",
    )

    args = p.parse_args(argv)

    try:
        run(force=args.force)
    except InstallerError as e:
        logger.error("%s", e)
        return e.exit_code
    except KeyboardInterrupt:
        logger.error("Interrupted")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
