from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

from rich.prompt import Confirm

from .config import FamilyConfig, InstallerConfig
from .lib.command import Runner, run_cmd
from .lib.scratch import ScratchPaths
from .logging_utils import console


def ask_yes_no(question: str, default: bool = True) -> bool:
    return Confirm.ask(question, default=default, console=console)


@dataclass
class InstallCtx:
    cfg: InstallerConfig
    home: Path
    scratch: ScratchPaths = field(default_factory=ScratchPaths)
    runner: Runner = run_cmd
    confirm: Callable[[str, bool], bool] = ask_yes_no
    which: Callable[[str], Optional[str]] = shutil.which
    force: bool = False
    tmp_root: Path = Path("/tmp")

    @property
    def config_dir(self) -> Path:
        return self.home / ".config"

    @property
    def repo_dir(self) -> Path:
        return self.home / self.cfg.clone_dir

    def family(self, state: dict) -> FamilyConfig:
        return self.cfg.family((state.get("distro") or {}).get("family", ""))

    def recipes_root(self, state: dict) -> Optional[Path]:
        rel = self.family(state).recipes_dir
        return self.repo_dir / rel if rel else None
