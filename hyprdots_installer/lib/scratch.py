from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import List

from ..errors import InstallerError

logger = logging.getLogger(__name__)


class ScratchPaths:
    """Temporary paths removed when the block exits, whether it succeeds or fails."""

    def __init__(self) -> None:
        self._paths: List[Path] = []

    def register(self, path: str | Path) -> Path:
        p = Path(path)
        if p not in self._paths:
            self._paths.append(p)
        return p

    @property
    def paths(self) -> List[Path]:
        return list(self._paths)

    def cleanup(self) -> None:
        for p in reversed(self._paths):
            if p.is_dir() and not p.is_symlink():
                shutil.rmtree(p, ignore_errors=True)
            elif p.exists() or p.is_symlink():
                try:
                    p.unlink()
                except OSError as e:
                    logger.debug("Could not remove %s: %s", p, e)
        self._paths.clear()

    def __enter__(self) -> "ScratchPaths":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None and issubclass(exc_type, InstallerError):
            logger.info("Cleaning up temporary files...")
        elif exc_type is not None:
            logger.error("Installation failed! Cleaning up...")
        self.cleanup()
