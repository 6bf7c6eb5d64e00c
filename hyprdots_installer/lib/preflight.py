from __future__ import annotations

import logging
import os
import shutil
from typing import Callable, Optional

from ..errors import PreconditionError
from .command import Runner
from .net import is_online

logger = logging.getLogger(__name__)

GIB = 1024**3


def check_not_root() -> None:
    if os.geteuid() == 0:
        raise PreconditionError("root", "This installer should not be run as root (don't use sudo)")


def check_network(runner: Runner, host: str) -> None:
    logger.info("Checking internet connectivity...")
    if not is_online(runner, host):
        raise PreconditionError(
            "network", "No internet connection detected. Please check your network and try again."
        )


def check_tool(which: Callable[[str], Optional[str]], tool: str = "git") -> None:
    if which(tool) is None:
        raise PreconditionError(tool, f"{tool} is not installed. Please install {tool} and try again.")


def check_disk_space(path: str, min_free_bytes: int) -> int:
    logger.info("Checking available disk space...")
    free = shutil.disk_usage(path).free
    if free < min_free_bytes:
        raise PreconditionError(
            "disk",
            f"Insufficient disk space on {path}: {free / GIB:.1f} GiB free, "
            f"at least {min_free_bytes / GIB:.1f} GiB required.",
        )
    return free
