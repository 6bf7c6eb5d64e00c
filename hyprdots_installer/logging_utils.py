from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

DEFAULT_LOG_PATH = str(Path.home() / ".cache" / "hyprdots-installer" / "install.log")

SUCCESS = 25
logging.addLevelName(SUCCESS, "SUCCESS")

console = Console(
    theme=Theme(
        {
            "logging.level.info": "bold blue",
            "logging.level.success": "bold green",
            "logging.level.warning": "bold yellow",
            "logging.level.error": "bold red",
        }
    )
)


def log_success(logger: logging.Logger, msg: str, *args: object) -> None:
    logger.log(SUCCESS, msg, *args)


def configure_logging(
    log_path: str = DEFAULT_LOG_PATH,
    level: int = logging.DEBUG,
    also_console: bool = True,
) -> str:
    """Configure logging.

    Every command and decision goes to the log file at DEBUG; the console
    gets coloured INFO/SUCCESS/WARNING/ERROR status lines through rich.

    If the requested log file cannot be opened we fall back to a file in the
    working directory and report both paths.

    Returns the actual file path being used.
    """

    logger = logging.getLogger()
    logger.setLevel(level)

    # Avoid duplicate handlers if configure_logging() is called multiple times.
    if getattr(logger, "_hyprdots_configured", False):
        return getattr(logger, "_hyprdots_log_path", log_path)

    chosen_path = log_path
    handlers: list[logging.Handler] = []

    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    file_handler: Optional[logging.Handler] = None
    try:
        Path(os.path.dirname(log_path) or ".").mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
    except OSError:
        fallback = str(Path.cwd() / "hyprdots-installer.log")
        file_handler = logging.FileHandler(fallback)
        chosen_path = fallback
    file_handler.setFormatter(fmt)
    file_handler.setLevel(logging.DEBUG)
    handlers.append(file_handler)

    if also_console:
        rich_handler = RichHandler(console=console, show_path=False, show_time=False, markup=False)
        rich_handler.setLevel(logging.INFO)
        handlers.append(rich_handler)

    for h in handlers:
        logger.addHandler(h)

    setattr(logger, "_hyprdots_configured", True)
    setattr(logger, "_hyprdots_log_path", chosen_path)

    logging.getLogger(__name__).debug(
        "Logging initialized (requested=%s, actual=%s)", log_path, chosen_path
    )
    return chosen_path
