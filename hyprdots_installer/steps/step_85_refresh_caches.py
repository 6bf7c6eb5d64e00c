from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List

from ..context import InstallCtx

logger = logging.getLogger(__name__)

CURSOR_THEME = "Bibata-Modern-Classic"
ICON_CACHE_DIRS = ("/usr/share/icons/hicolor", "/usr/share/icons/Papirus")


class RefreshCachesStep:
    """Best-effort desktop housekeeping; nothing here can fail the run."""

    step_id = "85_refresh_caches"

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        commands: List[List[str]] = [
            ["xdg-user-dirs-update"],
            ["fc-cache", "-f"],
        ]
        commands += [["gtk-update-icon-cache", "-f", "-t", d] for d in ICON_CACHE_DIRS if Path(d).is_dir()]
        if Path(f"/usr/share/icons/{CURSOR_THEME}/cursors/left_ptr").exists():
            commands.append(["gsettings", "set", "org.gnome.desktop.interface", "cursor-theme", CURSOR_THEME])

        failed: List[str] = []
        for argv in commands:
            if not ctx.runner(argv, check=False).ok:
                failed.append(argv[0])
        if failed:
            logger.info("Skipped/failed housekeeping: %s", ", ".join(failed))

        (ctx.home / ".local" / "share" / "cliphist").mkdir(parents=True, exist_ok=True)
        return state
