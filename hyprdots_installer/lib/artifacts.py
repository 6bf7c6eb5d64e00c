from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence

from .manifests import asset_path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StaticArtifact:
    asset: str
    # Relative to the user's home.
    destination: str
    mode: int = 0o644


STATIC_ARTIFACTS: Sequence[StaticArtifact] = (
    StaticArtifact("99-hyprland.conf", ".config/environment.d/99-hyprland.conf"),
    StaticArtifact("gtk-settings.ini", ".config/gtk-3.0/settings.ini"),
    StaticArtifact("gtk-settings.ini", ".config/gtk-4.0/settings.ini"),
    StaticArtifact("performance.conf", ".config/hypr/performance.conf"),
    StaticArtifact("startup.sh", ".config/hypr/scripts/startup.sh", 0o755),
    StaticArtifact("shutdown.sh", ".config/hypr/scripts/shutdown.sh", 0o755),
    StaticArtifact("theme-manager.sh", ".config/hypr/scripts/theme-manager.sh", 0o755),
)

FISH_AUTOSTART = StaticArtifact("auto-Hypr.fish", ".config/fish/auto-Hypr.fish")

THEME_DIRS = (".config/hypr/assets/themes", ".config/hypr/assets/wallpapers")


def write_artifact(home: Path, artifact: StaticArtifact) -> Path:
    """Always fully overwrites the destination."""

    dst = home / artifact.destination
    dst.parent.mkdir(parents=True, exist_ok=True)
    dst.write_text(asset_path(artifact.asset).read_text(encoding="utf-8"), encoding="utf-8")
    dst.chmod(artifact.mode)
    logger.debug("Wrote %s", dst)
    return dst


def write_static_artifacts(home: Path, *, with_fish: bool = False) -> List[Path]:
    artifacts = list(STATIC_ARTIFACTS)
    if with_fish:
        artifacts.append(FISH_AUTOSTART)

    written = [write_artifact(home, a) for a in artifacts]
    for rel in THEME_DIRS:
        (home / rel).mkdir(parents=True, exist_ok=True)
    return written
