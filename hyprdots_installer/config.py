from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from .lib.manifests import default_manifest_path, load_yaml


def _str_list(value: Any) -> List[str]:
    return [str(v).strip() for v in (value or []) if str(v).strip()]


@dataclass(frozen=True)
class RecipeSpec:
    name: str
    unless_exists: Optional[str] = None


@dataclass(frozen=True)
class FamilyConfig:
    raw: Dict[str, Any]

    @property
    def official(self) -> List[str]:
        return _str_list(self.raw.get("official"))

    @property
    def community(self) -> List[str]:
        return _str_list(self.raw.get("community"))

    @property
    def prerequisites(self) -> List[str]:
        return _str_list(self.raw.get("prerequisites"))

    @property
    def remove(self) -> List[str]:
        return _str_list(self.raw.get("remove"))

    @property
    def copr(self) -> List[str]:
        return _str_list(self.raw.get("copr"))

    @property
    def recipes_dir(self) -> Optional[str]:
        value = self.raw.get("recipes_dir")
        return str(value) if value else None

    @property
    def recipes(self) -> List[RecipeSpec]:
        out: List[RecipeSpec] = []
        for item in self.raw.get("recipes") or []:
            if isinstance(item, dict):
                out.append(RecipeSpec(name=str(item["name"]), unless_exists=item.get("unless_exists")))
            else:
                out.append(RecipeSpec(name=str(item)))
        return out

    @property
    def icon_theme(self) -> bool:
        return bool(self.raw.get("icon_theme", False))


@dataclass(frozen=True)
class InstallerConfig:
    raw: Dict[str, Any]

    @property
    def repo_url(self) -> str:
        return str(self.raw.get("repo_url") or "https://github.com/ryzendew/Matts-Quickshell-Hyprland.git")

    @property
    def clone_dir(self) -> str:
        return str(self.raw.get("clone_dir") or "Dotfiles")

    @property
    def template_home(self) -> str:
        return str(self.raw.get("template_home") or "/home/matt/")

    @property
    def allow_unsafe_overwrite(self) -> bool:
        return bool(self.raw.get("allow_unsafe_overwrite", False))

    @property
    def ping_host(self) -> str:
        return str(((self.raw.get("preflight") or {}).get("ping_host")) or "8.8.8.8")

    @property
    def disk_path(self) -> str:
        return str(((self.raw.get("preflight") or {}).get("disk_path")) or "/")

    @property
    def min_free_bytes(self) -> int:
        gib = (self.raw.get("preflight") or {}).get("min_free_gib", 2)
        return int(float(gib) * 1024**3)

    @property
    def os_release_path(self) -> str:
        return str(self.raw.get("os_release_path") or "/etc/os-release")

    @property
    def services(self) -> List[str]:
        # Each unit is enabled once even if listed twice.
        return list(dict.fromkeys(_str_list(self.raw.get("services"))))

    @property
    def start_services(self) -> List[str]:
        return _str_list(self.raw.get("start_services"))

    @property
    def user_services(self) -> List[str]:
        return _str_list(self.raw.get("user_services"))

    @property
    def icon_theme_repos(self) -> List[str]:
        return _str_list((self.raw.get("icon_theme") or {}).get("repos"))

    @property
    def yay_repo_url(self) -> str:
        return str(self.raw.get("yay_repo_url") or "https://aur.archlinux.org/yay-bin.git")

    def family(self, name: str) -> FamilyConfig:
        families = self.raw.get("families") or {}
        return FamilyConfig(raw=dict(families.get(name) or {}))


def load_config(path: str | Path | None = None) -> InstallerConfig:
    p = Path(path) if path else default_manifest_path()
    if not p.exists():
        raise FileNotFoundError(str(p))

    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ValueError("installer manifest must be YAML")

    return InstallerConfig(raw=load_yaml(p))
