from __future__ import annotations

import shutil
import textwrap
from dataclasses import dataclass
from pathlib import Path
from types import SimpleNamespace
from typing import Callable, List, Optional, Sequence

import pytest
import yaml

from hyprdots_installer.config import load_config
from hyprdots_installer.context import InstallCtx
from hyprdots_installer.lib import preflight
from hyprdots_installer.lib.command import CmdResult, CommandError
from hyprdots_installer.lib.scratch import ScratchPaths

ARCH_OS_RELEASE = textwrap.dedent(
    """\
    NAME="Arch Linux"
    PRETTY_NAME="Arch Linux"
    ID=arch
    BUILD_ID=rolling
    """
)


@dataclass
class Call:
    argv: List[str]
    cwd: Optional[str]


class FakeRunner:
    """Records commands instead of running them.

    Rules are matched on the argv prefix (without sudo); the last matching
    rule wins. Unmatched commands succeed.
    """

    def __init__(self) -> None:
        self.calls: List[Call] = []
        self._rules: list = []

    def on(self, prefix: Sequence[str], returncode: int = 0, effect: Optional[Callable] = None) -> "FakeRunner":
        self._rules.append((list(prefix), returncode, effect))
        return self

    def __call__(self, argv, *, check=True, cwd=None, sudo=False, capture=True) -> CmdResult:
        argv = list(argv)
        full = (["sudo"] if sudo else []) + argv
        self.calls.append(Call(argv=full, cwd=cwd))

        returncode = 0
        for prefix, rc, effect in reversed(self._rules):
            if argv[: len(prefix)] == prefix:
                if effect is not None:
                    effect(argv, cwd)
                returncode = rc
                break

        result = CmdResult(argv=full, returncode=returncode, stdout="", stderr="")
        if check and not result.ok:
            raise CommandError(result)
        return result

    @property
    def commands(self) -> List[List[str]]:
        return [c.argv for c in self.calls]

    def ran(self, *prefix: str) -> bool:
        return any(c[: len(prefix)] == list(prefix) for c in self.commands)

    def index(self, *prefix: str) -> int:
        for i, c in enumerate(self.commands):
            if c[: len(prefix)] == list(prefix):
                return i
        raise ValueError(prefix)


def fake_which(*present: str) -> Callable[[str], Optional[str]]:
    return lambda name: f"/usr/bin/{name}" if name in present else None


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def home(tmp_path: Path) -> Path:
    h = tmp_path / "home" / "alice"
    h.mkdir(parents=True)
    return h


@pytest.fixture
def os_release(tmp_path: Path) -> Path:
    p = tmp_path / "os-release"
    p.write_text(ARCH_OS_RELEASE, encoding="utf-8")
    return p


@pytest.fixture
def manifest(tmp_path: Path, os_release: Path) -> Path:
    raw = {
        "repo_url": "https://example.invalid/dotfiles.git",
        "clone_dir": "Dotfiles",
        "template_home": "/home/matt/",
        "os_release_path": str(os_release),
        "yay_repo_url": "https://aur.example.invalid/yay-bin.git",
        "preflight": {"ping_host": "192.0.2.1", "disk_path": str(tmp_path), "min_free_gib": 2},
        "services": ["NetworkManager", "sddm", "bluetooth"],
        "start_services": ["NetworkManager"],
        "user_services": ["cliphist.service"],
        "families": {
            "arch": {
                "prerequisites": ["base-devel", "git"],
                "recipes_dir": "Arch-packages",
                "official": ["hyprland", "git", "sddm"],
                "community": ["quickshell", "fish"],
                "recipes": ["pkg-a", "pkg-b"],
            },
            "fedora": {
                "prerequisites": ["git", "dnf-plugins-core"],
                "remove": ["jack2-lib"],
                "copr": ["someone/hyprland"],
                "official": ["hyprland", "git"],
                "community": ["quickshell"],
            },
        },
    }
    p = tmp_path / "manifest.yaml"
    p.write_text(yaml.safe_dump(raw), encoding="utf-8")
    return p


@pytest.fixture
def dotfiles_repo(tmp_path: Path) -> Path:
    """Upstream repository contents: a .config tree and two recipes."""

    repo = tmp_path / "upstream"
    hypr = repo / ".config" / "hypr"
    hypr.mkdir(parents=True)
    (hypr / "hyprland.conf").write_text("source = /home/matt/.config/hypr/colors.conf\n", encoding="utf-8")
    qs = repo / ".config" / "quickshell"
    qs.mkdir(parents=True)
    (qs / "shell.qml").write_text('property string wall: "/home/matt/Pictures/wall.png"\n', encoding="utf-8")
    (qs / "icon.bin").write_bytes(b"\x89PNG\x00/home/matt/\x00")

    pkg_a = repo / "Arch-packages" / "pkg-a"
    pkg_a.mkdir(parents=True)
    (pkg_a / "PKGBUILD").write_text(
        "pkgname=pkg-a\npkgver=1.0\ndepends=(\n  hyprland\n  'foo-lib>=2'\n)\nmakedepends=(cmake)\n",
        encoding="utf-8",
    )
    (pkg_a / "pkg-a-1.0-1-any.pkg.tar.zst").write_bytes(b"prebuilt")

    pkg_b = repo / "Arch-packages" / "pkg-b"
    pkg_b.mkdir(parents=True)
    (pkg_b / "PKGBUILD").write_text(
        'pkgname=pkg-b\ndepends=("bar-tool" quickshell)  # runtime\nmakedepends=(\'git\')\n',
        encoding="utf-8",
    )
    return repo


def clone_from(source: Path) -> Callable:
    def effect(argv, cwd):
        shutil.copytree(source, argv[-1])

    return effect


def mkdir_effect(argv, cwd):
    Path(argv[-1]).mkdir(parents=True, exist_ok=True)


@pytest.fixture
def not_root(monkeypatch):
    monkeypatch.setattr(preflight.os, "geteuid", lambda: 1000)


@pytest.fixture
def plenty_of_disk(monkeypatch):
    monkeypatch.setattr(preflight.shutil, "disk_usage", lambda path: SimpleNamespace(free=50 * 1024**3))


@pytest.fixture
def make_ctx(manifest: Path, home: Path, runner: FakeRunner, tmp_path: Path):
    def _make(**overrides) -> InstallCtx:
        kwargs = dict(
            cfg=load_config(manifest),
            home=home,
            scratch=ScratchPaths(),
            runner=runner,
            confirm=lambda question, default: True,
            which=fake_which("git"),
            tmp_root=tmp_path / "tmp",
        )
        kwargs.update(overrides)
        return InstallCtx(**kwargs)

    return _make


@pytest.fixture
def arch_state() -> dict:
    return {"distro": {"id": "arch", "pretty_name": "Arch Linux", "family": "arch"}, "execution": {}}
