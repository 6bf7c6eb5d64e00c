from __future__ import annotations

import logging
import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import Dict

from ..errors import UnsupportedEnvironment

logger = logging.getLogger(__name__)

SUPPORTED_FAMILIES = ("arch", "fedora")


@dataclass(frozen=True)
class DistroInfo:
    id: str
    pretty_name: str
    family: str


def parse_os_release(text: str) -> Dict[str, str]:
    """Parse os-release(5) KEY=value lines; values may be shell-quoted."""

    out: Dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        try:
            parts = shlex.split(value)
        except ValueError:
            parts = [value.strip("\"'")]
        out[key.strip()] = parts[0] if parts else ""
    return out


def family_of(fields: Dict[str, str]) -> str | None:
    ids = [fields.get("ID", "").lower(), *fields.get("ID_LIKE", "").lower().split()]
    for family in SUPPORTED_FAMILIES:
        if family in ids:
            return family
    return None


def detect_distro(os_release_path: str = "/etc/os-release") -> DistroInfo:
    p = Path(os_release_path)
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as e:
        raise UnsupportedEnvironment(f"Unable to detect distribution ({p}: {e.strerror})") from e

    fields = parse_os_release(text)
    pretty = fields.get("PRETTY_NAME") or fields.get("NAME") or fields.get("ID") or "unknown"
    family = family_of(fields)
    if family is None:
        raise UnsupportedEnvironment(
            f"Unsupported distribution: {pretty} (supported: {', '.join(SUPPORTED_FAMILIES)})"
        )

    info = DistroInfo(id=fields.get("ID", ""), pretty_name=pretty, family=family)
    logger.info("Detected: %s (family=%s)", info.pretty_name, info.family)
    return info
