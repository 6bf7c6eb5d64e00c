from __future__ import annotations

import enum
import logging
from typing import Iterable, List, Sequence, Tuple

from .command import Runner

logger = logging.getLogger(__name__)


class ServiceEnableResult(enum.Enum):
    ENABLED = "enabled"
    FAILED = "failed"
    SKIPPED_UNAVAILABLE = "skipped-unavailable"


def unit_exists(runner: Runner, name: str) -> bool:
    return runner(["systemctl", "cat", name], check=False).ok


def enable_service(runner: Runner, name: str) -> ServiceEnableResult:
    if not unit_exists(runner, name):
        logger.info("%s is not available on this system; skipping", name)
        return ServiceEnableResult.SKIPPED_UNAVAILABLE
    r = runner(["systemctl", "enable", name], sudo=True, check=False)
    if r.ok:
        logger.info("%s enabled", name)
        return ServiceEnableResult.ENABLED
    logger.warning("Failed to enable %s", name)
    return ServiceEnableResult.FAILED


def ensure_started(runner: Runner, name: str) -> bool:
    if runner(["systemctl", "is-active", "--quiet", name], check=False).ok:
        return True
    logger.info("Starting %s...", name)
    return runner(["systemctl", "start", name], sudo=True, check=False).ok


def enable_services(
    runner: Runner, names: Sequence[str], *, start: Iterable[str] = ()
) -> List[Tuple[str, ServiceEnableResult]]:
    """One (name, result) pair per enable attempt, in order."""

    results = [(name, enable_service(runner, name)) for name in names]

    unavailable = {name for name, r in results if r is ServiceEnableResult.SKIPPED_UNAVAILABLE}
    for name in start:
        if name not in unavailable:
            ensure_started(runner, name)
    return results


def failure_count(results: Sequence[Tuple[str, ServiceEnableResult]]) -> int:
    return sum(1 for _, r in results if r is ServiceEnableResult.FAILED)


def enable_user_service(runner: Runner, name: str) -> bool:
    return runner(["systemctl", "--user", "enable", "--now", name], check=False).ok
