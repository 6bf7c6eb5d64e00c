from __future__ import annotations

import logging

from .command import Runner

logger = logging.getLogger(__name__)


def is_online(runner: Runner, host: str = "8.8.8.8") -> bool:
    """One ICMP echo to host; any failure counts as offline."""

    r = runner(["ping", "-c", "1", "-W", "2", host], check=False)
    return r.ok
