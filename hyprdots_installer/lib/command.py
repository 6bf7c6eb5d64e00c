from __future__ import annotations

import logging
import os
import shlex
import subprocess
from dataclasses import dataclass
from typing import Mapping, Protocol, Sequence

logger = logging.getLogger(__name__)


class CommandError(RuntimeError):
    def __init__(self, result: "CmdResult") -> None:
        super().__init__(
            f"Command failed ({result.returncode}): {fmt_argv(result.argv)}\n{result.stderr}"
        )
        self.result = result


@dataclass(frozen=True)
class CmdResult:
    argv: list[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class Runner(Protocol):
    def __call__(
        self,
        argv: Sequence[str],
        *,
        check: bool = ...,
        cwd: str | None = ...,
        sudo: bool = ...,
        capture: bool = ...,
    ) -> CmdResult:
        ...


def fmt_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


def run_cmd(
    argv: Sequence[str],
    *,
    check: bool = True,
    cwd: str | None = None,
    sudo: bool = False,
    capture: bool = True,
    env: Mapping[str, str] | None = None,
) -> CmdResult:
    """Run a command with consistent logging.

    - Always logs the command.
    - sudo prefixes the argv; the installer itself never runs as root.
    - capture=False lets package managers talk to the terminal directly
      (progress bars, sudo password prompts).
    """

    argv_list = (["sudo"] if sudo else []) + list(argv)
    logger.info("CMD %s", fmt_argv(argv_list))

    try:
        p = subprocess.run(
            argv_list,
            text=True,
            stdout=subprocess.PIPE if capture else None,
            stderr=subprocess.PIPE if capture else None,
            cwd=cwd,
            env=dict(os.environ, **(env or {})),
        )
    except FileNotFoundError as e:
        # Missing executables behave like a failed command (exit 127).
        result = CmdResult(argv=argv_list, returncode=127, stdout="", stderr=str(e))
    else:
        result = CmdResult(
            argv=argv_list,
            returncode=p.returncode,
            stdout=p.stdout or "",
            stderr=p.stderr or "",
        )

    if result.stdout:
        logger.debug("STDOUT %s", result.stdout.strip())
    if result.stderr:
        logger.debug("STDERR %s", result.stderr.strip())

    if check and not result.ok:
        raise CommandError(result)

    return result
