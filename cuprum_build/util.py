from __future__ import annotations

import os
import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence


def cuprum_home() -> Path:
    # An empty CUPRUM_HOME counts as unset.
    value = os.environ.get("CUPRUM_HOME", "").strip()
    if not value:
        return Path.home() / ".cuprum"
    return expand_path(value)


def expand_path(s: str) -> Path:
    # Expand ~ and $VARS
    return Path(os.path.expandvars(os.path.expanduser(s)))


def resolve_in(base: Path, s: str) -> Path:
    """Expand `s` and anchor it at `base` unless it is already absolute."""
    p = expand_path(s)
    if not p.is_absolute():
        p = base / p
    return p


def sh_join(args: Sequence[str]) -> str:
    return shlex.join(list(args))


class CommandFailed(RuntimeError):
    def __init__(self, argv: Sequence[str], returncode: int) -> None:
        self.argv = list(argv)
        self.returncode = returncode
        super().__init__(f"Command failed ({returncode}): {sh_join(self.argv)}")


@dataclass(frozen=True)
class RunResult:
    args: list[str]
    returncode: int


class CommandRunner:
    def __init__(self, *, dry_run: bool, logger) -> None:
        self._dry_run = dry_run
        self._logger = logger

    @property
    def dry_run(self) -> bool:
        return self._dry_run

    def run(
        self,
        args: Iterable[str],
        *,
        check: bool = False,
        cwd: Path | None = None,
    ) -> RunResult:
        # Output is never captured: build tools report progress and errors
        # straight to the terminal.
        argv = list(args)

        where = f" (in {cwd})" if cwd is not None else ""
        self._logger.debug("RUN %s%s", sh_join(argv), where)
        if self._dry_run:
            return RunResult(args=argv, returncode=0)

        cp = subprocess.run(
            argv,
            check=False,  # we handle below to keep the exit code
            cwd=str(cwd) if cwd is not None else None,
        )
        if check and cp.returncode != 0:
            raise CommandFailed(argv, cp.returncode)
        return RunResult(args=argv, returncode=cp.returncode)
