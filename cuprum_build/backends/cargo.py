from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from cuprum_build.util import CommandRunner


@dataclass(frozen=True)
class CargoBackend:
    runner: CommandRunner
    logger: logging.Logger

    def is_available(self, command: Sequence[str]) -> tuple[bool, str | None]:
        # In dry-run, we don't require the build tool to be present.
        if self.runner.dry_run:
            return True, None
        if not command:
            return False, "build command is empty"
        if shutil.which(command[0]) is None:
            return False, f"`{command[0]}` not found on PATH"
        return True, None

    def build(self, command: Sequence[str], *, cwd: Path) -> None:
        # Build output goes straight to the terminal; failures raise CommandFailed
        # carrying the tool's exit code.
        self.runner.run(command, check=True, cwd=cwd)
