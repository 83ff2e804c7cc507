from __future__ import annotations

import filecmp
import logging
import os
import shutil
import stat
import tempfile
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class InstallResult:
    plugin: str
    destination: Path
    outcome: str  # "installed" | "updated" | "unchanged" | "pending"

    def describe(self, *, dry_run: bool) -> str:
        if self.outcome == "unchanged":
            return f"{self.plugin} is already up to date."
        if self.outcome == "pending":
            return f"Would install {self.plugin} -> {self.destination} (artifact not built yet)."
        verb = "Installed" if self.outcome == "installed" else "Updated"
        if dry_run:
            verb = "Would install" if self.outcome == "installed" else "Would update"
        return f"{verb} {self.plugin} -> {self.destination}."


@dataclass(frozen=True)
class CopyInstallBackend:
    logger: logging.Logger
    dry_run: bool

    def _up_to_date(self, src: Path, dst: Path) -> bool:
        # Same bytes is not enough: a copy that lost its exec bit must be redone.
        try:
            if stat.S_IMODE(src.stat().st_mode) != stat.S_IMODE(dst.stat().st_mode):
                return False
            return filecmp.cmp(src, dst, shallow=False)
        except OSError:
            return False

    def _replace_atomically(self, src: Path, dst: Path) -> None:
        # Copy next to the destination, then rename over it, so a running host
        # never loads a partially written binary.
        fd, tmp_name = tempfile.mkstemp(prefix=f".{dst.name}.", suffix=".tmp", dir=dst.parent)
        os.close(fd)
        tmp = Path(tmp_name)
        try:
            shutil.copy2(src, tmp)
            os.replace(tmp, dst)
        except BaseException:
            tmp.unlink(missing_ok=True)
            raise

    def install(self, *, plugin: str, source: Path, install_dir: Path) -> InstallResult:
        dst = install_dir / plugin

        if dst.is_dir() and not dst.is_symlink():
            raise RuntimeError(f"Install target is a directory, refusing to overwrite: {dst}")

        if not source.exists():
            if self.dry_run:
                return InstallResult(plugin=plugin, destination=dst, outcome="pending")
            raise RuntimeError(f"Plugin artifact does not exist: {source}")

        existed = dst.exists()
        if existed and self._up_to_date(source, dst):
            return InstallResult(plugin=plugin, destination=dst, outcome="unchanged")

        outcome = "updated" if existed else "installed"
        self.logger.debug("COPY %s -> %s", source, dst)
        if self.dry_run:
            return InstallResult(plugin=plugin, destination=dst, outcome=outcome)

        install_dir.mkdir(parents=True, exist_ok=True)
        self._replace_atomically(source, dst)
        return InstallResult(plugin=plugin, destination=dst, outcome=outcome)
