from __future__ import annotations

from pathlib import Path
from typing import Iterable


def list_plugins(plugins_dir: Path, *, exclude: Iterable[str] = ()) -> list[str]:
    """
    Return plugin names, one per entry of `plugins_dir`.

    Hidden entries are skipped the way `ls` skips them. Names come back
    sorted so the copy order is stable across filesystems.
    """
    if not plugins_dir.exists():
        raise ValueError(f"Plugins dir not found: {plugins_dir}")
    if not plugins_dir.is_dir():
        raise ValueError(f"Plugins path is not a directory: {plugins_dir}")

    skip = set(exclude)
    names = [
        p.name
        for p in plugins_dir.iterdir()
        if not p.name.startswith(".") and p.name not in skip
    ]
    names.sort()
    return names
