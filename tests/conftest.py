"""
Shared fixtures: a throwaway cuprum workspace and a fake command runner,
so no test needs cargo on PATH.
"""
import logging
from pathlib import Path
from typing import Callable

import pytest

from cuprum_build.config_loader import ProjectConfig
from cuprum_build.core import Options, build_context
from cuprum_build.util import CommandFailed, RunResult


class FakeRunner:
    """Records commands instead of spawning them; `on_run` can simulate a build."""

    def __init__(
        self,
        *,
        dry_run: bool = False,
        returncode: int = 0,
        on_run: Callable[[list[str], Path | None], None] | None = None,
    ) -> None:
        self._dry_run = dry_run
        self.returncode = returncode
        self.on_run = on_run
        self.calls: list[dict] = []

    @property
    def dry_run(self) -> bool:
        return self._dry_run

    def run(self, args, *, check=False, cwd=None) -> RunResult:
        argv = list(args)
        self.calls.append({"args": argv, "cwd": cwd})
        if self._dry_run:
            return RunResult(args=argv, returncode=0)
        if self.returncode == 0 and self.on_run is not None:
            self.on_run(argv, cwd)
        if check and self.returncode != 0:
            raise CommandFailed(argv, self.returncode)
        return RunResult(args=argv, returncode=self.returncode)


@pytest.fixture
def logger() -> logging.Logger:
    log = logging.getLogger("cuprum-build-tests")
    log.setLevel(logging.DEBUG)
    return log


@pytest.fixture
def cuprum_home(tmp_path, monkeypatch) -> Path:
    home = tmp_path / "home" / ".cuprum"
    monkeypatch.setenv("CUPRUM_HOME", str(home))
    return home


@pytest.fixture
def workspace(tmp_path) -> Path:
    root = tmp_path / "workspace"
    for name in ("example-plugin", "git-status", "lsp-bridge"):
        (root / "plugins" / name / "src").mkdir(parents=True)
        (root / "plugins" / name / "Cargo.toml").write_text(f'[package]\nname = "{name}"\n')
    (root / "plugins" / ".DS_Store").write_text("")
    return root


def write_artifacts(workspace: Path, profile: str = "debug", *, names=None, payload: str = "bin") -> None:
    names = names or sorted(p.name for p in (workspace / "plugins").iterdir() if not p.name.startswith("."))
    out = workspace / "target" / profile
    out.mkdir(parents=True, exist_ok=True)
    for name in names:
        artifact = out / name
        artifact.write_text(f"{payload}:{name}\n")
        artifact.chmod(0o755)


def simulate_cargo(workspace: Path, profile: str = "debug", *, payload: str = "bin"):
    def _on_run(argv, cwd):
        write_artifacts(workspace, profile, payload=payload)

    return _on_run


@pytest.fixture
def make_ctx(workspace, cuprum_home, logger):
    def _make(
        runner,
        *,
        profile: str = "debug",
        skip_build: bool = False,
        config: ProjectConfig | None = None,
        install_dir: Path | None = None,
    ):
        options = Options(dry_run=runner.dry_run, profile=profile, skip_build=skip_build)
        return build_context(
            project_dir=workspace,
            config=config or ProjectConfig(),
            options=options,
            logger=logger,
            install_dir=install_dir,
            runner=runner,
        )

    return _make


@pytest.fixture(autouse=True)
def cargo_on_path(monkeypatch):
    monkeypatch.setattr("cuprum_build.backends.cargo.shutil.which", lambda name: f"/usr/bin/{name}")
