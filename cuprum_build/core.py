from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from cuprum_build.config_loader import ProjectConfig
from cuprum_build.util import CommandRunner, cuprum_home, resolve_in

PROFILES = ("debug", "release")
DEFAULT_BUILD_COMMAND = ("cargo", "build", "--workspace")


def default_install_dir(profile: str) -> Path:
    # The host looks in ~/.cuprum/debug/plugins for debug builds and
    # ~/.cuprum/plugins for release builds.
    if profile == "release":
        return cuprum_home() / "plugins"
    return cuprum_home() / "debug" / "plugins"


@dataclass(frozen=True)
class Options:
    dry_run: bool
    profile: str  # debug|release
    skip_build: bool = False


@dataclass(frozen=True)
class Layout:
    project_dir: Path
    plugins_dir: Path
    artifacts_dir: Path
    install_dir: Path
    exclude: tuple[str, ...]
    build_command: tuple[str, ...]

    def artifact_for(self, plugin: str) -> Path:
        return self.artifacts_dir / plugin

    def installed_path(self, plugin: str) -> Path:
        return self.install_dir / plugin


@dataclass(frozen=True)
class Context:
    logger: logging.Logger
    runner: CommandRunner
    options: Options
    layout: Layout


def resolve_layout(
    *,
    project_dir: Path,
    config: ProjectConfig,
    profile: str,
    install_dir: Path | None = None,
) -> Layout:
    if profile not in PROFILES:
        raise ValueError(f"Unknown profile: {profile!r} (expected one of: {', '.join(PROFILES)})")

    project_dir = project_dir.resolve()
    plugins_dir = resolve_in(project_dir, config.plugins_dir or "plugins")
    target_dir = resolve_in(project_dir, config.target_dir or "target")

    if install_dir is None:
        if config.install_dir is not None:
            install_dir = resolve_in(project_dir, config.install_dir)
        else:
            install_dir = default_install_dir(profile)

    command = list(config.build_command or DEFAULT_BUILD_COMMAND)
    if profile == "release" and "--release" not in command:
        command.append("--release")

    return Layout(
        project_dir=project_dir,
        plugins_dir=plugins_dir,
        artifacts_dir=target_dir / profile,
        install_dir=install_dir,
        exclude=tuple(config.exclude),
        build_command=tuple(command),
    )


def build_context(
    *,
    project_dir: Path,
    config: ProjectConfig,
    options: Options,
    logger: logging.Logger,
    install_dir: Path | None = None,
    runner: CommandRunner | None = None,
) -> Context:
    layout = resolve_layout(
        project_dir=project_dir,
        config=config,
        profile=options.profile,
        install_dir=install_dir,
    )
    if runner is None:
        runner = CommandRunner(dry_run=options.dry_run, logger=logger)
    return Context(logger=logger, runner=runner, options=options, layout=layout)
