from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from cuprum_build.backends.cargo import CargoBackend
from cuprum_build.backends.install_copy import CopyInstallBackend, InstallResult
from cuprum_build.core import Context
from cuprum_build.discovery import list_plugins


class BuildToolUnavailable(RuntimeError):
    pass


class MissingArtifactsError(RuntimeError):
    def __init__(self, missing: list[Path]) -> None:
        self.missing = list(missing)
        listing = "\n".join(f"  - {p}" for p in self.missing)
        super().__init__(f"{len(self.missing)} plugin artifact(s) not found after build:\n{listing}")


@dataclass
class DeployReport:
    plugins: list[str]
    built: bool = False
    results: list[InstallResult] = field(default_factory=list)

    def outcomes(self) -> dict[str, str]:
        return {r.plugin: r.outcome for r in self.results}


def discover(ctx: Context) -> list[str]:
    layout = ctx.layout
    return list_plugins(layout.plugins_dir, exclude=layout.exclude)


def build(ctx: Context) -> None:
    layout = ctx.layout
    backend = CargoBackend(runner=ctx.runner, logger=ctx.logger)
    ok, reason = backend.is_available(layout.build_command)
    if not ok:
        raise BuildToolUnavailable(f"Cannot build plugins: {reason or 'build tool unavailable'}")
    backend.build(layout.build_command, cwd=layout.project_dir)


def missing_artifacts(ctx: Context, plugins: list[str]) -> list[Path]:
    return [
        ctx.layout.artifact_for(name)
        for name in plugins
        if not ctx.layout.artifact_for(name).is_file()
    ]


def install(ctx: Context, plugins: list[str]) -> list[InstallResult]:
    layout = ctx.layout
    backend = CopyInstallBackend(logger=ctx.logger, dry_run=ctx.options.dry_run)
    results: list[InstallResult] = []
    for i, name in enumerate(plugins, start=1):
        res = backend.install(
            plugin=name,
            source=layout.artifact_for(name),
            install_dir=layout.install_dir,
        )
        results.append(res)
        branch = "└─" if i == len(plugins) else "├─"
        ctx.logger.info("%s %s", branch, res.describe(dry_run=ctx.options.dry_run))
    return results


def deploy(ctx: Context) -> DeployReport:
    """
    Build the workspace, then copy every plugin artifact into the plugin dir.

    Nothing is copied unless the build succeeded and every artifact exists.
    """
    layout = ctx.layout
    plugins = discover(ctx)
    report = DeployReport(plugins=plugins)

    if ctx.options.skip_build:
        ctx.logger.info("Skipping build (using existing artifacts in %s).", layout.artifacts_dir)
    else:
        ctx.logger.info("=== Building (%s) ===", ctx.options.profile)
        build(ctx)
        report.built = True

    if not plugins:
        ctx.logger.warning("No plugins found under %s", layout.plugins_dir)
        return report

    missing = missing_artifacts(ctx, plugins)
    if missing:
        if not ctx.options.dry_run:
            raise MissingArtifactsError(missing)
        for p in missing:
            ctx.logger.debug("Artifact not present yet (dry run): %s", p)

    ctx.logger.info("=== Installing %d plugins into %s ===", len(plugins), layout.install_dir)
    report.results = install(ctx, plugins)
    return report
