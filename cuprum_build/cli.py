from __future__ import annotations

import argparse
import logging
from pathlib import Path

from cuprum_build.config_loader import ProjectConfig, find_config_file, load_config_file
from cuprum_build.core import Context, Options, build_context
from cuprum_build.pipeline import BuildToolUnavailable, MissingArtifactsError, deploy, discover
from cuprum_build.util import CommandFailed, expand_path


def _setup_logger(verbose: bool) -> logging.Logger:
    logger = logging.getLogger("cuprum-build")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    handler = logging.StreamHandler()
    handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    logger.handlers[:] = [handler]
    logger.propagate = False
    return logger


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cuprum-build",
        description="Build all workspace members and install the plugin binaries.",
    )
    parser.add_argument(
        "--project-dir",
        type=Path,
        default=Path("."),
        help="Workspace root containing plugins/ and target/ (default: current directory).",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Project config file (*.toml, *.json, *.yaml, *.yml). "
        "Defaults to cuprum-build.{toml,json,yaml,yml} in the project dir, if present.",
    )
    parser.add_argument(
        "--release",
        action="store_true",
        help="Build with --release and install into the release plugin dir (~/.cuprum/plugins).",
    )
    parser.add_argument(
        "--install-dir",
        type=str,
        default=None,
        help="Plugin directory to install into. Overrides config and CUPRUM_HOME.",
    )
    parser.add_argument(
        "--skip-build",
        action="store_true",
        help="Do not run the build; install the artifacts already in target/.",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="List discovered plugins with their artifact and install paths, then exit.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Log actions but do not build or change the filesystem.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Verbose logs.",
    )
    return parser


def _load_project_config(args: argparse.Namespace, project_dir: Path, logger: logging.Logger) -> ProjectConfig:
    path: Path | None = args.config
    if path is None:
        path = find_config_file(project_dir)
        if path is None:
            logger.debug("No project config found in %s; using defaults.", project_dir)
            return ProjectConfig()
    elif not path.is_file():
        raise ValueError(f"Config file not found: {path}")
    config = load_config_file(path)
    logger.info("Using project config @ %s", config.path)
    return config


def _print_listing(ctx: Context) -> None:
    layout = ctx.layout
    plugins = discover(ctx)
    ctx.logger.info("%d plugins under %s:", len(plugins), layout.plugins_dir)
    for i, name in enumerate(plugins, start=1):
        branch = "└─" if i == len(plugins) else "├─"
        state = "built" if layout.artifact_for(name).is_file() else "not built"
        ctx.logger.info(
            "%s %s: %s (%s) -> %s",
            branch,
            name,
            layout.artifact_for(name),
            state,
            layout.installed_path(name),
        )


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logger = _setup_logger(args.verbose)

    project_dir: Path = args.project_dir
    if not project_dir.is_dir():
        logger.error("Project dir not found: %s", project_dir)
        return 2

    options = Options(
        dry_run=bool(args.dry_run),
        profile="release" if args.release else "debug",
        skip_build=bool(args.skip_build),
    )
    install_dir = expand_path(args.install_dir) if args.install_dir else None

    try:
        config = _load_project_config(args, project_dir, logger)
        ctx = build_context(
            project_dir=project_dir,
            config=config,
            options=options,
            logger=logger,
            install_dir=install_dir,
        )
        if args.list:
            _print_listing(ctx)
            return 0
        report = deploy(ctx)
    except ValueError as e:
        logger.error("%s", e)
        return 2
    except BuildToolUnavailable as e:
        logger.error("%s", e)
        return 2
    except CommandFailed as e:
        logger.error("Build failed; no plugins were installed. %s", e)
        return e.returncode if e.returncode > 0 else 1
    except MissingArtifactsError as e:
        logger.error("%s", e)
        return 1
    except (RuntimeError, OSError) as e:
        logger.error("Install failed: %s", e)
        return 1

    outcomes = report.outcomes()
    changed = sum(1 for o in outcomes.values() if o in ("installed", "updated"))
    logger.info("Done. %d of %d plugins changed.", changed, len(report.plugins))
    return 0
