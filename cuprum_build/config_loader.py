from __future__ import annotations

import json
import shlex
from dataclasses import dataclass, field
from json import JSONDecodeError
from pathlib import Path
from typing import Any

CONFIG_NAMES = (
    "cuprum-build.toml",
    "cuprum-build.json",
    "cuprum-build.yaml",
    "cuprum-build.yml",
)

_TOP_LEVEL_KEYS = {"plugins_dir", "target_dir", "install_dir", "exclude", "build"}
_BUILD_KEYS = {"command"}


@dataclass(frozen=True)
class ProjectConfig:
    path: Path | None = None
    plugins_dir: str | None = None
    target_dir: str | None = None
    install_dir: str | None = None
    exclude: list[str] = field(default_factory=list)
    build_command: list[str] | None = None


def _require_str(value: Any, *, what: str, path: Path) -> str:
    if not isinstance(value, str) or not value:
        raise ValueError(f"{path}: '{what}' must be a non-empty string")
    return value


def _require_str_list(value: Any, *, what: str, path: Path) -> list[str]:
    if isinstance(value, list) and all(isinstance(x, str) and x for x in value):
        return list(value)
    raise ValueError(f"{path}: '{what}' must be a list of non-empty strings")


def _normalize(obj: Any, path: Path) -> ProjectConfig:
    if obj is None:
        # Empty YAML document.
        return ProjectConfig(path=path)
    if not isinstance(obj, dict):
        raise ValueError(f"{path}: config must be a table/object at the top level")

    unknown = set(obj.keys()) - _TOP_LEVEL_KEYS
    if unknown:
        raise ValueError(f"{path}: unknown config keys: {', '.join(sorted(unknown))}")

    plugins_dir = obj.get("plugins_dir")
    if plugins_dir is not None:
        _require_str(plugins_dir, what="plugins_dir", path=path)
    target_dir = obj.get("target_dir")
    if target_dir is not None:
        _require_str(target_dir, what="target_dir", path=path)
    install_dir = obj.get("install_dir")
    if install_dir is not None:
        _require_str(install_dir, what="install_dir", path=path)

    exclude: list[str] = []
    if obj.get("exclude") is not None:
        exclude = _require_str_list(obj["exclude"], what="exclude", path=path)

    build_command: list[str] | None = None
    build = obj.get("build")
    if build is not None:
        if not isinstance(build, dict):
            raise ValueError(f"{path}: 'build' must be a table/object")
        unknown = set(build.keys()) - _BUILD_KEYS
        if unknown:
            raise ValueError(f"{path}: unknown keys in 'build': {', '.join(sorted(unknown))}")
        command = build.get("command")
        if isinstance(command, str) and command:
            # A single string is split shell-style: "cargo build --workspace".
            build_command = shlex.split(command)
            if not build_command:
                raise ValueError(f"{path}: 'build.command' must not be blank")
        elif command is not None:
            build_command = _require_str_list(command, what="build.command", path=path)

    return ProjectConfig(
        path=path,
        plugins_dir=plugins_dir,
        target_dir=target_dir,
        install_dir=install_dir,
        exclude=exclude,
        build_command=build_command,
    )


def _load_json(text: str, path: Path) -> Any:
    try:
        return json.loads(text)
    except JSONDecodeError as e:
        raise ValueError(
            f"Invalid JSON in {path} at line {e.lineno}, column {e.colno}: {e.msg}"
        ) from e


def _load_toml(text: str, path: Path) -> Any:
    # TOML parsing is in stdlib as of Python 3.11. On older Pythons, use tomli.
    try:
        import tomllib  # type: ignore
    except ImportError:  # pragma: no cover
        import tomli as tomllib  # type: ignore
    try:
        return tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"Invalid TOML in {path}: {e}") from e


def _load_yaml(text: str, path: Path) -> Any:
    import yaml

    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        if mark is not None and hasattr(mark, "line") and hasattr(mark, "column"):
            line = int(mark.line) + 1
            col = int(mark.column) + 1
            raise ValueError(f"Invalid YAML in {path} at line {line}, column {col}: {e}") from e
        raise ValueError(f"Invalid YAML in {path}: {e}") from e


def load_config_file(path: Path) -> ProjectConfig:
    text = path.read_text(encoding="utf-8")
    suffix = path.suffix.lower()

    if suffix == ".json":
        raw = _load_json(text, path)
    elif suffix == ".toml":
        raw = _load_toml(text, path)
    elif suffix in (".yaml", ".yml"):
        raw = _load_yaml(text, path)
    else:
        raise ValueError(
            f"Unsupported config format for {path} (expected .json, .toml, .yaml, .yml)."
        )
    return _normalize(raw, path)


def find_config_file(project_dir: Path) -> Path | None:
    for name in CONFIG_NAMES:
        candidate = project_dir / name
        if candidate.is_file():
            return candidate
    return None
