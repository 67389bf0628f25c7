"""Configuration models and loaders for toolrunner."""

from __future__ import annotations

import json
import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

from toolrunner.errors import RunnerConfigError

RUNNER_MODES: tuple[str, ...] = ("dry", "local", "docker")
CONFIG_FILE_NAMES: tuple[str, ...] = ("toolrunner.yaml", "toolrunner.yml", "pyproject.toml")


@dataclass(frozen=True)
class RunnerConfig:
    """Configuration used to build the default runner.

    Attributes:
        mode: Backend to use: ``dry``, ``local`` or ``docker``.
        data_dir: Directory for execution outputs. ``None`` selects a temp directory.
        docker_image: Image overriding the tool's ``container_image_tag``.
        docker_executable: Docker client binary.
        docker_user_id: Optional user id containers run as.
        environ: Extra environment variables for launched commands.
    """

    mode: str = "dry"
    data_dir: Path | None = None
    docker_image: str | None = None
    docker_executable: str = "docker"
    docker_user_id: int | None = None
    environ: dict[str, str] = field(default_factory=dict)


def load_config(path: Path | None = None) -> RunnerConfig:
    """Load runner configuration from disk.

    Args:
        path: Optional path to a configuration file or directory to search.

    Returns:
        Parsed RunnerConfig with defaults applied when no config exists.

    Raises:
        RunnerConfigError: If the file type is unsupported or its content is invalid.
    """

    config_path = _resolve_config_path(path)
    if config_path is None:
        return RunnerConfig()

    if config_path.suffix in {".yaml", ".yml"}:
        raw_data = _load_yaml(config_path)
    elif config_path.suffix == ".toml":
        raw_data = _load_toml(config_path)
    else:
        raise RunnerConfigError(f"Unsupported config file type: {config_path}")

    return _parse_runner_config(raw_data, base_path=config_path.parent)


def config_to_dict(config: RunnerConfig) -> dict[str, Any]:
    """Serialize a RunnerConfig into a JSON-compatible dictionary."""

    return {
        "mode": config.mode,
        "data_dir": str(config.data_dir) if config.data_dir is not None else None,
        "docker_image": config.docker_image,
        "docker_executable": config.docker_executable,
        "docker_user_id": config.docker_user_id,
        "environ": dict(config.environ),
    }


def update_mode(config: RunnerConfig, mode: str) -> RunnerConfig:
    """Return a config copy with an updated runner mode."""

    return replace(config, mode=_parse_mode(mode))


def _resolve_config_path(path: Path | None) -> Path | None:
    if path is None:
        candidate_paths = [Path(name) for name in CONFIG_FILE_NAMES]
    elif path.is_dir():
        candidate_paths = [path / name for name in CONFIG_FILE_NAMES]
    else:
        candidate_paths = [path]

    for candidate in candidate_paths:
        if candidate.exists():
            return candidate
    if path is not None and not path.is_dir():
        raise RunnerConfigError(f"Config file not found: {path}")
    return None


def _load_toml(path: Path) -> dict[str, Any]:
    with path.open("rb") as handle:
        data = tomllib.load(handle)
    if path.name == "pyproject.toml":
        tool_config = data.get("tool", {}).get("toolrunner", {})
        if not isinstance(tool_config, dict):
            raise RunnerConfigError("tool.toolrunner must be a mapping.")
        return tool_config
    return data


def _load_yaml(path: Path) -> dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        data = None
    if data is not None:
        if not isinstance(data, dict):
            raise RunnerConfigError("YAML configuration must be a mapping.")
        return data
    try:
        import yaml  # type: ignore[import-untyped]
    except ImportError as exc:
        raise RunnerConfigError(
            "PyYAML is required to parse non-JSON YAML configuration files."
        ) from exc
    parsed = yaml.safe_load(text)
    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise RunnerConfigError("YAML configuration must be a mapping.")
    return parsed


def _parse_runner_config(raw: dict[str, Any], base_path: Path) -> RunnerConfig:
    data_dir = _optional_path(raw.get("data_dir"))
    if data_dir is not None and not data_dir.is_absolute():
        data_dir = (base_path / data_dir).resolve()

    environ = raw.get("environ", {})
    if not isinstance(environ, dict):
        raise RunnerConfigError("environ must be a mapping of variable names to values.")

    return RunnerConfig(
        mode=_parse_mode(raw.get("mode", "dry")),
        data_dir=data_dir,
        docker_image=_optional_str(raw.get("docker_image")),
        docker_executable=str(raw.get("docker_executable", "docker")),
        docker_user_id=_optional_int(raw.get("docker_user_id")),
        environ={str(key): str(value) for key, value in environ.items()},
    )


def _parse_mode(value: Any) -> str:
    mode = str(value).strip().lower()
    if mode not in RUNNER_MODES:
        raise RunnerConfigError(
            f"Unknown runner mode: {value!r}. Expected one of {', '.join(RUNNER_MODES)}."
        )
    return mode


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _optional_int(value: Any) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise RunnerConfigError(f"Expected an integer, got {value!r}.") from exc


def _optional_path(value: Any) -> Path | None:
    text = _optional_str(value)
    return Path(text) if text is not None else None
