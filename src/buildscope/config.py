"""Configuration loading and the explicit project context value."""

from __future__ import annotations

import copy
import importlib
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Sequence

import yaml

LOGGER = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "buildscope.yaml"

DEFAULT_CONFIG_TEMPLATE: Dict[str, Any] = {
    "project": {
        "root": None,
        "path": None,
    },
    "search": {
        "roots": [],
    },
    "security": {
        "permitted_root": "~",
    },
    "build": {
        "poll_interval": 0.5,
        "timeout": 600.0,
        "run_grace_period": 1.0,
    },
    "automation": {
        "bridge": None,
    },
}

ENV_PROJECT_ROOT = "BUILDSCOPE_PROJECT_ROOT"
ENV_PROJECT_ROOT_FALLBACK = "WORKSPACE_FOLDER_PATHS"
ENV_PROJECT = "BUILDSCOPE_PROJECT"
ENV_SEARCH_PATHS = "BUILDSCOPE_SEARCH_PATHS"


class ConfigError(RuntimeError):
    """Raised when configuration cannot be parsed or applied."""


@dataclass(frozen=True, slots=True)
class BuildSettings:
    """Timing knobs for the build orchestrator."""

    poll_interval: float = 0.5
    timeout: float | None = 600.0
    run_grace_period: float = 1.0


@dataclass(frozen=True, slots=True)
class ProjectContext:
    """Read-only roots consulted during path resolution and builds.

    ``project_root`` is the folder of the current project; ``project_path``
    is the project/workspace file handed to the automation bridge.  Both are
    optional so resolution still works from the working directory alone.
    """

    project_root: Path | None = None
    project_path: Path | None = None
    search_roots: tuple[Path, ...] = ()
    working_dir: Path = field(default_factory=Path.cwd)
    permitted_root: Path = field(default_factory=Path.home)
    build: BuildSettings = field(default_factory=BuildSettings)
    bridge_spec: str | None = None

    def all_search_roots(self) -> list[Path]:
        """Return the project root followed by configured roots, without repeats."""
        roots: list[Path] = []
        seen: set[str] = set()
        for candidate in ((self.project_root,) if self.project_root else ()) + self.search_roots:
            key = os.path.abspath(candidate)
            if key in seen:
                continue
            seen.add(key)
            roots.append(candidate)
        return roots

    def project_anchor(self) -> Path | None:
        """Path whose ancestors are searched as a last resort."""
        return self.project_path or self.project_root


def load_config(config_path: Path) -> Dict[str, Any]:
    """Load YAML configuration merged over the defaults.

    A missing file is not an error; the defaults are returned instead.
    """

    config = copy.deepcopy(DEFAULT_CONFIG_TEMPLATE)
    if not config_path.exists():
        LOGGER.debug("No configuration at %s; using defaults", config_path)
        return config

    try:
        with config_path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except yaml.YAMLError as error:
        raise ConfigError(f"Failed to parse config {config_path}: {error}") from error

    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a mapping at the top level.")

    for section, values in data.items():
        if isinstance(values, Mapping) and isinstance(config.get(section), dict):
            config[section].update(values)
        else:
            config[section] = values
    return config


def _as_path(value: Any, base: Path) -> Path | None:
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    candidate = Path(text).expanduser()
    if not candidate.is_absolute():
        candidate = (base / candidate).resolve()
    return candidate


def _split_env_paths(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [entry for entry in raw.split(os.pathsep) if entry.strip()]


def _coerce_float(value: Any, default: float | None, *, name: str) -> float | None:
    if value is None:
        return default
    try:
        return float(value)
    except (TypeError, ValueError) as error:
        raise ConfigError(f"build.{name} must be a number, got {value!r}") from error


def build_context(
    config: Mapping[str, Any],
    *,
    base_dir: Path | None = None,
    environ: Mapping[str, str] | None = None,
    working_dir: Path | None = None,
) -> ProjectContext:
    """Turn a configuration mapping plus environment overrides into a context."""

    env = os.environ if environ is None else environ
    base = (base_dir or Path.cwd()).resolve()
    cwd = working_dir or Path.cwd()

    project_cfg = config.get("project") or {}
    search_cfg = config.get("search") or {}
    security_cfg = config.get("security") or {}
    build_cfg = config.get("build") or {}
    automation_cfg = config.get("automation") or {}

    env_root = env.get(ENV_PROJECT_ROOT) or (_split_env_paths(env.get(ENV_PROJECT_ROOT_FALLBACK)) or [None])[0]
    project_root = _as_path(env_root, cwd) if env_root else _as_path(project_cfg.get("root"), base)
    env_project = env.get(ENV_PROJECT)
    project_path = _as_path(env_project, cwd) if env_project else _as_path(project_cfg.get("path"), base)
    if project_root is None and project_path is not None:
        project_root = project_path.parent

    raw_roots: Sequence[Any] = search_cfg.get("roots") or []
    if isinstance(raw_roots, str):
        raw_roots = [raw_roots]
    search_roots: list[Path] = []
    for entry in raw_roots:
        path = _as_path(entry, base)
        if path is not None:
            search_roots.append(path)
    for entry in _split_env_paths(env.get(ENV_SEARCH_PATHS)):
        path = _as_path(entry, cwd)
        if path is not None:
            search_roots.append(path)

    permitted_root = _as_path(security_cfg.get("permitted_root") or "~", base) or Path.home()

    # Only an explicit null or non-positive value disables the bound.
    if "timeout" in build_cfg:
        timeout = _coerce_float(build_cfg["timeout"], None, name="timeout")
    else:
        timeout = BuildSettings().timeout
    settings = BuildSettings(
        poll_interval=_coerce_float(build_cfg.get("poll_interval"), 0.5, name="poll_interval") or 0.5,
        timeout=timeout if timeout and timeout > 0 else None,
        run_grace_period=_coerce_float(build_cfg.get("run_grace_period"), 1.0, name="run_grace_period") or 0.0,
    )

    bridge_spec = automation_cfg.get("bridge")
    return ProjectContext(
        project_root=project_root,
        project_path=project_path,
        search_roots=tuple(search_roots),
        working_dir=cwd,
        permitted_root=permitted_root,
        build=settings,
        bridge_spec=str(bridge_spec) if bridge_spec else None,
    )


def load_context(config_path: Path | str = DEFAULT_CONFIG_NAME) -> ProjectContext:
    """Read ``config_path`` and build a :class:`ProjectContext` from it."""

    config_path = Path(config_path)
    if not config_path.is_absolute():
        config_path = (Path.cwd() / config_path).resolve()
    config = load_config(config_path)
    return build_context(config, base_dir=config_path.parent)


def load_factory(spec: str) -> Callable[..., Any]:
    """Import ``module:attribute`` and return the attribute."""

    module_name, sep, attribute = spec.partition(":")
    if not sep or not module_name or not attribute:
        raise ConfigError(f"Bridge spec must look like 'module:factory', got {spec!r}")
    try:
        module = importlib.import_module(module_name)
    except ImportError as error:
        raise ConfigError(f"Cannot import bridge module {module_name!r}: {error}") from error
    try:
        factory = getattr(module, attribute)
    except AttributeError as error:
        raise ConfigError(f"Module {module_name!r} has no attribute {attribute!r}") from error
    if not callable(factory):
        raise ConfigError(f"Bridge factory {spec!r} is not callable")
    return factory


__all__ = [
    "BuildSettings",
    "ConfigError",
    "DEFAULT_CONFIG_NAME",
    "ProjectContext",
    "build_context",
    "load_config",
    "load_context",
    "load_factory",
]
