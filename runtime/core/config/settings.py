"""Configuration loader for the git operator.

Rules:
- Fail closed when config is missing or invalid.
- All relative paths in runtime.yaml are resolved relative to runtime.yaml's directory.
- NO_RESOURCE_APPLY in the environment forces resource apply off (strict RBAC installs).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from errors import PolicyViolationError
from storage.interfaces import LabelSelector
from utils import parse_bool

DEFAULT_SELECTOR = "git-operator.io/kind=git-operator"


@dataclass(frozen=True)
class ServiceConfig:
    host: str
    port: int


@dataclass(frozen=True)
class LauncherConfig:
    namespace: str
    selector: LabelSelector
    no_resource_apply: bool
    apply_command: str


@dataclass(frozen=True)
class StorageConfig:
    driver: str
    sqlite_path: Path


@dataclass(frozen=True)
class RuntimeConfig:
    launcher: LauncherConfig
    service: ServiceConfig
    storage: StorageConfig
    config_dir: Path


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise PolicyViolationError(f"Missing required config file: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise PolicyViolationError(f"Failed to parse config file: {path}: {e}") from e
    if not isinstance(data, dict):
        raise PolicyViolationError(f"Invalid YAML root object in config file: {path}")
    return data


def _resolve_path(base_dir: Path, raw: str) -> Path:
    p = Path(raw)
    if p.is_absolute():
        return p
    return (base_dir / p).resolve()


def load_runtime_config(runtime_config_path: Path, environ: dict[str, str] | None = None) -> RuntimeConfig:
    env = os.environ if environ is None else environ
    cfg_dir = runtime_config_path.parent.resolve()
    raw = _load_yaml(runtime_config_path)

    launcher_raw = raw.get("launcher") or {}
    service_raw = raw.get("service") or {}
    storage_raw = raw.get("storage") or {}

    try:
        selector = LabelSelector.parse(str(launcher_raw.get("selector", DEFAULT_SELECTOR)))
    except ValueError as e:
        raise PolicyViolationError(f"Invalid launcher.selector in {runtime_config_path}: {e}") from e

    launcher = LauncherConfig(
        namespace=str(launcher_raw.get("namespace", "default")),
        selector=selector,
        no_resource_apply=bool(launcher_raw.get("no_resource_apply", False)) or parse_bool(env.get("NO_RESOURCE_APPLY")),
        apply_command=str(launcher_raw.get("apply_command", "kubectl")),
    )

    service = ServiceConfig(
        host=str(service_raw.get("host", "0.0.0.0")),
        port=int(service_raw.get("port", 8080)),
    )

    driver = str(storage_raw.get("driver", "sqlite"))
    if driver != "sqlite":
        raise PolicyViolationError(f"Unsupported storage.driver: {driver}")
    sqlite_path = _resolve_path(cfg_dir, str((storage_raw.get("sqlite") or {}).get("path", "../state/git_operator.sqlite")))
    storage = StorageConfig(driver=driver, sqlite_path=sqlite_path)

    return RuntimeConfig(launcher=launcher, service=service, storage=storage, config_dir=cfg_dir)


def default_config_paths() -> tuple[Path, Path]:
    # Default to paths relative to the runtime working directory (runtime/core).
    runtime_path = Path.cwd() / "config" / "runtime.yaml"
    logging_path = Path.cwd() / "config" / "logging.yaml"
    return runtime_path, logging_path
