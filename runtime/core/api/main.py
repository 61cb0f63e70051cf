"""FastAPI surface for the git operator.

A poller (or a webhook relay) posts one launch request per detected commit.
"""

from __future__ import annotations

import logging
import logging.config
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from fastapi import Body, FastAPI
from fastapi.responses import JSONResponse

from config.settings import default_config_paths, load_runtime_config
from errors import (
    CommandError,
    ConflictError,
    JobStoreError,
    PolicyViolationError,
    ResourceApplyError,
    TemplateError,
    TemplateParseError,
)
from executor.engine import JobLauncher, LaunchOptions, Repository
from registry.schema_validator import SchemaValidator
from storage.sqlite import SQLiteStores
from utils import parse_bool

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppComponents:
    launcher: JobLauncher


def _load_logging_config(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise PolicyViolationError(f"Missing required config file: {path}")
    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise PolicyViolationError(f"Invalid logging config YAML root object: {path}")
    return raw


def _apply_logging_config(logging_config_path: Path) -> None:
    cfg = _load_logging_config(logging_config_path)
    logging.config.dictConfig(cfg)


def _env_path(name: str) -> Path | None:
    v = os.environ.get(name)
    if not v:
        return None
    return Path(v)


def _error_payload(err: Exception) -> dict[str, Any]:
    if isinstance(err, TemplateParseError):
        return {
            "error": "TEMPLATE_INVALID",
            "message": str(err),
            "path": str(err.path),
            "violations": [{"path": v.path, "message": v.message} for v in err.violations],
        }
    if isinstance(err, TemplateError):
        return {"error": "TEMPLATE_IO", "message": str(err), "path": str(err.path)}
    if isinstance(err, ResourceApplyError):
        return {"error": "RESOURCE_APPLY_FAILED", "message": str(err), "resources_dir": str(err.resources_dir)}
    if isinstance(err, CommandError):
        return {"error": "COMMAND_FAILED", "message": str(err), "exit_code": err.exit_code}
    if isinstance(err, JobStoreError):
        return {"error": "JOB_STORE", "message": str(err), "namespace": err.namespace, "details": err.details}
    if isinstance(err, PolicyViolationError):
        return {"error": "POLICY_VIOLATION", "message": str(err), "details": err.details}
    if isinstance(err, ConflictError):
        return {"error": "CONFLICT", "message": str(err), "details": err.details}
    return {"error": "INTERNAL", "message": str(err)}


def _build_components() -> AppComponents:
    default_runtime, default_logging = default_config_paths()
    runtime_cfg_path = _env_path("GIT_OPERATOR_RUNTIME_CONFIG") or default_runtime
    logging_cfg_path = _env_path("GIT_OPERATOR_LOGGING_CONFIG") or default_logging

    runtime = load_runtime_config(runtime_cfg_path)
    _apply_logging_config(logging_cfg_path)

    stores = SQLiteStores(runtime.storage.sqlite_path)
    launcher = JobLauncher(
        job_store=stores.jobs,
        namespace=runtime.launcher.namespace,
        selector=runtime.launcher.selector,
        schema_validator=SchemaValidator.load(),
        apply_command=runtime.launcher.apply_command,
        no_resource_apply=runtime.launcher.no_resource_apply,
    )
    return AppComponents(launcher=launcher)


app = FastAPI(title="Git Operator", version="0.1.0")


@app.on_event("startup")
def _startup() -> None:
    # Fail closed at startup if config cannot be loaded.
    app.state.components = _build_components()
    logger.info("operator_started", extra={"event": "operator_started"})


@app.exception_handler(TemplateError)
def _template_handler(_req, exc: TemplateError):
    return JSONResponse(status_code=422, content=_error_payload(exc))


@app.exception_handler(PolicyViolationError)
def _policy_violation_handler(_req, exc: PolicyViolationError):
    return JSONResponse(status_code=403, content=_error_payload(exc))


@app.exception_handler(ConflictError)
def _conflict_handler(_req, exc: ConflictError):
    return JSONResponse(status_code=409, content=_error_payload(exc))


@app.exception_handler(JobStoreError)
@app.exception_handler(ResourceApplyError)
@app.exception_handler(CommandError)
def _upstream_handler(_req, exc: Exception):
    logger.error("upstream_error: %s", exc, extra={"event": "upstream_error"})
    return JSONResponse(status_code=502, content=_error_payload(exc))


@app.exception_handler(Exception)
def _unhandled_handler(_req, exc: Exception):
    logger.exception("unhandled_error", extra={"event": "unhandled_error"})
    return JSONResponse(status_code=500, content=_error_payload(exc))


def _components() -> AppComponents:
    return app.state.components


def _require_str(body: dict[str, Any], key: str) -> str:
    v = body.get(key)
    if not isinstance(v, str) or not v:
        raise PolicyViolationError(f"'{key}' is required (non-empty string)")
    return v


@app.get("/health")
def health() -> dict[str, Any]:
    return {"status": "ok"}


@app.post("/launches")
def launch(body: dict[str, Any] = Body(...)) -> dict[str, Any]:
    no_apply = body.get("no_resource_apply", False)
    opts = LaunchOptions(
        repository=Repository(name=_require_str(body, "repository"), namespace=str(body.get("namespace") or "")),
        git_sha=_require_str(body, "git_sha"),
        dir=Path(_require_str(body, "dir")),
        no_resource_apply=no_apply if isinstance(no_apply, bool) else parse_bool(str(no_apply)),
    )
    res = _components().launcher.launch(opts)
    return {"outcome": res.outcome, "reason": res.reason, "jobs": res.jobs}


@app.get("/jobs")
def list_jobs(repository: str | None = None, namespace: str | None = None) -> dict[str, Any]:
    launcher = _components().launcher
    selector = launcher.selector_for(repository) if repository else launcher.selector
    ns = namespace or launcher.namespace
    return {"jobs": launcher.list_jobs(ns, selector)}
