"""Job template loader (repository checkout -> JobTemplate).

A repository opts into the operator by committing a Job definition. Two
locations are recognised, in order:

1. `versionStream/git-operator/job.yaml` when the `versionStream/git-operator`
   directory exists (configuration kept in a version stream)
2. `.jx/git-operator/job.yaml` otherwise

A missing file is a normal outcome (`NotConfigured`), not an error.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Union

import yaml

from errors import TemplateIOError, TemplateParseError
from registry.schema_validator import SchemaValidator

VERSION_STREAM_FOLDER = Path("versionStream") / "git-operator"
DEFAULT_FOLDER = Path(".jx") / "git-operator"
JOB_FILE_NAME = "job.yaml"
RESOURCES_DIR_NAME = "resources"


@dataclass(frozen=True)
class JobTemplate:
    path: Path
    document: dict[str, Any]

    @property
    def folder(self) -> Path:
        return self.path.parent

    @property
    def resources_dir(self) -> Path:
        return self.folder / RESOURCES_DIR_NAME


@dataclass(frozen=True)
class NotConfigured:
    path: Path

    @property
    def reason(self) -> str:
        return f"repository has no job definition: {self.path}"


LoadResult = Union[JobTemplate, NotConfigured]


def _is_dir(path: Path) -> bool:
    try:
        return path.is_dir()
    except OSError as e:
        raise TemplateIOError(f"failed to check if folder exists {path}: {e}", path=path) from e


def _is_file(path: Path) -> bool:
    try:
        return path.is_file()
    except OSError as e:
        raise TemplateIOError(f"failed to check if file exists {path}: {e}", path=path) from e


def resolve_job_file(checkout_dir: Path) -> Path:
    folder = checkout_dir / VERSION_STREAM_FOLDER
    if not _is_dir(folder):
        # lets try the original location
        folder = checkout_dir / DEFAULT_FOLDER
    return folder / JOB_FILE_NAME


def load_job_template(checkout_dir: Path, repository_name: str, *, validator: SchemaValidator | None = None) -> LoadResult:
    path = resolve_job_file(checkout_dir)
    if not _is_file(path):
        return NotConfigured(path=path)

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise TemplateIOError(f"failed to read Job file {path} in repository {repository_name}: {e}", path=path) from e

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise TemplateParseError(f"failed to load Job file {path} in repository {repository_name}: {e}", path=path) from e
    if not isinstance(data, dict):
        raise TemplateParseError(f"invalid YAML root object in Job file {path} (expected object)", path=path)

    if validator is not None:
        violations = validator.violations(data)
        if violations:
            summary = "; ".join(f"{v.path}: {v.message}" for v in violations)
            raise TemplateParseError(
                f"Job file {path} in repository {repository_name} failed validation: {summary}",
                path=path,
                violations=violations,
            )

    return JobTemplate(path=path, document=data)


def find_resources_dir(template: JobTemplate) -> Path | None:
    """Return the absolute resources directory next to the job file, if present."""
    resources_dir = template.resources_dir
    if not _is_dir(resources_dir):
        return None
    return resources_dir.absolute()
