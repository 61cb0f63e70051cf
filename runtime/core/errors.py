"""Core error types for the git operator.

A dispatch cycle either returns a decision or raises one of these. Callers
(the trigger API, or a polling loop) decide whether to retry on the next poll.
These exception types are mapped to HTTP responses in the API layer.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable


class GitOperatorError(Exception):
    """Base class for operator errors."""


@dataclass(frozen=True)
class SchemaViolation:
    path: str
    message: str


class NotFoundError(GitOperatorError):
    def __init__(self, resource_type: str, resource_id: str):
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(f"{resource_type} not found: {resource_id}")


class ConflictError(GitOperatorError):
    def __init__(self, message: str, details: Any | None = None):
        self.details = details
        super().__init__(message)


class PolicyViolationError(GitOperatorError):
    def __init__(self, message: str, details: Any | None = None):
        self.details = details
        super().__init__(message)


class JobStoreError(GitOperatorError):
    """A record store query or create failed.

    Always wrapped with enough context (namespace plus selector or job name)
    to diagnose which call failed.
    """

    def __init__(self, message: str, *, namespace: str, details: Any | None = None):
        self.namespace = namespace
        self.details = details
        super().__init__(message)


class TemplateError(GitOperatorError):
    def __init__(self, message: str, *, path: Path):
        self.path = path
        super().__init__(message)


class TemplateIOError(TemplateError):
    pass


class TemplateParseError(TemplateError):
    def __init__(self, message: str, *, path: Path, violations: Iterable[SchemaViolation] = ()):
        self.violations = list(violations)
        super().__init__(message, path=path)


class CommandError(GitOperatorError):
    def __init__(self, command: str, exit_code: int, output: str = ""):
        self.command = command
        self.exit_code = exit_code
        self.output = output
        message = f"command failed (exit={exit_code}): {command}"
        if output:
            message += f": {output}"
        super().__init__(message)


class ResourceApplyError(GitOperatorError):
    def __init__(self, resources_dir: Path, cause: Exception):
        self.resources_dir = resources_dir
        super().__init__(f"failed to apply resources in dir {resources_dir}: {cause}")
