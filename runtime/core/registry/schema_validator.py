"""JSON Schema validation for repository job templates.

The template schema ships next to this module as YAML but is a valid JSON
Schema Draft 2020-12 document.

Validation errors are surfaced with stable JSON Pointer-like paths so a
repository owner can find the offending key in job.yaml.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable

import yaml
from jsonschema import Draft202012Validator

from errors import PolicyViolationError, SchemaViolation

JOB_TEMPLATE_SCHEMA_PATH = Path(__file__).resolve().parent / "job.schema.yaml"


def _escape_json_pointer_token(token: str) -> str:
    # RFC 6901 escaping.
    return token.replace("~", "~0").replace("/", "~1")


def _json_pointer(path: Iterable[Any]) -> str:
    parts: list[str] = []
    for p in path:
        if isinstance(p, int):
            parts.append(str(p))
        else:
            parts.append(_escape_json_pointer_token(str(p)))
    return "/" + "/".join(parts) if parts else "/"


class SchemaValidator:
    """Validates job template documents against the bundled schema."""

    def __init__(self, schema: dict[str, Any], *, source_path: Path | None = None):
        try:
            Draft202012Validator.check_schema(schema)
        except Exception as e:
            raise PolicyViolationError(f"Invalid job template schema {source_path or ''}: {e}") from e
        self._validator = Draft202012Validator(schema)
        self.source_path = source_path

    @classmethod
    def load(cls, path: Path = JOB_TEMPLATE_SCHEMA_PATH) -> "SchemaValidator":
        if not path.exists():
            raise PolicyViolationError(f"Missing job template schema: {path}")
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
        if not isinstance(raw, dict):
            raise PolicyViolationError(f"Expected YAML object at root: {path}")
        return cls(raw, source_path=path)

    def violations(self, document: dict[str, Any]) -> list[SchemaViolation]:
        found = [SchemaViolation(path=_json_pointer(err.absolute_path), message=err.message) for err in self._validator.iter_errors(document)]
        # Stable order: helps tests and makes errors easier to scan.
        found.sort(key=lambda v: (v.path, v.message))
        return found
