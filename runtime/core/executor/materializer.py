"""Turn a repository Job template into a named, labeled Job and submit it."""

from __future__ import annotations

from copy import deepcopy
from typing import Any

from constants import COMMIT_SHA_LABEL_KEY, DEFAULT_SELECTOR_KEY, DEFAULT_SELECTOR_VALUE, REPOSITORY_LABEL_KEY
from errors import ConflictError, JobStoreError
from naming import to_valid_value, trim_length
from storage.interfaces import JobStore

NAME_PREFIX_MAX_LENGTH = 20
NAME_BUDGET = 30


def job_resource_name(safe_name: str, safe_sha: str) -> str:
    # at most 31 characters, at least 10 of them from the sha
    name_prefix = trim_length(safe_name, NAME_PREFIX_MAX_LENGTH)
    max_sha_len = NAME_BUDGET - len(name_prefix)
    return name_prefix + "-" + trim_length(safe_sha, max_sha_len)


def materialize(template: dict[str, Any], repository_name: str, commit_sha: str) -> dict[str, Any]:
    """Return a copy of the template with its name and operator labels set.

    Template labels are kept; only the three operator keys are overwritten.
    """
    safe_name = to_valid_value(repository_name)
    safe_sha = to_valid_value(commit_sha)

    job = deepcopy(template)
    metadata = job.get("metadata")
    if not isinstance(metadata, dict):
        metadata = job["metadata"] = {}
    metadata["name"] = job_resource_name(safe_name, safe_sha)

    labels = metadata.get("labels")
    if not isinstance(labels, dict):
        labels = metadata["labels"] = {}
    labels[DEFAULT_SELECTOR_KEY] = DEFAULT_SELECTOR_VALUE
    labels[REPOSITORY_LABEL_KEY] = safe_name
    labels[COMMIT_SHA_LABEL_KEY] = safe_sha
    return job


def submit(store: JobStore, namespace: str, job: dict[str, Any]) -> dict[str, Any]:
    name = job["metadata"]["name"]
    try:
        return store.create(namespace, job)
    except ConflictError as e:
        raise ConflictError(f"failed to create Job {name} in namespace {namespace}: {e}", details={"job_name": name, "namespace": namespace}) from e
    except Exception as e:
        raise JobStoreError(f"failed to create Job {name} in namespace {namespace}: {e}", namespace=namespace, details={"job_name": name}) from e
