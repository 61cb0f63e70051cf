"""Admission policy: should a Job be launched for this commit?

Given the Jobs already recorded for a repository, the decision is one of:

- Skip: a Job already exists for this commit (finished or still running)
- Skip: another Job for the repository is still active
- Proceed: nothing recorded for this commit and nothing in flight

The commit check runs first so that re-running a decision for a commit that
was already dispatched is always a no-op.

There is no compare-and-swap between listing Jobs and creating one, so two
concurrent triggers for the same commit can both see Proceed. That window is
accepted; polling triggers are infrequent.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Union

from constants import COMMIT_SHA_LABEL_KEY
from naming import to_valid_value
from utils import deep_get

SKIP_ALREADY_DISPATCHED = "already processed or in-flight for this commit"
SKIP_ANOTHER_ACTIVE = "another job still active for this repository"


@dataclass(frozen=True)
class Proceed:
    repository: str
    commit_sha: str


@dataclass(frozen=True)
class Skip:
    repository: str
    commit_sha: str
    reason: str
    blocking_job: str | None = None


Decision = Union[Proceed, Skip]


def job_name(job: dict[str, Any]) -> str:
    return str(deep_get(job, ["metadata", "name"], ""))


def job_labels(job: dict[str, Any]) -> dict[str, str]:
    labels = deep_get(job, ["metadata", "labels"])
    return labels if isinstance(labels, dict) else {}


def _counter(job: dict[str, Any], key: str) -> int:
    value = deep_get(job, ["status", key])
    return int(value) if value else 0


def is_job_active(job: dict[str, Any]) -> bool:
    """True if the Job has neither succeeded nor failed yet."""
    return _counter(job, "succeeded") == 0 and _counter(job, "failed") == 0


def decide(repository_name: str, commit_sha: str, existing_jobs: Iterable[dict[str, Any]]) -> Decision:
    safe_name = to_valid_value(repository_name)
    safe_sha = to_valid_value(commit_sha)

    jobs_for_sha: list[dict[str, Any]] = []
    active_jobs: list[dict[str, Any]] = []
    for job in existing_jobs:
        if job_labels(job).get(COMMIT_SHA_LABEL_KEY) == safe_sha:
            jobs_for_sha.append(job)
        if is_job_active(job):
            active_jobs.append(job)

    if jobs_for_sha:
        return Skip(repository=safe_name, commit_sha=safe_sha, reason=SKIP_ALREADY_DISPATCHED, blocking_job=job_name(jobs_for_sha[0]))
    if active_jobs:
        return Skip(repository=safe_name, commit_sha=safe_sha, reason=SKIP_ANOTHER_ACTIVE, blocking_job=job_name(active_jobs[0]))
    return Proceed(repository=safe_name, commit_sha=safe_sha)
