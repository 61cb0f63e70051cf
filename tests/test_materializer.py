from copy import deepcopy

import pytest

from constants import COMMIT_SHA_LABEL_KEY, DEFAULT_SELECTOR_KEY, DEFAULT_SELECTOR_VALUE, REPOSITORY_LABEL_KEY
from errors import ConflictError, JobStoreError
from executor.materializer import job_resource_name, materialize, submit
from helpers import JOB_TEMPLATE
from storage.interfaces import JobStore, LabelSelector


def test_name_uses_20_char_prefix_and_fills_up_to_30_with_sha() -> None:
    job = materialize(JOB_TEMPLATE, "a-very-long-repository-name-example", "0123456789abcdef")
    name = job["metadata"]["name"]

    assert name == "a-very-long-reposito-0123456789"
    assert len(name) <= 31


def test_short_repository_name_leaves_room_for_more_sha() -> None:
    assert job_resource_name("repo", "0123456789abcdef0123456789abcdef") == "repo-" + "0123456789abcdef0123456789"
    assert job_resource_name("repo", "abc") == "repo-abc"


def test_operator_labels_are_set_and_template_labels_kept() -> None:
    template = deepcopy(JOB_TEMPLATE)
    template["metadata"]["labels"][REPOSITORY_LABEL_KEY] = "someone-else"

    job = materialize(template, "My Repo", "ABC123")
    labels = job["metadata"]["labels"]

    assert labels == {
        "app": "boot",
        DEFAULT_SELECTOR_KEY: DEFAULT_SELECTOR_VALUE,
        REPOSITORY_LABEL_KEY: "my-repo",
        COMMIT_SHA_LABEL_KEY: "abc123",
    }


def test_template_without_metadata_gets_labels() -> None:
    job = materialize({"apiVersion": "batch/v1", "kind": "Job", "spec": {"template": {}}}, "repo", "abc")

    assert job["metadata"]["name"] == "repo-abc"
    assert job["metadata"]["labels"][COMMIT_SHA_LABEL_KEY] == "abc"


def test_materialize_does_not_mutate_template() -> None:
    template = deepcopy(JOB_TEMPLATE)
    materialize(template, "repo", "abc")

    assert template == JOB_TEMPLATE


class _FailingStore(JobStore):
    def list(self, namespace: str, selector: LabelSelector):
        return []

    def create(self, namespace: str, job):
        raise RuntimeError("connection refused")


def test_submit_wraps_store_error_with_name_and_namespace() -> None:
    job = materialize(JOB_TEMPLATE, "repo", "abc")

    with pytest.raises(JobStoreError) as exc_info:
        submit(_FailingStore(), "jx", job)

    assert "repo-abc" in str(exc_info.value)
    assert "namespace jx" in str(exc_info.value)
    assert exc_info.value.namespace == "jx"


class _TakenNameStore(_FailingStore):
    def create(self, namespace: str, job):
        raise ConflictError(f"Job already exists: {namespace}/{job['metadata']['name']}")


def test_submit_keeps_name_conflicts_distinct_from_store_failures() -> None:
    job = materialize(JOB_TEMPLATE, "repo", "abc")

    with pytest.raises(ConflictError) as exc_info:
        submit(_TakenNameStore(), "jx", job)

    assert not isinstance(exc_info.value, JobStoreError)
    assert exc_info.value.details == {"job_name": "repo-abc", "namespace": "jx"}
    assert "failed to create Job repo-abc in namespace jx" in str(exc_info.value)
