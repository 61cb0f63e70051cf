"""Job launcher: one dispatch cycle per detected commit.

This engine:
- Lists the Jobs already recorded for the repository (label selector)
- Applies the admission policy (skip if the commit was dispatched, or if
  another Job is still active)
- Loads and validates the repository's Job template
- Optionally applies the auxiliary resources next to the template
- Names, labels and submits the Job

It does NOT retry, watch, or clean up Jobs. Everything after creation is owned
by the store.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from constants import REPOSITORY_LABEL_KEY
from errors import JobStoreError, NotFoundError, ResourceApplyError
from executor.cmdrunner import CommandRunner, apply_resources_command, default_command_runner
from executor.materializer import materialize, submit
from executor.policy import Proceed, Skip, decide, job_name
from naming import to_valid_value
from registry.loader import JobTemplate, NotConfigured, find_resources_dir, load_job_template
from registry.schema_validator import SchemaValidator
from storage.interfaces import JobStore, LabelSelector

logger = logging.getLogger(__name__)

OUTCOME_CREATED = "created"
OUTCOME_SKIPPED = "skipped"
OUTCOME_NOT_CONFIGURED = "not_configured"


@dataclass(frozen=True)
class Repository:
    name: str
    namespace: str = ""


@dataclass(frozen=True)
class LaunchOptions:
    repository: Repository
    git_sha: str
    dir: Path
    no_resource_apply: bool = False


@dataclass(frozen=True)
class LaunchResult:
    outcome: str
    jobs: list[dict[str, Any]] = field(default_factory=list)
    reason: str | None = None


class JobLauncher:
    def __init__(
        self,
        *,
        job_store: JobStore,
        namespace: str,
        selector: LabelSelector,
        runner: CommandRunner | None = None,
        schema_validator: SchemaValidator | None = None,
        apply_command: str = "kubectl",
        no_resource_apply: bool = False,
    ):
        self._jobs = job_store
        self._namespace = namespace
        self._selector = selector
        self._runner = runner or default_command_runner
        self._schemas = schema_validator
        self._apply_command = apply_command
        self._no_resource_apply = no_resource_apply

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def selector(self) -> LabelSelector:
        return self._selector

    def selector_for(self, repository_name: str) -> LabelSelector:
        return self._selector.with_label(REPOSITORY_LABEL_KEY, to_valid_value(repository_name))

    def list_jobs(self, namespace: str, selector: LabelSelector) -> list[dict[str, Any]]:
        try:
            return self._jobs.list(namespace, selector)
        except NotFoundError:
            return []
        except Exception as e:
            raise JobStoreError(
                f"failed to find Jobs in namespace {namespace} with selector {selector}: {e}",
                namespace=namespace,
                details={"selector": str(selector)},
            ) from e

    def launch(self, opts: LaunchOptions) -> LaunchResult:
        ns = opts.repository.namespace or self._namespace
        existing = self.list_jobs(ns, self.selector_for(opts.repository.name))
        for job in existing:
            logger.info("job_found", extra={"event": "job_found", "namespace": ns, "job_name": job_name(job)})

        decision = decide(opts.repository.name, opts.git_sha, existing)
        extra = {"repository": decision.repository, "commit_sha": decision.commit_sha, "namespace": ns}
        if isinstance(decision, Skip):
            logger.info(
                "launch_skipped: %s", decision.reason, extra={**extra, "event": "launch_skipped", "job_name": decision.blocking_job}
            )
            return LaunchResult(outcome=OUTCOME_SKIPPED, reason=decision.reason)

        return self._start_new_job(opts, ns, decision, extra)

    def _start_new_job(self, opts: LaunchOptions, ns: str, decision: Proceed, extra: dict[str, Any]) -> LaunchResult:
        logger.info("launch_started", extra={**extra, "event": "launch_started"})

        loaded = load_job_template(Path(opts.dir), decision.repository, validator=self._schemas)
        if isinstance(loaded, NotConfigured):
            logger.warning("launch_not_configured: %s", loaded.reason, extra={**extra, "event": "launch_not_configured"})
            return LaunchResult(outcome=OUTCOME_NOT_CONFIGURED, reason=loaded.reason)

        if not (opts.no_resource_apply or self._no_resource_apply):
            self._apply_resources(loaded, extra)

        job = materialize(loaded.document, opts.repository.name, opts.git_sha)
        created = submit(self._jobs, ns, job)
        logger.info("job_created", extra={**extra, "event": "job_created", "job_name": job_name(created)})
        return LaunchResult(outcome=OUTCOME_CREATED, jobs=[created])

    def _apply_resources(self, template: JobTemplate, extra: dict[str, Any]) -> None:
        resources_dir = find_resources_dir(template)
        if resources_dir is None:
            return
        cmd = apply_resources_command(self._apply_command, resources_dir)
        logger.info("resources_apply: %s", cmd.cli(), extra={**extra, "event": "resources_apply"})
        try:
            self._runner(cmd)
        except Exception as e:
            raise ResourceApplyError(resources_dir, e) from e
