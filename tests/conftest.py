from collections.abc import Iterator
from pathlib import Path

import pytest
import yaml

from executor.engine import JobLauncher
from helpers import RecordingRunner
from registry.schema_validator import SchemaValidator
from storage.interfaces import LabelSelector
from storage.sqlite import SQLiteJobStore, SQLiteStores


@pytest.fixture
def job_store(tmp_path: Path) -> SQLiteJobStore:
    return SQLiteStores(tmp_path / "state" / "jobs.sqlite").jobs


@pytest.fixture
def checkout(tmp_path: Path) -> Path:
    path = tmp_path / "checkout"
    path.mkdir()
    return path


@pytest.fixture
def runner() -> RecordingRunner:
    return RecordingRunner()


@pytest.fixture
def launcher(job_store: SQLiteJobStore, runner: RecordingRunner) -> JobLauncher:
    return JobLauncher(
        job_store=job_store,
        namespace="jx",
        selector=LabelSelector.parse("git-operator.io/kind=git-operator"),
        runner=runner,
        schema_validator=SchemaValidator.load(),
    )


@pytest.fixture
def runtime_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    monkeypatch.delenv("NO_RESOURCE_APPLY", raising=False)
    config_dir = tmp_path / "config"
    config_dir.mkdir(exist_ok=True)
    path = config_dir / "runtime.yaml"
    path.write_text(
        yaml.safe_dump(
            {
                "launcher": {"namespace": "jx", "selector": "git-operator.io/kind=git-operator", "no_resource_apply": True},
                "storage": {"driver": "sqlite", "sqlite": {"path": "../state/operator.sqlite"}},
            }
        ),
        encoding="utf-8",
    )
    yield path


@pytest.fixture
def logging_config(tmp_path: Path) -> Path:
    path = tmp_path / "config" / "logging.yaml"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        yaml.safe_dump(
            {
                "version": 1,
                "disable_existing_loggers": False,
                "formatters": {"json": {"()": "config.logging.JSONFormatter"}},
                "handlers": {"null": {"class": "logging.NullHandler", "formatter": "json"}},
                "root": {"level": "INFO", "handlers": ["null"]},
            }
        ),
        encoding="utf-8",
    )
    return path
