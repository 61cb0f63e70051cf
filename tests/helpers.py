from pathlib import Path
from typing import Any

import yaml

from executor.cmdrunner import Command

JOB_TEMPLATE: dict[str, Any] = {
    "apiVersion": "batch/v1",
    "kind": "Job",
    "metadata": {"labels": {"app": "boot"}},
    "spec": {
        "backoffLimit": 4,
        "template": {
            "spec": {
                "restartPolicy": "Never",
                "containers": [{"name": "job", "image": "ghcr.io/example/boot:1.0.0", "command": ["make", "apply"]}],
            }
        },
    },
}


def write_job_file(checkout: Path, folder: str = ".jx/git-operator", document: Any = None) -> Path:
    job_dir = checkout / folder
    job_dir.mkdir(parents=True, exist_ok=True)
    path = job_dir / "job.yaml"
    path.write_text(yaml.safe_dump(JOB_TEMPLATE if document is None else document), encoding="utf-8")
    return path


class RecordingRunner:
    def __init__(self, error: Exception | None = None):
        self.commands: list[Command] = []
        self._error = error

    def __call__(self, cmd: Command) -> str:
        self.commands.append(cmd)
        if self._error is not None:
            raise self._error
        return ""
