"""External command runner used to apply auxiliary resources.

A runner takes a Command and returns its stdout, raising CommandError on a
non-zero exit. Launchers accept any callable with that shape so tests can
record invocations instead of shelling out.
"""

from __future__ import annotations

import shlex
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from errors import CommandError


@dataclass(frozen=True)
class Command:
    name: str
    args: list[str] = field(default_factory=list)

    def cli(self) -> str:
        return " ".join(shlex.quote(p) for p in [self.name, *self.args])


CommandRunner = Callable[[Command], str]


def default_command_runner(cmd: Command) -> str:
    try:
        completed = subprocess.run(  # noqa: S603
            [cmd.name, *cmd.args],
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as e:
        raise CommandError(cmd.cli(), exit_code=127, output=str(e)) from e
    if completed.returncode != 0:
        output = completed.stderr.strip() or completed.stdout.strip()
        raise CommandError(cmd.cli(), exit_code=completed.returncode, output=output)
    return completed.stdout


def apply_resources_command(apply_command: str, resources_dir: Path) -> Command:
    return Command(name=apply_command, args=["apply", "-f", str(resources_dir)])
