import dataclasses
import sys
from pathlib import Path

import pytest

from errors import CommandError
from executor.cmdrunner import Command, apply_resources_command, default_command_runner


def test_apply_resources_command_shape() -> None:
    cmd = apply_resources_command("kubectl", Path("/work/.jx/git-operator/resources"))

    assert cmd.name == "kubectl"
    assert cmd.args == ["apply", "-f", "/work/.jx/git-operator/resources"]
    assert cmd.cli() == "kubectl apply -f /work/.jx/git-operator/resources"


def test_cli_quotes_arguments() -> None:
    assert Command(name="kubectl", args=["apply", "-f", "/tmp/my dir"]).cli() == "kubectl apply -f '/tmp/my dir'"


def test_default_runner_returns_stdout() -> None:
    out = default_command_runner(Command(name=sys.executable, args=["-c", "print('applied')"]))

    assert out.strip() == "applied"


def test_default_runner_raises_on_non_zero_exit() -> None:
    cmd = Command(name=sys.executable, args=["-c", "import sys; sys.stderr.write('denied'); sys.exit(3)"])

    with pytest.raises(CommandError) as exc_info:
        default_command_runner(cmd)

    assert exc_info.value.exit_code == 3
    assert exc_info.value.output == "denied"


def test_default_runner_raises_when_binary_is_missing(tmp_path: Path) -> None:
    with pytest.raises(CommandError) as exc_info:
        default_command_runner(Command(name=str(tmp_path / "no-such-binary"), args=["apply"]))

    assert exc_info.value.exit_code == 127


def test_command_carries_only_name_and_args() -> None:
    assert [f.name for f in dataclasses.fields(Command)] == ["name", "args"]
