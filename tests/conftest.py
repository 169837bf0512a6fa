"""Shared fixtures for intercepting git subprocess calls."""

import subprocess
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest


class FakeGit:
    """Scripted stand-in for the git executable.

    Responses are keyed by the argument tuple passed after the executable.
    Unscripted commands succeed with empty output.
    """

    def __init__(self) -> None:
        self.responses: dict[tuple[str, ...], Any] = {}
        self.calls: list[tuple[str, ...]] = []

    def on(
        self, *args: str, returncode: int = 0, stdout: str = "", stderr: str = ""
    ) -> None:
        self.responses[args] = (returncode, stdout, stderr)

    def fail_spawn(self, *args: str, error: Exception) -> None:
        self.responses[args] = error

    def __call__(self, cmd: list[str], **kwargs: Any) -> subprocess.CompletedProcess:
        args = tuple(cmd[1:])
        self.calls.append(args)
        response = self.responses.get(args, (0, "", ""))
        if isinstance(response, Exception):
            raise response
        returncode, stdout, stderr = response
        return subprocess.CompletedProcess(cmd, returncode, stdout, stderr)


@pytest.fixture
def fake_git(mocker: MagicMock) -> FakeGit:
    """Patches `subprocess.run` with a scripted FakeGit."""
    fake = FakeGit()
    mocker.patch("subprocess.run", side_effect=fake)
    return fake


@pytest.fixture
def repo_path(tmp_path: Path) -> Path:
    """A temporary folder that passes the `.git` presence check."""
    (tmp_path / ".git").mkdir()
    return tmp_path
