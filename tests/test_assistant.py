"""Tests for the assistant invocation helper."""

import subprocess
from pathlib import Path
from unittest.mock import MagicMock

from notesync import assistant


def test_extract_session_url_picks_https_token() -> None:
    text = "Working...\nView session: https://claude.ai/code/session_abc123 (open)\n"
    assert assistant.extract_session_url(text) == "https://claude.ai/code/session_abc123"


def test_extract_session_url_without_scheme_returns_line() -> None:
    assert (
        assistant.extract_session_url("  claude.ai/session/xyz  \n")
        == "claude.ai/session/xyz"
    )


def test_extract_session_url_none() -> None:
    assert assistant.extract_session_url("Edited note.md\n") is None


def test_edit_note_success(mocker: MagicMock, tmp_path: Path) -> None:
    """Verifies the prompt wording and that the URL is found on stderr too.

    Args:
        mocker (MagicMock): Pytest fixture for mocking.
        tmp_path (Path): Pytest fixture for a temporary directory.
    """
    note = tmp_path / "todo.md"
    mock_run = mocker.patch(
        "subprocess.run",
        return_value=subprocess.CompletedProcess(
            [], 0, "Done.\n", "https://claude.ai/session/42\n"
        ),
    )

    result = assistant.edit_note(note, "fix typos")

    cmd = mock_run.call_args.args[0]
    assert cmd[0] == "claude"
    assert cmd[2] == f"Edit the file at {note}. Here is what the user wants: fix typos"
    assert cmd[3:] == ["--allowedTools", "Edit,Read,Write"]
    assert result.success
    assert result.output == "Done.\n"
    assert result.session_url == "https://claude.ai/session/42"


def test_edit_note_failure_without_stderr(mocker: MagicMock, tmp_path: Path) -> None:
    mocker.patch(
        "subprocess.run", return_value=subprocess.CompletedProcess([], 1, "", "")
    )

    result = assistant.edit_note(tmp_path / "a.md", "x")

    assert not result.success
    assert result.output is None
    assert result.error == "Claude Code exited with an error"


def test_edit_note_spawn_failure(mocker: MagicMock, tmp_path: Path) -> None:
    mocker.patch("subprocess.run", side_effect=FileNotFoundError("claude"))

    result = assistant.edit_note(tmp_path / "a.md", "x")

    assert not result.success
    assert result.error == "Failed to run claude: claude"
    assert result.session_url is None


def test_is_available(mocker: MagicMock) -> None:
    mocker.patch(
        "subprocess.run", return_value=subprocess.CompletedProcess([], 0, b"", b"")
    )
    assert assistant.is_available()

    mocker.patch("subprocess.run", side_effect=FileNotFoundError("claude"))
    assert not assistant.is_available()
