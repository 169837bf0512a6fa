"""Tests for the repository status snapshot."""

from pathlib import Path
from typing import Any

from notesync.status import (
    Divergence,
    RepositoryStatus,
    format_remote_url,
    get_status,
)

AHEAD_BEHIND = ("rev-list", "--left-right", "--count", "@{upstream}...HEAD")


def _script_tracked_repo(fake_git: Any) -> None:
    fake_git.on("branch", "--show-current", stdout="main\n")
    fake_git.on("remote", stdout="origin\n")
    fake_git.on("remote", "get-url", "origin", stdout="git@github.com:me/notes.git\n")
    fake_git.on("status", "--porcelain", stdout=" M a.md\n?? b.md\nD  c.md\n")
    fake_git.on(*AHEAD_BEHIND, stdout="3\t5\n")


def test_non_repository_returns_default_snapshot(
    tmp_path: Path, fake_git: Any
) -> None:
    """Verifies that a plain folder yields the default snapshot with no git calls.

    Args:
        tmp_path (Path): Pytest fixture for a temporary directory.
        fake_git (FakeGit): Scripted git stand-in.
    """
    status = get_status(tmp_path)

    assert status == RepositoryStatus()
    assert status.is_repository is False
    assert status.has_remote is False
    assert status.remote_url is None
    assert status.current_branch is None
    assert status.has_upstream_tracking is False
    assert status.ahead_count == -1
    assert status.behind_count == -1
    assert status.changed_count == 0
    assert status.error is None
    assert fake_git.calls == []


def test_full_snapshot(repo_path: Path, fake_git: Any) -> None:
    """Verifies that every query lands in its field, with behind before ahead."""
    _script_tracked_repo(fake_git)

    status = get_status(repo_path)

    assert status.is_repository
    assert status.current_branch == "main"
    assert status.has_remote
    assert status.remote_url == "git@github.com:me/notes.git"
    assert status.changed_count == 3
    assert status.upstream == Divergence(ahead=5, behind=3)
    assert status.has_upstream_tracking
    assert status.ahead_count == 5
    assert status.behind_count == 3
    assert status.error is None
    assert status.tracking_error is None


def test_in_sync_is_zero_not_sentinel(repo_path: Path, fake_git: Any) -> None:
    _script_tracked_repo(fake_git)
    fake_git.on(*AHEAD_BEHIND, stdout="0\t0\n")

    status = get_status(repo_path)

    assert status.has_upstream_tracking
    assert status.upstream is not None and status.upstream.in_sync
    assert (status.ahead_count, status.behind_count) == (0, 0)


def test_detached_head_skips_ahead_behind(repo_path: Path, fake_git: Any) -> None:
    """Verifies that an empty branch name is absent and stops the upstream query."""
    _script_tracked_repo(fake_git)
    fake_git.on("branch", "--show-current", stdout="\n")

    status = get_status(repo_path)

    assert status.current_branch is None
    assert status.has_remote
    assert AHEAD_BEHIND not in fake_git.calls
    assert status.ahead_count == -1


def test_no_remote_skips_url_and_ahead_behind(repo_path: Path, fake_git: Any) -> None:
    fake_git.on("branch", "--show-current", stdout="main\n")
    fake_git.on("remote", stdout="")

    status = get_status(repo_path)

    assert status.has_remote is False
    assert status.remote_url is None
    assert ("remote", "get-url", "origin") not in fake_git.calls
    assert AHEAD_BEHIND not in fake_git.calls
    assert status.has_upstream_tracking is False


def test_remote_url_failure_keeps_snapshot(repo_path: Path, fake_git: Any) -> None:
    """Verifies that a remote without an 'origin' URL leaves only the URL absent."""
    _script_tracked_repo(fake_git)
    fake_git.on("remote", stdout="backup\n")
    fake_git.on(
        "remote", "get-url", "origin", returncode=2, stderr="error: No such remote\n"
    )

    status = get_status(repo_path)

    assert status.has_remote
    assert status.remote_url is None
    assert status.changed_count == 3
    assert status.has_upstream_tracking


def test_porcelain_failure_leaves_zero(repo_path: Path, fake_git: Any) -> None:
    _script_tracked_repo(fake_git)
    fake_git.on("status", "--porcelain", returncode=128, stderr="fatal: index locked\n")

    status = get_status(repo_path)

    assert status.changed_count == 0
    assert status.error is None
    assert status.current_branch == "main"


def test_no_upstream_uses_sentinel(repo_path: Path, fake_git: Any) -> None:
    """Verifies that a branch without upstream reports -1 for both counts."""
    _script_tracked_repo(fake_git)
    fake_git.on(
        *AHEAD_BEHIND,
        returncode=128,
        stderr="fatal: no upstream configured for branch 'main'\n",
    )

    status = get_status(repo_path)

    assert status.upstream is None
    assert status.has_upstream_tracking is False
    assert status.ahead_count == -1
    assert status.behind_count == -1
    assert status.tracking_error is None


def test_unrecognized_upstream_failure_is_kept_separately(
    repo_path: Path, fake_git: Any, caplog: Any
) -> None:
    """Verifies that other ahead/behind failures degrade but stay visible."""
    _script_tracked_repo(fake_git)
    fake_git.on(*AHEAD_BEHIND, returncode=128, stderr="fatal: bad object HEAD\n")

    status = get_status(repo_path)

    assert status.has_upstream_tracking is False
    assert status.ahead_count == -1
    assert status.tracking_error == "fatal: bad object HEAD"
    assert status.error is None
    assert "Ahead/behind query failed" in caplog.text


def test_unparsable_ahead_behind_output(repo_path: Path, fake_git: Any) -> None:
    _script_tracked_repo(fake_git)
    fake_git.on(*AHEAD_BEHIND, stdout="garbage\n")

    status = get_status(repo_path)

    assert status.has_upstream_tracking is False
    assert status.behind_count == -1


def test_git_disappearing_sets_error(repo_path: Path, fake_git: Any) -> None:
    """Verifies that a spawn failure mid-way keeps earlier fields and sets error."""
    fake_git.on("branch", "--show-current", stdout="main\n")
    fake_git.fail_spawn("remote", error=FileNotFoundError("git"))

    status = get_status(repo_path)

    assert status.is_repository
    assert status.current_branch == "main"
    assert status.has_remote is False
    assert status.error is not None and "Failed to run git" in status.error


def test_spawn_failure_degrades_only_that_field(
    repo_path: Path, fake_git: Any
) -> None:
    """Verifies that later queries still run after one fails to spawn."""
    fake_git.on("branch", "--show-current", stdout="main\n")
    fake_git.fail_spawn("remote", error=FileNotFoundError("git"))
    fake_git.on("status", "--porcelain", stdout=" M a.md\n?? b.md\n")

    status = get_status(repo_path)

    assert ("status", "--porcelain") in fake_git.calls
    assert status.changed_count == 2
    assert status.current_branch == "main"
    assert status.has_remote is False
    assert status.error == "Failed to run git: git"


def test_first_spawn_failure_is_reported(repo_path: Path, fake_git: Any) -> None:
    fake_git.fail_spawn("branch", "--show-current", error=FileNotFoundError("first"))
    fake_git.fail_spawn("status", "--porcelain", error=FileNotFoundError("second"))

    status = get_status(repo_path)

    assert status.current_branch is None
    assert status.changed_count == 0
    assert status.error == "Failed to run git: first"


def test_to_dict_uses_front_end_keys(repo_path: Path, fake_git: Any) -> None:
    _script_tracked_repo(fake_git)

    data = get_status(repo_path).to_dict()

    assert data == {
        "isRepo": True,
        "hasRemote": True,
        "hasUpstream": True,
        "remoteUrl": "git@github.com:me/notes.git",
        "changedCount": 3,
        "aheadCount": 5,
        "behindCount": 3,
        "currentBranch": "main",
        "error": None,
    }


def test_to_dict_without_upstream() -> None:
    data = RepositoryStatus(is_repository=True).to_dict()
    assert data["hasUpstream"] is False
    assert data["aheadCount"] == -1
    assert data["behindCount"] == -1


def test_format_remote_url() -> None:
    assert format_remote_url("git@github.com:me/notes.git") == "me/notes"
    assert format_remote_url("https://github.com/me/notes.git") == "me/notes"
    assert format_remote_url("https://gitlab.com/group/notes") == "group/notes"
    assert format_remote_url(None) == "Connected"
    assert format_remote_url("notes") == "notes"
