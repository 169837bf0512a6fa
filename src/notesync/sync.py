"""Mutating git operations used to back up a notes folder.

Every operation returns an `OperationOutcome`. Failures from git, including
a missing executable, are converted at the subprocess boundary; nothing
escapes as an exception.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from . import probe
from .classify import (
    MESSAGES,
    ErrorKind,
    classify_pull,
    classify_push,
    pull_kind,
    push_kind,
)
from .constants import APP_NAME, DEFAULT_REMOTE, GIT_EXECUTABLE, REMOTE_URL_PREFIXES
from .errors import GitUnavailableError
from .git_wrapper import GitOutput, GitRepo

logger = logging.getLogger(APP_NAME)

NOTHING_TO_COMMIT = "nothing to commit"
ALREADY_UP_TO_DATE = ("Already up to date", "Already up-to-date")
INVALID_REMOTE_URL = "Invalid remote URL. Use an https:// or git@ URL."


@dataclass(frozen=True)
class OperationOutcome:
    """The result of one mutating operation.

    Exactly one of `message` and `error` is set.

    Attributes:
        success (bool): Whether the operation succeeded.
        message (str | None): Human-readable success text.
        error (str | None): Human-readable failure text, classified when possible.
        kind (ErrorKind | None): The failure category, when one was recognized.
    """

    success: bool
    message: str | None = None
    error: str | None = None
    kind: ErrorKind | None = None

    @classmethod
    def ok(cls, message: str) -> "OperationOutcome":
        return cls(success=True, message=message)

    @classmethod
    def failure(cls, error: str, kind: ErrorKind | None = None) -> "OperationOutcome":
        return cls(success=False, error=error, kind=kind)

    def to_dict(self) -> dict[str, Any]:
        return {"success": self.success, "message": self.message, "error": self.error}


def _raw_error(out: GitOutput) -> str:
    return out.stderr.strip() or out.stdout.strip() or f"git exited {out.returncode}"


def _classified(
    out: GitOutput,
    text: str,
    classify: Callable[[str], str],
    kind_of: Callable[[str], ErrorKind | None],
) -> OperationOutcome:
    return OperationOutcome.failure(classify(text) or _raw_error(out), kind_of(text))


def _open(path: Path, executable: str) -> GitRepo | OperationOutcome:
    """Returns a GitRepo for `path`, or a failure if it is not a repository."""
    if not probe.is_repository(path):
        return OperationOutcome.failure(f"Not a git repository: {path}")
    return GitRepo(path, executable)


def commit_all(
    path: Path, message: str, executable: str = GIT_EXECUTABLE
) -> OperationOutcome:
    """Stages every change and commits it.

    A commit with nothing staged counts as success ("Nothing to commit").

    Args:
        path (Path): The notes folder.
        message (str): The commit message.
        executable (str, optional): The git binary. Defaults to "git".

    Returns:
        OperationOutcome: The result of the stage and commit steps.
    """
    repo = _open(path, executable)
    if isinstance(repo, OperationOutcome):
        return repo

    try:
        staged = repo.add_all()
    except GitUnavailableError as e:
        return OperationOutcome.failure(f"Failed to stage changes: {e}")
    if not staged.ok:
        error = staged.stderr.strip()
        if staged.stdout.strip():
            error = f"{error}\n{staged.stdout.strip()}".strip()
        logger.error(f"Staging failed in {path}: {error}")
        return OperationOutcome.failure(error or _raw_error(staged))

    try:
        committed = repo.commit(message)
    except GitUnavailableError as e:
        return OperationOutcome.failure(f"Failed to commit: {e}")
    if committed.ok:
        logger.info(f"Committed changes in {path}")
        return OperationOutcome.ok("Changes committed")
    if NOTHING_TO_COMMIT in committed.combined:
        return OperationOutcome.ok("Nothing to commit")

    logger.error(f"Commit failed in {path}: {_raw_error(committed)}")
    return OperationOutcome.failure(_raw_error(committed))


def fetch(path: Path, executable: str = GIT_EXECUTABLE) -> OperationOutcome:
    """Updates remote-tracking refs without touching the working tree."""
    repo = _open(path, executable)
    if isinstance(repo, OperationOutcome):
        return repo

    try:
        out = repo.fetch()
    except GitUnavailableError as e:
        return OperationOutcome.failure(f"Failed to fetch: {e}")
    if out.ok:
        return OperationOutcome.ok("Fetched latest changes")

    logger.error(f"Fetch failed in {path}: {_raw_error(out)}")
    return _classified(out, out.stderr, classify_pull, pull_kind)


def pull(path: Path, executable: str = GIT_EXECUTABLE) -> OperationOutcome:
    """Fetches and integrates remote changes into the current branch.

    Failure text is classified over stdout and stderr together, since git
    reports conflicts on stdout and transport errors on stderr.
    """
    repo = _open(path, executable)
    if isinstance(repo, OperationOutcome):
        return repo

    try:
        out = repo.pull()
    except GitUnavailableError as e:
        return OperationOutcome.failure(f"Failed to pull: {e}")
    if out.ok:
        if any(marker in out.stdout for marker in ALREADY_UP_TO_DATE):
            return OperationOutcome.ok("Already up to date")
        logger.info(f"Pulled latest changes into {path}")
        return OperationOutcome.ok("Pulled latest changes")

    logger.error(f"Pull failed in {path}: {out.combined.strip()}")
    return _classified(out, out.combined, classify_pull, pull_kind)


def push(path: Path, executable: str = GIT_EXECUTABLE) -> OperationOutcome:
    """Pushes the current branch to its configured upstream."""
    repo = _open(path, executable)
    if isinstance(repo, OperationOutcome):
        return repo

    try:
        out = repo.push()
    except GitUnavailableError as e:
        return OperationOutcome.failure(f"Failed to push: {e}")
    if out.ok:
        logger.info(f"Pushed {path}")
        return OperationOutcome.ok("Pushed successfully")

    logger.error(f"Push failed in {path}: {_raw_error(out)}")
    return _classified(out, out.stderr, classify_push, push_kind)


def push_with_upstream(
    path: Path, branch: str, executable: str = GIT_EXECUTABLE
) -> OperationOutcome:
    """Pushes `branch` and makes it track the same-named branch on origin."""
    repo = _open(path, executable)
    if isinstance(repo, OperationOutcome):
        return repo

    try:
        out = repo.push_upstream(branch, DEFAULT_REMOTE)
    except GitUnavailableError as e:
        return OperationOutcome.failure(f"Failed to push: {e}")
    if out.ok:
        logger.info(f"Pushed {path}, now tracking {DEFAULT_REMOTE}/{branch}")
        return OperationOutcome.ok(f"Pushed and tracking {DEFAULT_REMOTE}/{branch}")

    logger.error(f"Push failed in {path}: {_raw_error(out)}")
    return _classified(out, out.stderr, classify_push, push_kind)


def add_remote(
    path: Path, url: str, executable: str = GIT_EXECUTABLE
) -> OperationOutcome:
    """Adds `url` as the `origin` remote.

    The URL is validated before any process is spawned.
    """
    url = url.strip()
    if not url.startswith(REMOTE_URL_PREFIXES):
        return OperationOutcome.failure(INVALID_REMOTE_URL)

    repo = _open(path, executable)
    if isinstance(repo, OperationOutcome):
        return repo

    try:
        out = repo.add_remote(url, DEFAULT_REMOTE)
    except GitUnavailableError as e:
        return OperationOutcome.failure(f"Failed to add remote: {e}")
    if out.ok:
        logger.info(f"Added remote '{DEFAULT_REMOTE}' -> {url} in {path}")
        return OperationOutcome.ok(f"Remote '{DEFAULT_REMOTE}' added")
    if "already exists" in out.stderr:
        return OperationOutcome.failure(
            MESSAGES[ErrorKind.ALREADY_EXISTS], ErrorKind.ALREADY_EXISTS
        )

    logger.error(f"Adding remote failed in {path}: {_raw_error(out)}")
    return OperationOutcome.failure(_raw_error(out))
