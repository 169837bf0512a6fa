"""Aggregation of independent git queries into one repository snapshot."""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from . import probe
from .constants import APP_NAME, DEFAULT_REMOTE, GIT_EXECUTABLE
from .errors import GitUnavailableError
from .git_wrapper import GitRepo

logger = logging.getLogger(APP_NAME)

# Failure text git prints when the branch has no upstream or the ref is unknown.
NO_UPSTREAM_MARKERS = (
    "no upstream configured",
    "no upstream branch",
    "unknown revision",
    "ambiguous argument",
    "bad revision",
)


@dataclass(frozen=True)
class Divergence:
    """Commit counts between HEAD and its upstream. Both are >= 0."""

    ahead: int
    behind: int

    @property
    def in_sync(self) -> bool:
        return self.ahead == 0 and self.behind == 0


@dataclass(frozen=True)
class RepositoryStatus:
    """A point-in-time picture of a notes folder's sync state.

    Built fresh by `get_status` on every call. For a path that is not a
    repository every field keeps its default.

    Attributes:
        is_repository (bool): Whether the folder holds git metadata.
        has_remote (bool): Whether any remote is configured.
        remote_url (str | None): The URL of the default remote, if known.
        current_branch (str | None): None when detached or on an unborn branch.
        upstream (Divergence | None): None when the branch tracks no upstream.
        changed_count (int): Paths with staged, unstaged or untracked changes.
        error (str | None): Set when aggregation itself could not complete.
        tracking_error (str | None): The ahead/behind failure text when it was
            something other than a missing upstream.
    """

    is_repository: bool = False
    has_remote: bool = False
    remote_url: str | None = None
    current_branch: str | None = None
    upstream: Divergence | None = None
    changed_count: int = 0
    error: str | None = None
    tracking_error: str | None = None

    @property
    def has_upstream_tracking(self) -> bool:
        return self.upstream is not None

    @property
    def ahead_count(self) -> int:
        """Commits ahead of the upstream, or -1 without upstream tracking."""
        return self.upstream.ahead if self.upstream else -1

    @property
    def behind_count(self) -> int:
        """Commits behind the upstream, or -1 without upstream tracking."""
        return self.upstream.behind if self.upstream else -1

    def to_dict(self) -> dict[str, Any]:
        """Serializes the snapshot with the front end's camelCase keys."""
        return {
            "isRepo": self.is_repository,
            "hasRemote": self.has_remote,
            "hasUpstream": self.has_upstream_tracking,
            "remoteUrl": self.remote_url,
            "changedCount": self.changed_count,
            "aheadCount": self.ahead_count,
            "behindCount": self.behind_count,
            "currentBranch": self.current_branch,
            "error": self.error,
        }


def _read_branch(repo: GitRepo) -> str | None:
    out = repo.current_branch()
    if not out.ok:
        logger.debug(f"Branch query failed in {repo.path}: {out.stderr.strip()}")
        return None
    return out.stdout.strip() or None


def _read_remote(repo: GitRepo) -> tuple[bool, str | None]:
    out = repo.remotes()
    if not (out.ok and out.stdout.strip()):
        return False, None

    url_out = repo.remote_url(DEFAULT_REMOTE)
    if not url_out.ok:
        logger.debug(f"No URL for remote '{DEFAULT_REMOTE}': {url_out.stderr.strip()}")
        return True, None
    return True, url_out.stdout.strip() or None


def _read_changed_count(repo: GitRepo) -> int:
    out = repo.status_porcelain()
    if not out.ok:
        logger.warning(f"Status query failed in {repo.path}: {out.stderr.strip()}")
        return 0
    return sum(1 for line in out.stdout.splitlines() if line.strip())


def _parse_divergence(text: str) -> Divergence | None:
    parts = text.split()
    if len(parts) != 2:
        return None
    try:
        behind, ahead = int(parts[0]), int(parts[1])
    except ValueError:
        return None
    if behind < 0 or ahead < 0:
        return None
    return Divergence(ahead=ahead, behind=behind)


def _read_upstream(repo: GitRepo) -> tuple[Divergence | None, str | None]:
    """Returns the divergence (or None) and any unrecognized failure text."""
    out = repo.ahead_behind()
    if out.ok:
        divergence = _parse_divergence(out.stdout)
        if divergence is None:
            logger.warning(f"Unparsable ahead/behind output: {out.stdout.strip()!r}")
            return None, out.stdout.strip()
        return divergence, None

    stderr = out.stderr.strip()
    if any(marker in stderr for marker in NO_UPSTREAM_MARKERS):
        return None, None
    logger.warning(f"Ahead/behind query failed in {repo.path}: {stderr}")
    return None, stderr or None


def get_status(path: Path, executable: str = GIT_EXECUTABLE) -> RepositoryStatus:
    """Collects the sync status of the folder at `path`.

    Each query fills one field and degrades that field alone on failure.
    Ahead/behind counts are only queried when both a remote and a branch
    exist.

    Args:
        path (Path): The notes folder.
        executable (str, optional): The git binary. Defaults to "git".

    Returns:
        RepositoryStatus: The snapshot. Never raises for a repository path.
    """
    path = Path(path)
    if not probe.is_repository(path):
        return RepositoryStatus()

    repo = GitRepo(path, executable)
    fields: dict[str, Any] = {"is_repository": True}

    def attempt(step: Callable[[GitRepo], Any], default: Any) -> Any:
        try:
            return step(repo)
        except GitUnavailableError as e:
            logger.error(f"git could not run while reading {path}: {e}")
            fields.setdefault("error", f"Failed to run git: {e}")
            return default

    fields["current_branch"] = attempt(_read_branch, None)
    fields["has_remote"], fields["remote_url"] = attempt(_read_remote, (False, None))
    fields["changed_count"] = attempt(_read_changed_count, 0)
    if fields["has_remote"] and fields["current_branch"]:
        fields["upstream"], fields["tracking_error"] = attempt(
            _read_upstream, (None, None)
        )

    return RepositoryStatus(**fields)


def format_remote_url(url: str | None) -> str:
    """Shortens a remote URL to "owner/repo" for display.

    Handles both `git@host:owner/repo.git` and `https://host/owner/repo.git`.
    Unrecognized URLs are returned unchanged.
    """
    if not url:
        return "Connected"
    ssh_match = re.search(r":([^/]+/[^/]+?)(?:\.git)?$", url)
    https_match = re.search(r"/([^/]+/[^/]+?)(?:\.git)?$", url)
    if ssh_match and not url.startswith(("https://", "http://")):
        return ssh_match.group(1)
    if https_match:
        return https_match.group(1)
    return url
