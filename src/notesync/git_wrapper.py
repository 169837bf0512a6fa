import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

from .constants import APP_NAME, DEFAULT_REMOTE, GIT_EXECUTABLE, UPSTREAM_REF
from .errors import GitCommandError, GitUnavailableError

logger = logging.getLogger(APP_NAME)


@dataclass(frozen=True)
class GitOutput:
    """The captured result of a single git invocation.

    Attributes:
        args (list[str]): The arguments passed after the executable.
        returncode (int): The process exit code. Zero is the only success signal.
        stdout (str): Standard output, decoded as UTF-8 with replacement.
        stderr (str): Standard error, decoded as UTF-8 with replacement.
    """

    args: list[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def combined(self) -> str:
        """Stdout followed by stderr, for diagnostics that may land on either."""
        return f"{self.stdout}{self.stderr}"

    def check(self) -> "GitOutput":
        """Returns self, or raises GitCommandError for a non-zero exit."""
        if not self.ok:
            raise GitCommandError(self.args, self.returncode, self.stdout, self.stderr)
        return self


class GitRepo:
    """A wrapper around the Git command-line interface for a notes folder.

    Each method maps to one fixed argument vector and runs exactly one git
    process. Non-zero exits are returned, not raised, so callers decide how
    each failure degrades.

    Attributes:
        path (Path): The working directory git runs in.
        executable (str): The git executable to invoke.
    """

    def __init__(self, path: Path, executable: str = GIT_EXECUTABLE):
        """Initializes the GitRepo instance.

        Args:
            path (Path): The working directory. It need not be a repository yet.
            executable (str, optional): The git binary. Defaults to "git".
        """
        self.path = Path(path)
        self.executable = executable

    def _run(self, args: list[str]) -> GitOutput:
        """Executes a git command within the working directory.

        Args:
            args (list[str]): A list of arguments to pass to the git command.

        Returns:
            GitOutput: The exit code and both captured streams.

        Raises:
            GitUnavailableError: If the git process could not be spawned, including
                arguments the OS rejects (embedded NUL bytes).
        """
        logger.debug(f"git {' '.join(args)} (cwd={self.path})")
        try:
            res = subprocess.run(
                [self.executable, *args],
                cwd=self.path,
                capture_output=True,
                encoding="utf-8",
                errors="replace",
            )
        except (OSError, ValueError) as e:
            # ValueError covers argv that cannot reach exec, e.g. an embedded NUL.
            raise GitUnavailableError(str(e)) from e
        return GitOutput(args, res.returncode, res.stdout or "", res.stderr or "")

    def version(self) -> GitOutput:
        return self._run(["--version"])

    def init(self) -> GitOutput:
        return self._run(["init"])

    def current_branch(self) -> GitOutput:
        """Retrieves the checked-out branch name (empty when detached or unborn)."""
        return self._run(["branch", "--show-current"])

    def remotes(self) -> GitOutput:
        return self._run(["remote"])

    def remote_url(self, name: str = DEFAULT_REMOTE) -> GitOutput:
        return self._run(["remote", "get-url", name])

    def status_porcelain(self) -> GitOutput:
        """Returns the porcelain (machine-readable) status, one path per line."""
        return self._run(["status", "--porcelain"])

    def ahead_behind(self) -> GitOutput:
        """Counts commits on each side of the upstream.

        The output is "<behind>\\t<ahead>": the left side of the symmetric
        difference is the upstream, the right side is HEAD.
        """
        return self._run(
            ["rev-list", "--left-right", "--count", f"{UPSTREAM_REF}...HEAD"]
        )

    def add_all(self) -> GitOutput:
        """Stages all changes (modified, deleted, and untracked files)."""
        return self._run(["add", "-A"])

    def commit(self, message: str) -> GitOutput:
        return self._run(["commit", "-m", message])

    def fetch(self) -> GitOutput:
        return self._run(["fetch", "--quiet"])

    def pull(self) -> GitOutput:
        return self._run(["pull"])

    def push(self) -> GitOutput:
        return self._run(["push"])

    def push_upstream(self, branch: str, remote: str = DEFAULT_REMOTE) -> GitOutput:
        """Pushes `branch` and sets it to track `remote/branch`."""
        return self._run(["push", "-u", remote, branch])

    def add_remote(self, url: str, name: str = DEFAULT_REMOTE) -> GitOutput:
        return self._run(["remote", "add", name, url])
