"""Exception types raised at the git subprocess boundary."""


class GitError(RuntimeError):
    """Base error for git invocations."""


class GitUnavailableError(GitError):
    """The git executable could not be spawned (missing, not executable)."""


class GitCommandError(GitError):
    """A git process ran but exited with a non-zero status.

    Attributes:
        args_list (list[str]): The arguments passed after the executable.
        returncode (int): The process exit code.
        stdout (str): Captured standard output.
        stderr (str): Captured standard error.
    """

    def __init__(
        self, args_list: list[str], returncode: int, stdout: str, stderr: str
    ) -> None:
        self.args_list = args_list
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(stderr.strip() or stdout.strip() or f"git exited {returncode}")
