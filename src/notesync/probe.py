"""Detection and initialization of git repositories."""

import logging
from pathlib import Path

from .constants import APP_NAME, GIT_DIR, GIT_EXECUTABLE
from .errors import GitUnavailableError
from .git_wrapper import GitRepo

logger = logging.getLogger(APP_NAME)


def is_available(executable: str = GIT_EXECUTABLE) -> bool:
    """Checks whether the git executable can be invoked.

    Args:
        executable (str, optional): The git binary. Defaults to "git".

    Returns:
        bool: True if `git --version` ran and exited successfully.
    """
    try:
        return GitRepo(Path.cwd(), executable).version().ok
    except (GitUnavailableError, OSError) as e:
        logger.debug(f"git is not available: {e}")
        return False


def is_repository(path: Path) -> bool:
    """Returns True if `path` holds a git metadata directory. Spawns nothing."""
    return (Path(path) / GIT_DIR).exists()


def init_repository(path: Path, executable: str = GIT_EXECUTABLE) -> None:
    """Initializes a git repository in `path`.

    Args:
        path (Path): The folder to initialize.
        executable (str, optional): The git binary. Defaults to "git".

    Raises:
        GitUnavailableError: If git could not be started.
        GitCommandError: If `git init` exited non-zero. Its message is git's
            raw stderr.
    """
    try:
        GitRepo(path, executable).init().check()
    except GitUnavailableError as e:
        raise GitUnavailableError(f"Failed to run git init: {e}") from e
    logger.info(f"Initialized git repository in {path}")
