"""Invocation of the external AI editing assistant on a single note."""

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

from .constants import APP_NAME

logger = logging.getLogger(APP_NAME)

ASSISTANT_EXECUTABLE = "claude"
ALLOWED_TOOLS = "Edit,Read,Write"


@dataclass(frozen=True)
class AssistantResult:
    """The outcome of one assistant run.

    Attributes:
        success (bool): Whether the assistant exited successfully.
        output (str | None): Its stdout, or None when empty.
        error (str | None): The failure text, on failure only.
        session_url (str | None): A link to the assistant session, if printed.
    """

    success: bool
    output: str | None = None
    error: str | None = None
    session_url: str | None = None


def is_available(executable: str = ASSISTANT_EXECUTABLE) -> bool:
    """Checks whether the assistant CLI can be invoked."""
    try:
        res = subprocess.run([executable, "--version"], capture_output=True)
    except OSError as e:
        logger.debug(f"{executable} is not available: {e}")
        return False
    return res.returncode == 0


def extract_session_url(text: str) -> str | None:
    """Finds the session link in assistant output.

    Args:
        text (str): Captured stdout or stderr.

    Returns:
        str | None: The `https://` token from the first line mentioning a
        session, the whole trimmed line if it has no such token, or None.
    """
    for line in text.splitlines():
        if "claude.ai/" in line and "session" in line:
            start = line.find("https://")
            if start == -1:
                return line.strip()
            return line[start:].split()[0]
    return None


def edit_note(
    note_path: Path, prompt: str, executable: str = ASSISTANT_EXECUTABLE
) -> AssistantResult:
    """Asks the assistant to edit `note_path` according to `prompt`.

    Blocks until the assistant exits.
    """
    full_prompt = (
        f"Edit the file at {note_path}. Here is what the user wants: {prompt}"
    )
    try:
        res = subprocess.run(
            [executable, "-p", full_prompt, "--allowedTools", ALLOWED_TOOLS],
            capture_output=True,
            encoding="utf-8",
            errors="replace",
        )
    except OSError as e:
        logger.error(f"Failed to run {executable}: {e}")
        return AssistantResult(success=False, error=f"Failed to run claude: {e}")

    stdout, stderr = res.stdout or "", res.stderr or ""
    session_url = extract_session_url(stdout) or extract_session_url(stderr)
    output = stdout or None

    if res.returncode == 0:
        return AssistantResult(success=True, output=output, session_url=session_url)

    logger.error(f"Assistant failed on {note_path}: {stderr.strip()}")
    return AssistantResult(
        success=False,
        output=output,
        error=stderr or "Claude Code exited with an error",
        session_url=session_url,
    )
