"""Classification of git failure text into user-facing error categories.

Git reports failures as free text on stdout or stderr. The rule tables below
map that text to a small, fixed set of actionable messages. Matching is an
ordered, case-sensitive substring search over the unmodified text: the first
rule with any marker present wins, because a single diagnostic can contain
markers for several conditions at once. Text that matches no rule is
returned trimmed, so classification never hides information.
"""

from enum import Enum


class ErrorKind(Enum):
    """Machine-readable category of a classified git failure."""

    CONFLICT = "conflict"
    AUTHENTICATION = "authentication"
    NETWORK = "network"
    DIVERGED = "diverged"
    NOT_FOUND = "not_found"
    ALREADY_EXISTS = "already_exists"


MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.CONFLICT: "Merge conflicts detected. Resolve them manually, then commit.",
    ErrorKind.AUTHENTICATION: "Authentication failed. Check your git credentials.",
    ErrorKind.NETWORK: "Could not connect to the remote. Check your network connection.",
    ErrorKind.DIVERGED: "Local and remote history have diverged. Rebase or merge manually.",
    ErrorKind.NOT_FOUND: "Remote repository not found. Check the remote URL.",
    ErrorKind.ALREADY_EXISTS: "Remote 'origin' already exists",
}
"""dict[ErrorKind, str]: The user-facing message for each category."""

CONFLICT_MARKERS = (
    "CONFLICT",
    "Automatic merge failed",
    "fix conflicts",
    "unmerged files",
)
AUTH_MARKERS = (
    "Permission denied",
    "publickey",
    "Authentication failed",
    "could not read Username",
)
NETWORK_MARKERS = ("Could not resolve host",)
DIVERGED_MARKERS = (
    "non-fast-forward",
    "divergent branches",
    "Not possible to fast-forward",
)
NOT_FOUND_MARKERS = (
    "Repository not found",
    "repository not found",
    "does not exist",
)

Rule = tuple[ErrorKind, tuple[str, ...]]

PULL_RULES: list[Rule] = [
    (ErrorKind.CONFLICT, CONFLICT_MARKERS),
    (ErrorKind.AUTHENTICATION, AUTH_MARKERS),
    (ErrorKind.NETWORK, NETWORK_MARKERS),
    (ErrorKind.DIVERGED, DIVERGED_MARKERS),
]
"""list[Rule]: Pull and fetch rules, in priority order."""

PUSH_RULES: list[Rule] = [
    (ErrorKind.AUTHENTICATION, AUTH_MARKERS),
    (ErrorKind.NOT_FOUND, NOT_FOUND_MARKERS),
    (ErrorKind.NETWORK, NETWORK_MARKERS),
]
"""list[Rule]: Push rules, in priority order."""


def match(text: str, rules: list[Rule]) -> ErrorKind | None:
    """Returns the kind of the first rule with a marker in `text`, or None."""
    for kind, markers in rules:
        if any(marker in text for marker in markers):
            return kind
    return None


def _classify(text: str, rules: list[Rule]) -> str:
    kind = match(text, rules)
    if kind is None:
        return text.strip()
    return MESSAGES[kind]


def pull_kind(text: str) -> ErrorKind | None:
    return match(text, PULL_RULES)


def push_kind(text: str) -> ErrorKind | None:
    return match(text, PUSH_RULES)


def classify_pull(text: str) -> str:
    """Maps pull or fetch failure text to a user-facing message.

    Args:
        text (str): Raw diagnostic text (stdout and stderr for pull).

    Returns:
        str: The category message, or the trimmed text when nothing matches.
    """
    return _classify(text, PULL_RULES)


def classify_push(text: str) -> str:
    """Maps push failure text to a user-facing message.

    Args:
        text (str): Raw stderr of the push.

    Returns:
        str: The category message, or the trimmed text when nothing matches.
    """
    return _classify(text, PUSH_RULES)
