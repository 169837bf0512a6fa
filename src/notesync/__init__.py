"""notesync: git awareness for a notes folder.

This package reports a notes folder's synchronization state against its
remote and performs the commit, fetch, pull, push and remote setup needed to
keep the notes backed up. Git failures are classified into a small set of
user-facing messages.
"""

from . import (
    assistant,
    classify,
    cli,
    config,
    constants,
    errors,
    git_wrapper,
    probe,
    status,
    sync,
)

__all__ = [
    "assistant",
    "classify",
    "cli",
    "config",
    "constants",
    "errors",
    "git_wrapper",
    "probe",
    "status",
    "sync",
]
