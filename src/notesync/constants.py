import os
from pathlib import Path

"""Global constants and path definitions for notesync.

This module defines the application identifiers, the fixed git conventions
(metadata directory, default remote) and the filesystem locations used for
configuration and logs.
"""

# --- Identity ---
APP_NAME = "notesync"
"""str: The human-readable application name, also used as the logger name."""

# --- Git conventions ---
GIT_EXECUTABLE = "git"
"""str: The default git executable looked up on PATH."""

GIT_DIR = ".git"
"""str: The metadata directory whose presence marks a repository."""

DEFAULT_REMOTE = "origin"
"""str: The conventional remote name used for all sync operations."""

REMOTE_URL_PREFIXES = ("https://", "http://", "git@")
"""tuple[str, ...]: URL prefixes accepted by `add_remote`."""

UPSTREAM_REF = "@{upstream}"
"""str: The revision naming the current branch's upstream."""

# --- Paths ---
_XDG_STATE = os.environ.get("XDG_STATE_HOME")
_BASE_STATE = Path(_XDG_STATE) if _XDG_STATE else Path.home() / ".local/state"

STATE_DIR = _BASE_STATE / "notesync"
"""Path: The directory for runtime state (logs)."""

LOG_FILE = STATE_DIR / "notesync.log"
"""Path: The rotating log file used when file logging is enabled."""

CONFIG_DIR: Path = Path.home() / ".config/notesync"
"""Path: The directory for user configuration files."""

CONFIG_FILE: Path = CONFIG_DIR / "config.toml"
"""Path: The global configuration file path."""

LOCAL_CONFIG_NAME = "notesync.toml"
"""str: The per-folder configuration file name."""
