import logging
import re
import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

from .constants import (
    APP_NAME,
    CONFIG_FILE,
    GIT_EXECUTABLE,
    LOCAL_CONFIG_NAME,
)

logger = logging.getLogger(APP_NAME)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def parse_size(value: int | str) -> int:
    """Converts human-readable size strings (e.g., '5MB') to bytes."""
    if isinstance(value, int):
        return value
    match = re.match(r"^(\d+(?:\.\d+)?)\s*([kmg]b?)$", str(value).strip().lower())
    if not match:
        raise ValueError(f"Invalid size format '{value}'")
    num, unit = float(match.group(1)), match.group(2)
    multiplier = {
        "k": 1024,
        "kb": 1024,
        "m": 1024**2,
        "mb": 1024**2,
        "g": 1024**3,
        "gb": 1024**3,
    }
    return int(num * multiplier[unit])


def parse_level(value: str) -> str:
    """Normalizes a logging level name, rejecting unknown levels."""
    level = str(value).strip().upper()
    if level not in LOG_LEVELS:
        raise ValueError(f"Unknown log level '{value}'")
    return level


def parse_text(value: Any) -> str:
    """Accepts a non-empty string, such as a path or an executable name."""
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Expected a non-empty string, got {value!r}")
    return value.strip()


def parse_flag(value: Any) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"Expected true or false, got {value!r}")
    return value


@dataclass
class GitConfig:
    """Settings for the git executable.

    Attributes:
        executable (str): The git binary to invoke.
    """

    executable: str = GIT_EXECUTABLE


@dataclass
class LoggingConfig:
    """Logging settings.

    Attributes:
        level (str): The minimum level emitted by the CLI.
        log_to_file (bool): Whether to also write a rotating log file.
        max_log_size (int): Max bytes for the log file before rotation.
    """

    level: str = "INFO"
    log_to_file: bool = False
    max_log_size: int = 5 * 1024 * 1024


@dataclass
class NotesConfig:
    """Notes folder settings.

    Attributes:
        notes_dir (str | None): The default folder commands operate on.
    """

    notes_dir: str | None = None


@dataclass
class Config:
    """Global configuration aggregator.

    Attributes:
        git (GitConfig): Git executable settings.
        logging (LoggingConfig): Logging settings.
        notes (NotesConfig): Notes folder settings.
    """

    git: GitConfig = field(default_factory=GitConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    notes: NotesConfig = field(default_factory=NotesConfig)

    # Cache for the base global configuration
    _global_cache: "Config | None" = None

    @classmethod
    def load(cls, repo_path: Path | None = None) -> "Config":
        """Loads and merges configuration from defaults, global, and local sources.

        Args:
            repo_path (Path | None): The notes folder to search for local config.

        Returns:
            Config: The fully merged configuration object.
        """
        if cls._global_cache is None:
            instance = cls()
            if CONFIG_FILE.exists():
                instance._merge_from_file(CONFIG_FILE)
            cls._global_cache = instance

        instance = replace(cls._global_cache)

        if repo_path:
            local_toml = repo_path / LOCAL_CONFIG_NAME
            pyproject = repo_path / "pyproject.toml"

            if local_toml.exists():
                instance._merge_from_file(local_toml)
            elif pyproject.exists():
                instance._merge_from_file(pyproject, section="tool.notesync")

        return instance

    def _merge_from_file(self, path: Path, section: str | None = None) -> None:
        """Parses a TOML file and merges it into the current instance.

        Args:
            path (Path): Path to the TOML file.
            section (str | None): Dot-separated section path (e.g., 'tool.notesync').
        """
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)

            if section:
                for key in section.split("."):
                    data = data.get(key, {})

            if not data:
                return

            if "git" in data:
                self.git = self._update_dataclass("git", self.git, data["git"])
            if "logging" in data:
                self.logging = self._update_dataclass(
                    "logging", self.logging, data["logging"]
                )
            if "notes" in data:
                self.notes = self._update_dataclass("notes", self.notes, data["notes"])

        except tomllib.TOMLDecodeError as e:
            logger.error(f"Config syntax error in {path}: {e}")
        except OSError as e:
            logger.warning(f"Failed to load config from {path}: {e}")

    @staticmethod
    def _update_dataclass(section_name: str, instance: Any, updates: dict) -> Any:
        """Updates a dataclass, warning on invalid keys and parsing human-readable formats."""
        valid_keys = instance.__dataclass_fields__.keys()
        filtered_updates = {}

        invalid_keys = set(updates.keys()) - set(valid_keys)
        if invalid_keys:
            logger.warning(
                f"Unknown config keys in [{section_name}]: {', '.join(sorted(invalid_keys))}. Ignoring."
            )

        for k, v in updates.items():
            if k not in valid_keys:
                continue

            try:
                if k == "max_log_size":
                    filtered_updates[k] = parse_size(v)
                elif k == "level":
                    filtered_updates[k] = parse_level(v)
                elif k in ("executable", "notes_dir"):
                    filtered_updates[k] = parse_text(v)
                elif k == "log_to_file":
                    filtered_updates[k] = parse_flag(v)
                else:
                    filtered_updates[k] = v
            except ValueError as e:
                logger.warning(
                    f"Config error in [{section_name}].{k}: {e}. Falling back to default."
                )

        return replace(instance, **filtered_updates)
