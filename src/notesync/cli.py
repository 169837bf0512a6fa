import argparse
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

from . import assistant, probe, sync
from .config import Config
from .constants import APP_NAME, DEFAULT_REMOTE, LOG_FILE
from .errors import GitError, GitUnavailableError
from .git_wrapper import GitRepo
from .status import RepositoryStatus, format_remote_url, get_status
from .sync import OperationOutcome

logger = logging.getLogger(APP_NAME)
console = Console()
err_console = Console(stderr=True)


def setup_logging(config: Config, verbose: bool = False) -> None:
    """Configures the notesync logger.

    Args:
        config (Config): Supplies the level and file-rotation settings.
        verbose (bool, optional): Forces DEBUG level. Defaults to False.
    """
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.setLevel(logging.DEBUG if verbose else config.logging.level)
    formatter = logging.Formatter(
        "[%(asctime)s] %(levelname)s: %(message)s", "%Y-%m-%d %H:%M:%S"
    )

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    if config.logging.log_to_file:
        try:
            LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                LOG_FILE,
                maxBytes=config.logging.max_log_size,
                backupCount=5,
            )
        except OSError as e:
            logger.warning(f"Could not open log file {LOG_FILE}: {e}")
            return
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)


def render_status(status: RepositoryStatus) -> Panel:
    """Builds the status panel for a notes folder."""
    content = Text()

    if not status.is_repository:
        content.append("Not a git repository.\n", style="yellow")
        content.append("Run 'notesync init' to start tracking this folder.")
        return Panel(content, title="Repository Status", expand=False)

    content.append("Branch:   ", style="bold")
    content.append(f"{status.current_branch or '(detached)'}\n")

    content.append("Remote:   ", style="bold")
    if status.has_remote:
        content.append(f"{format_remote_url(status.remote_url)}\n", style="cyan")
    else:
        content.append("None\n", style="dim")

    content.append("Tracking: ", style="bold")
    if status.upstream is not None:
        content.append(f"{DEFAULT_REMOTE}/{status.current_branch}\n", style="green")
        if status.upstream.in_sync:
            content.append("Sync:     ", style="bold")
            content.append("In sync\n", style="green")
        else:
            content.append("Ahead:    ", style="bold")
            content.append(f"{status.ahead_count} commits to push\n")
            content.append("Behind:   ", style="bold")
            content.append(f"{status.behind_count} commits to pull\n")
    else:
        content.append("No upstream\n", style="yellow")

    content.append("Pending:  ", style="bold")
    content.append(f"{status.changed_count} files changed")

    if status.error:
        content.append("\n\n⚠ ERROR: ", style="bold red")
        content.append(status.error, style="red")
    elif status.tracking_error:
        content.append("\n\n⚠ WARNING: ", style="bold yellow")
        content.append(status.tracking_error, style="yellow")

    return Panel(content, title="Repository Status", expand=False)


def report(outcome: OperationOutcome) -> int:
    """Prints an operation outcome and returns the process exit code."""
    if outcome.success:
        console.print(f"[bold green]✔[/bold green] {escape(outcome.message or '')}")
        return 0
    err_console.print(f"[bold red]ERROR:[/bold red] {escape(outcome.error or '')}")
    return 1


def _resolve_path(arg: str | None) -> Path:
    if arg:
        return Path(arg).expanduser().resolve()
    notes_dir = Config.load().notes.notes_dir
    if notes_dir:
        return Path(notes_dir).expanduser().resolve()
    return Path.cwd()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Keep a notes folder backed up with git.",
    )
    parser.add_argument(
        "-C", "--path", help="Notes folder (default: config notes_dir or cwd)"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(dest="command")

    status_parser = subparsers.add_parser("status", help="Show sync status")
    status_parser.add_argument(
        "--json", action="store_true", help="Print the status as JSON"
    )
    subparsers.add_parser("init", help="Initialize a git repository")

    commit_parser = subparsers.add_parser("commit", help="Stage and commit all changes")
    commit_parser.add_argument("-m", "--message", required=True, help="Commit message")

    subparsers.add_parser("fetch", help="Fetch remote changes")
    subparsers.add_parser("pull", help="Pull remote changes")

    push_parser = subparsers.add_parser("push", help="Push committed changes")
    push_parser.add_argument(
        "--track",
        action="store_true",
        help=f"Push the current branch and track it on {DEFAULT_REMOTE}",
    )

    remote_parser = subparsers.add_parser(
        "remote", help=f"Add the '{DEFAULT_REMOTE}' remote"
    )
    remote_parser.add_argument("url", help="https:// or git@ URL")

    subparsers.add_parser("check", help="Check that git is installed")

    edit_parser = subparsers.add_parser("edit", help="Edit a note with the AI assistant")
    edit_parser.add_argument("note", help="Path to the note file")
    edit_parser.add_argument("prompt", help="What to change")

    return parser


def _push(path: Path, track: bool, executable: str) -> OperationOutcome:
    if not track:
        return sync.push(path, executable)
    try:
        out = GitRepo(path, executable).current_branch()
    except GitUnavailableError as e:
        return OperationOutcome.failure(f"Failed to push: {e}")
    branch = out.stdout.strip() if out.ok else ""
    if not branch:
        return OperationOutcome.failure("No current branch to track")
    return sync.push_with_upstream(path, branch, executable)


def _edit(note: str, prompt: str) -> int:
    with console.status("Waiting for the assistant...", spinner="dots"):
        result = assistant.edit_note(Path(note).expanduser().resolve(), prompt)
    if result.output:
        console.print(result.output.rstrip(), markup=False)
    if result.session_url:
        console.print(f"[dim]Session: {result.session_url}[/dim]")
    if not result.success:
        err_console.print(f"[bold red]ERROR:[/bold red] {escape(result.error or '')}")
        return 1
    return 0


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the notesync CLI."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    path = _resolve_path(args.path)
    config = Config.load(path)
    setup_logging(config, args.verbose)
    git = config.git.executable

    if args.command is None:
        parser.print_help()
        return

    code = 0
    if args.command == "check":
        if probe.is_available(git):
            console.print(f"[bold green]✔[/bold green] {git} is available.")
        else:
            err_console.print(f"[bold red]ERROR:[/bold red] {git} could not be run.")
            code = 1
    elif args.command == "status":
        status = get_status(path, git)
        if args.json:
            console.print_json(data=status.to_dict())
        else:
            console.print(render_status(status))
    elif args.command == "init":
        try:
            probe.init_repository(path, git)
            console.print(f"[bold green]✔[/bold green] Initialized {path}")
        except GitError as e:
            err_console.print(f"[bold red]ERROR:[/bold red] {escape(str(e))}")
            code = 1
    elif args.command == "commit":
        with console.status("Committing...", spinner="dots"):
            outcome = sync.commit_all(path, args.message, git)
        code = report(outcome)
    elif args.command == "fetch":
        with console.status("Fetching...", spinner="dots"):
            outcome = sync.fetch(path, git)
        code = report(outcome)
    elif args.command == "pull":
        with console.status("Pulling...", spinner="dots"):
            outcome = sync.pull(path, git)
        code = report(outcome)
    elif args.command == "push":
        with console.status("Pushing...", spinner="dots"):
            outcome = _push(path, args.track, git)
        code = report(outcome)
    elif args.command == "remote":
        code = report(sync.add_remote(path, args.url, git))
    elif args.command == "edit":
        code = _edit(args.note, args.prompt)

    if code:
        sys.exit(code)


if __name__ == "__main__":
    main()
