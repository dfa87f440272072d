from __future__ import annotations

from pathlib import Path

import typer

from loupe import __version__
from loupe.discovery import DEFAULT_MAX_DEPTH
from loupe.logging_config import setup_logger
from loupe.models import FlatItem, RepoItem
from loupe.state import ViewState
from loupe.tui import LoupeTui

__all__ = [
    "FlatItem",
    "LoupeTui",
    "RepoItem",
    "ViewState",
    "cli",
    "run",
]

LOG_LEVELS = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}


def _version_callback(value: bool) -> None:
    if not value:
        return
    typer.echo(f"loupe {__version__}")
    raise typer.Exit()


cli = typer.Typer(
    add_completion=False,
    help="Browse git repositories and their files in a Textual TUI.",
)


@cli.command()
def run(
    roots: list[Path] | None = typer.Argument(
        None,
        help="Directories to scan for repositories. Defaults to the current directory.",
        show_default=False,
    ),
    max_depth: int = typer.Option(
        DEFAULT_MAX_DEPTH,
        "--max-depth",
        "-d",
        min=0,
        help="How deep below each root to look for repositories.",
    ),
    file: Path | None = typer.Option(
        None,
        "--file",
        "-f",
        help="Open the repository containing this file and select it.",
    ),
    log_level: str = typer.Option(
        "INFO",
        "--log-level",
        help="Log level for the log file.",
    ),
    _version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    requested_roots = roots or [Path.cwd()]
    missing = [root for root in requested_roots if not root.is_dir()]
    if missing:
        for root in missing:
            typer.echo(f"Not a directory: {root}", err=True)
        raise typer.Exit(code=1)

    if log_level.upper() not in LOG_LEVELS:
        typer.echo(f"Unknown log level: {log_level}", err=True)
        raise typer.Exit(code=1)

    setup_logger(log_level)
    LoupeTui(
        roots=[str(root) for root in requested_roots],
        max_depth=max_depth,
        initial_file=str(file) if file is not None else None,
    ).run()


if __name__ == "__main__":
    cli()
