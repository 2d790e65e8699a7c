"""Main CLI application entry point.

Defines the single ``dotsync`` command. The action flags (--install,
--add, --sync) may be combined; they always run in import, install,
sync order.
"""

import logging
import signal
from pathlib import Path
from types import FrameType
from typing import Annotated

import typer
from rich.logging import RichHandler
from rich.markup import escape

from dotsync import __version__
from dotsync.cli.display import (
    create_import_results_table,
    create_link_results_table,
    print_import_summary,
    print_link_summary,
)
from dotsync.core.errors import (
    ConfigError,
    InvalidScopeError,
    MappingCollisionError,
    PickerUnavailableError,
)
from dotsync.core.orchestrator import Orchestrator, RunReport, resolve_scope
from dotsync.core.paths import find_latest_snapshot
from dotsync.core.prompts import TyperPrompter
from dotsync.core.settings import RunOptions, load_settings
from dotsync.importing.engine import CATEGORY_ERROR, is_valid_category
from dotsync.importing.picker import FzfPicker
from dotsync.linking.snapshot import TarArchiver
from dotsync.utils.formatting import (
    console,
    err_console,
    print_error,
    print_success,
    print_warning,
)
from dotsync.vcs.git import GitRepository

# Exit code conventionally used after SIGINT
EXIT_INTERRUPTED = 130

app = typer.Typer(
    name="dotsync",
    help="A robust, symlink-based dotfiles management system.",
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"dotsync version {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    """Route library logging to stderr through Rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _raise_interrupt(signum: int, frame: FrameType | None) -> None:
    """Turn SIGTERM into the same interruption path as Ctrl-C."""
    raise KeyboardInterrupt


def _print_interrupt_guidance(home: Path) -> None:
    """Point the operator at the newest snapshot for manual recovery."""
    latest = find_latest_snapshot(home)
    if latest is not None:
        print_warning(f"Interrupted. Restore from snapshot {latest} if needed.")
    else:
        print_warning(
            "Interrupted. Restore from snapshot in ~/.dotfiles_backup_*.tar.gz if needed."
        )


def _print_report(report: RunReport, dry_run: bool) -> None:
    """Render the tables and summaries of a finished run."""
    if report.imports:
        console.print()
        console.print(create_import_results_table(report.imports, dry_run=dry_run))
        print_import_summary(report.imports)

    if report.links:
        console.print()
        console.print(create_link_results_table(report.links, dry_run=dry_run))
        print_link_summary(report.links)

    if report.snapshot is not None:
        console.print(f"[muted]Snapshot: {escape(str(report.snapshot))}[/muted]", highlight=False)

    if report.push_error:
        print_error(f"Push failed: {report.push_error}")
    if report.sync_error:
        print_error(f"Sync failed: {report.sync_error}")


@app.command()
def main(
    ctx: typer.Context,
    path: Annotated[
        Path | None,
        typer.Argument(
            help="Restrict operations to a specific directory (e.g., ~/.config).",
            show_default=False,
        ),
    ] = None,
    install: Annotated[
        bool,
        typer.Option("--install", help="Install dotfiles (symlink repository files into $HOME)."),
    ] = False,
    add: Annotated[
        bool,
        typer.Option("--add", help="Interactively import files into the dotfiles repository."),
    ] = False,
    sync: Annotated[
        bool,
        typer.Option("--sync", help="Pull from the remote, then commit and push storage changes."),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show what would happen without making any changes."),
    ] = False,
    yes: Annotated[
        bool,
        typer.Option(
            "--yes",
            "-y",
            help="Non-interactive mode: confirmations take their safe default.",
        ),
    ] = False,
    category: Annotated[
        str | None,
        typer.Option("--category", "-c", help="Category for every file imported with --add."),
    ] = None,
    repo: Annotated[
        Path | None,
        typer.Option("--repo", help="Dotfiles repository (overrides config and DOTSYNC_REPO)."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging."),
    ] = False,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
) -> None:
    """Mirror a dotfiles repository onto $HOME via symlinks.

    Default behavior is interactive; conflicts are resolved file by file.
    """
    _configure_logging(verbose)

    if not (install or add or sync):
        if path is None and category is None and repo is None:
            typer.echo(ctx.get_help())
            raise typer.Exit()
        print_error("Nothing to do. Use --install, --add and/or --sync.")
        raise typer.Exit(code=1)

    if category is not None and not is_valid_category(category):
        print_error(f"Invalid category '{category}'. {CATEGORY_ERROR}")
        raise typer.Exit(code=1)

    try:
        scope = resolve_scope(path)
        settings = load_settings(repository=repo)
    except (InvalidScopeError, ConfigError) as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    home = Path.home().resolve()
    options = RunOptions(dry_run=dry_run, assume_yes=yes)
    orchestrator = Orchestrator(
        settings,
        options,
        home=home,
        prompter=TyperPrompter(),
        picker=FzfPicker(home, settings.picker_excludes, [settings.repository]),
        vcs=GitRepository(settings.repository, settings.remote, dry_run=dry_run),
        archiver=TarArchiver(),
    )

    previous_handler = signal.signal(signal.SIGTERM, _raise_interrupt)
    try:
        report = orchestrator.run(
            install=install,
            add=add,
            sync=sync,
            scope=scope,
            category=category,
        )
    except (KeyboardInterrupt, typer.Abort) as e:
        _print_interrupt_guidance(home)
        raise typer.Exit(code=EXIT_INTERRUPTED) from e
    except (PickerUnavailableError, MappingCollisionError) as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    except OSError as e:
        print_error(f"Aborted: {e}")
        raise typer.Exit(code=1) from e
    finally:
        signal.signal(signal.SIGTERM, previous_handler)

    _print_report(report, dry_run)

    if report.failed:
        raise typer.Exit(code=1)

    print_success("Operation completed successfully.")


if __name__ == "__main__":
    app()
