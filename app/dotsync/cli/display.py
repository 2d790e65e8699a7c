"""Shared Rich display functions for run results.

Provides table builders and summary printers for the outcome of the
link and import steps.
"""

from rich.markup import escape
from rich.table import Table

from dotsync.models.results import ImportResult, ImportStatus, LinkResult, LinkStatus
from dotsync.utils.formatting import console, print_success

_LINK_STYLES: dict[LinkStatus, str] = {
    LinkStatus.ALREADY_LINKED: "muted",
    LinkStatus.LINKED: "added",
    LinkStatus.RELINKED: "changed",
    LinkStatus.CONVERTED: "added",
    LinkStatus.ADOPTED_LOCAL: "changed",
    LinkStatus.ADOPTED_REPO: "changed",
    LinkStatus.SKIPPED: "warning",
    LinkStatus.FAILED: "error",
}

_IMPORT_STYLES: dict[ImportStatus, str] = {
    ImportStatus.IMPORTED: "added",
    ImportStatus.SKIPPED: "warning",
    ImportStatus.FAILED: "error",
}


def create_link_results_table(results: list[LinkResult], dry_run: bool = False) -> Table:
    """Create a Rich table of per-mapping link outcomes.

    Args:
        results: Link results to display.
        dry_run: Whether this is a dry-run (changes table title).

    Returns:
        Rich Table configured for link result display.
    """
    title = "Install Results (Dry Run)" if dry_run else "Install Results"
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Status", width=14)
    table.add_column("Category", width=10)
    table.add_column("Path", no_wrap=True)
    table.add_column("Details")

    for result in results:
        style = _LINK_STYLES[result.status]
        table.add_row(
            f"[{style}]{result.status.value}[/{style}]",
            escape(result.mapping.category),
            escape(result.mapping.relative_path.as_posix()),
            f"[muted]{escape(result.message or '')}[/muted]",
        )

    return table


def create_import_results_table(results: list[ImportResult], dry_run: bool = False) -> Table:
    """Create a Rich table of per-file import outcomes.

    Args:
        results: Import results to display.
        dry_run: Whether this is a dry-run (changes table title).

    Returns:
        Rich Table configured for import result display.
    """
    title = "Import Results (Dry Run)" if dry_run else "Import Results"
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Status", width=10)
    table.add_column("File", no_wrap=True)
    table.add_column("Stored As")
    table.add_column("Details")

    for result in results:
        style = _IMPORT_STYLES[result.status]
        stored = ""
        if result.mapping is not None:
            stored = f"{result.mapping.category}/{result.mapping.relative_path.as_posix()}"
        table.add_row(
            f"[{style}]{result.status.value}[/{style}]",
            escape(str(result.source)),
            escape(stored),
            f"[muted]{escape(result.error or '')}[/muted]",
        )

    return table


def print_link_summary(results: list[LinkResult]) -> None:
    """Print counts of linked, skipped and failed mappings.

    Args:
        results: Link results of the run.
    """
    linked = sum(1 for r in results if r.linked)
    changed = sum(1 for r in results if r.mutated)
    skipped = sum(1 for r in results if r.status == LinkStatus.SKIPPED)
    failed = sum(1 for r in results if r.status == LinkStatus.FAILED)

    if skipped == 0 and failed == 0:
        print_success(f"All {linked} dotfile(s) linked ({changed} changed).")
        return

    console.print(
        f"\n[success]{linked} linked[/success], "
        f"[warning]{skipped} skipped[/warning], [error]{failed} failed[/error]"
    )


def print_import_summary(results: list[ImportResult]) -> None:
    """Print counts of imported, skipped and failed files.

    Args:
        results: Import results of the run.
    """
    imported = sum(1 for r in results if r.success)
    skipped = sum(1 for r in results if r.status == ImportStatus.SKIPPED)
    failed = sum(1 for r in results if r.status == ImportStatus.FAILED)

    if skipped == 0 and failed == 0:
        print_success(f"All {imported} file(s) imported.")
        return

    console.print(
        f"\n[success]{imported} imported[/success], "
        f"[warning]{skipped} skipped[/warning], [error]{failed} failed[/error]"
    )
