"""Status and fix commands for checking contributions against totals."""

import sys
from dataclasses import replace
from pathlib import Path

from rich.table import Table

from splitledger.commands.shared import compute_period, console, currency_symbol, money_display, open_ledger
from splitledger.domain.balances import select_records
from splitledger.domain.errors import LedgerError
from splitledger.domain.ledger import contribution_sum
from splitledger.domain.models import CategoryId
from splitledger.domain.reconcile import (
    ContributionStatus,
    contribution_status,
    find_contribution_issues,
    reconcile_records,
)
from splitledger.store import save_ledger

STATUS_DISPLAY = {
    ContributionStatus.BALANCED: "[green]✓ balanced[/green]",
    ContributionStatus.INSUFFICIENT: "[yellow]insufficient[/yellow]",
    ContributionStatus.EXCESS: "[red]excess[/red]",
    ContributionStatus.NO_CONTRIBUTIONS: "[dim]no payers[/dim]",
}


def status_command(
    ledger_path: Path,
    category: str | None = None,
    all: bool = False,
    month: str | None = None,
    year: str | None = None,
) -> None:
    """Show contribution status for expenses."""
    ledger = open_ledger(ledger_path)
    symbol = currency_symbol()

    try:
        since, until, period = compute_period(all, month, year)
        category_id = CategoryId(category) if category else None
        if category_id is not None:
            ledger.category(category_id)
    except (ValueError, LedgerError) as e:
        console.print(f"[red]{e}[/red]", style="bold")
        sys.exit(1)

    records = [r for r in select_records(ledger.records, category_id, since, until) if r.is_expense]
    if not records:
        console.print(f"[yellow]No expenses found ({period})[/yellow]")
        return

    table = Table(title=f"Expenses - {period} ({len(records)})")
    table.add_column("Date", style="cyan")
    table.add_column("Id", style="dim")
    table.add_column("Note", style="white")
    table.add_column("Category", style="magenta")
    table.add_column("Total", justify="right")
    table.add_column("Contributed", justify="right")
    table.add_column("Payers")
    table.add_column("Status", justify="center")

    for record in sorted(records, key=lambda r: (r.date, r.id)):
        payers = ", ".join(ledger.registry.display_name(p) for p in record.payers) or "[dim]-[/dim]"
        category_name = ledger.categories[record.category_id].name if record.category_id else "[dim]-[/dim]"
        table.add_row(
            record.date.isoformat(),
            record.id,
            record.note or "",
            category_name,
            money_display(record.total, ledger, symbol),
            money_display(contribution_sum(record), ledger, symbol),
            payers,
            STATUS_DISPLAY[contribution_status(record)],
        )

    console.print(table)

    summary = find_contribution_issues(records)
    if summary.count:
        console.print(
            f"\n[yellow]{summary.count} expense(s) need attention, "
            f"unassigned amount: {money_display(summary.missing_amount, ledger, symbol)}[/yellow]"
        )
        console.print("[dim]Run 'splitledger fix' to balance them[/dim]")
    else:
        console.print("\n[green]All contributions balance[/green]")


def fix_command(ledger_path: Path, dry_run: bool = False) -> None:
    """Reconcile every expense and save the ledger."""
    ledger = open_ledger(ledger_path)

    report = reconcile_records(ledger.records, registry=ledger.registry)

    for warning in report.warnings:
        console.print(f"[yellow]⚠ {warning.record_id}: {warning.message}[/yellow]")

    if not report.fixed:
        console.print("[green]Nothing to fix[/green]")
        return

    for record_id in report.fixed:
        console.print(f"[green]✓[/green] Balanced {record_id}")

    if dry_run:
        console.print(f"\n[dim]Dry run: {len(report.fixed)} expense(s) would be updated[/dim]")
        return

    try:
        save_ledger(replace(ledger, records=report.records), ledger_path)
    except OSError as e:
        console.print(f"[red]Could not save ledger: {e}[/red]", style="bold")
        sys.exit(1)

    console.print(f"\n[green]Fixed {len(report.fixed)} expense(s)[/green]", style="bold")
