"""Balances and settle commands for working out who owes whom."""

import sys
from pathlib import Path

from rich.table import Table

from splitledger.commands.shared import (
    compute_period,
    console,
    currency_symbol,
    money_display,
    open_ledger,
    signed_money_display,
)
from splitledger.domain.balances import BalanceSheet, collect_category_participants, compute_balances, select_records
from splitledger.domain.errors import LedgerError
from splitledger.domain.models import CategoryId, ParticipantId
from splitledger.domain.money import sum_money
from splitledger.domain.reconcile import find_contribution_issues
from splitledger.domain.settlement import participant_summaries, plan_settlement
from splitledger.store import Ledger


def build_balance_sheet(
    ledger: Ledger,
    category: str,
    all: bool = False,
    month: str | None = None,
    year: str | None = None,
) -> tuple[BalanceSheet, str]:
    """Select a category's records for a period and compute balances.

    Returns:
        Tuple of (sheet, title). Exits with a message on bad input.
    """
    try:
        since, until, period = compute_period(all, month, year)
        category_obj = ledger.category(CategoryId(category))
    except (ValueError, LedgerError) as e:
        console.print(f"[red]{e}[/red]", style="bold")
        sys.exit(1)

    # Fallback for records without participants: the category's declared
    # set, else everyone ever assigned to the category
    defaults: tuple[ParticipantId, ...] = category_obj.default_participants or collect_category_participants(
        ledger.category_records(category_obj.id)
    )

    records = select_records(ledger.records, category_obj.id, since, until)
    issues = find_contribution_issues(records)
    if issues.count:
        console.print(
            f"[yellow]⚠ {issues.count} expense(s) have contributions that don't match their total. "
            "Run 'splitledger status' to review.[/yellow]\n"
        )

    sheet = compute_balances(records, default_participants=defaults, registry=ledger.registry)
    return sheet, f"{category_obj.name} - {period}"


def render_balance_sheet(sheet: BalanceSheet, ledger: Ledger, symbol: str, title: str) -> None:
    """Print the paid/owed/net table and any per-record warnings."""
    table = Table(title=f"{title} ({sheet.record_count} expenses)")
    table.add_column("Participant", style="cyan")
    table.add_column("Paid", justify="right")
    table.add_column("Owed", justify="right")
    table.add_column("Net", justify="right")

    for balance in sorted(sheet.balances.values(), key=lambda b: (-b.net, b.participant)):
        table.add_row(
            ledger.registry.display_name(balance.participant),
            money_display(balance.paid, ledger, symbol),
            money_display(balance.owed, ledger, symbol),
            signed_money_display(balance.net, ledger, symbol),
        )

    console.print(table)

    if sheet.residues:
        console.print(
            f"[dim]Rounding residue not charged to anyone: "
            f"{money_display(sheet.total_residue, ledger, symbol)} "
            f"across {len(sheet.residues)} expense(s)[/dim]"
        )

    for warning in sheet.warnings:
        console.print(f"[yellow]⚠ Skipped {warning.record_id}: {warning.message}[/yellow]")


def balances_command(
    ledger_path: Path,
    category: str,
    all: bool = False,
    month: str | None = None,
    year: str | None = None,
) -> None:
    """Show what each participant paid and owes in a category."""
    ledger = open_ledger(ledger_path)
    symbol = currency_symbol()

    sheet, title = build_balance_sheet(ledger, category, all, month, year)
    if not sheet.balances:
        console.print(f"[yellow]No expenses to settle in {title}[/yellow]")
        return

    render_balance_sheet(sheet, ledger, symbol, title)


def settle_command(
    ledger_path: Path,
    category: str,
    all: bool = False,
    month: str | None = None,
    year: str | None = None,
) -> None:
    """Show the transfers that settle all debts in a category."""
    ledger = open_ledger(ledger_path)
    symbol = currency_symbol()

    sheet, title = build_balance_sheet(ledger, category, all, month, year)
    if not sheet.balances:
        console.print(f"[yellow]No expenses to settle in {title}[/yellow]")
        return

    render_balance_sheet(sheet, ledger, symbol, title)

    plan = plan_settlement(sheet)
    if plan.warning:
        console.print(f"[red]⚠ {plan.warning}[/red]")

    if not plan.transfers:
        console.print("\n[green]Everyone is settled up[/green]", style="bold")
        return

    console.print(f"\n[bold cyan]Only {len(plan.transfers)} transfer(s) needed to clear all debts:[/bold cyan]\n")
    for index, transfer in enumerate(plan.transfers, 1):
        console.print(
            f"  {index}. {ledger.registry.display_name(transfer.from_participant)} → "
            f"{ledger.registry.display_name(transfer.to_participant)}  "
            f"[bold]{money_display(transfer.amount, ledger, symbol)}[/bold]"
        )

    console.print()
    for summary in participant_summaries(sheet, plan.transfers):
        name = ledger.registry.display_name(summary.participant)
        if summary.pays:
            targets = ", ".join(
                f"{ledger.registry.display_name(t.to_participant)} {money_display(t.amount, ledger, symbol)}"
                for t in summary.pays
            )
            console.print(f"  [cyan]{name}[/cyan] pays {targets}")
        elif summary.net > 0:
            received = sum_money(t.amount for t in plan.transfers if t.to_participant == summary.participant)
            console.print(f"  [cyan]{name}[/cyan] receives {money_display(received, ledger, symbol)}")
        else:
            console.print(f"  [cyan]{name}[/cyan] [dim]is settled[/dim]")
