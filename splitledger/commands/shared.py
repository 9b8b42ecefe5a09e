"""Helpers shared by the command modules."""

import datetime
import sys
import tomllib
from pathlib import Path

from rich.console import Console

from splitledger.config import get_setting, load_config_or_default
from splitledger.dates import month_range, year_range
from splitledger.domain.errors import LedgerError
from splitledger.domain.models import Money
from splitledger.domain.money import format_money
from splitledger.store import Ledger, load_ledger

console = Console()


def open_ledger(ledger_path: Path) -> Ledger:
    """Load the ledger file, exiting with a message on failure."""
    try:
        return load_ledger(ledger_path)
    except FileNotFoundError:
        console.print(f"[red]Ledger not found: {ledger_path}[/red]", style="bold")
        console.print("[dim]Run 'splitledger init' to create one[/dim]")
        sys.exit(1)
    except LedgerError as e:
        console.print(f"[red]Invalid ledger: {e}[/red]", style="bold")
        sys.exit(1)
    except OSError as e:
        console.print(f"[red]Could not read ledger: {e}[/red]", style="bold")
        sys.exit(1)


def currency_symbol() -> str:
    """Currency symbol from config, empty when unset or unreadable."""
    try:
        config = load_config_or_default()
    except (OSError, tomllib.TOMLDecodeError):
        return ""
    return str(get_setting(config, "display.currency_symbol", ""))


def money_display(amount: Money, ledger: Ledger, symbol: str, include_sign: bool = False) -> str:
    return format_money(amount, ledger.precision, symbol, include_sign)


def signed_money_display(amount: Money, ledger: Ledger, symbol: str) -> str:
    """Money with sign, green when positive and red when negative."""
    text = money_display(amount, ledger, symbol, include_sign=True)
    if amount > 0:
        return f"[green]{text}[/green]"
    if amount < 0:
        return f"[red]{text}[/red]"
    return f"[dim]{text}[/dim]"


def compute_period(
    all: bool, month: str | None, year: str | None
) -> tuple[datetime.date | None, datetime.date | None, str]:
    """Compute date range and period display for a command.

    Args:
        all: Whether to use all time.
        month: Optional specific month (YYYY-MM format).
        year: Optional specific year (YYYY format).

    Returns:
        Tuple of (since, until, period_display). Without any option the
        period is all time.
    """
    if all or (not month and not year):
        return None, None, "All Time"

    if month:
        return month_range(month)

    return year_range(year or "")
