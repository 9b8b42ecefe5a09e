"""CLI entry point for splitledger."""

import tomllib
from pathlib import Path

import typer

from splitledger.commands.admin import init_command
from splitledger.commands.reconcile import fix_command, status_command
from splitledger.commands.settle import balances_command, settle_command
from splitledger.config import DEFAULT_LOG_LEVEL, get_ledger_path, get_setting, load_config_or_default
from splitledger.logs import configure_logging

app = typer.Typer(
    name="splitledger",
    help="Split shared expenses and work out who owes whom",
    add_completion=False,
)


@app.callback()
def main(
    ctx: typer.Context,
    ledger: Path = typer.Option(None, "--ledger", "-l", help="Ledger file (default: from config)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Split shared expenses and work out who owes whom."""
    try:
        config = load_config_or_default()
    except tomllib.TOMLDecodeError as e:
        raise typer.BadParameter(f"Config file is not valid TOML: {e}") from e

    level = "DEBUG" if verbose else str(get_setting(config, "logging.level", DEFAULT_LOG_LEVEL))
    try:
        configure_logging(level, json=bool(get_setting(config, "logging.json", False)))
    except ValueError as e:
        raise typer.BadParameter(f"Invalid logging.level in config: {e}") from e

    ctx.obj = {"ledger_path": ledger.expanduser() if ledger else get_ledger_path(config)}


@app.command(name="init")
def init(
    ctx: typer.Context,
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite existing config and ledger"),
) -> None:
    """Initialize splitledger config and a sample ledger."""
    init_command(force, ctx.obj["ledger_path"])


@app.command()
def status(
    ctx: typer.Context,
    category: str = typer.Option(None, "--category", "-c", help="Only this category"),
    all: bool = typer.Option(False, "--all", "-a", help="Show all time"),
    month: str = typer.Option(None, "--month", help="Specific month (YYYY-MM)"),
    year: str = typer.Option(None, "--year", help="Specific year (YYYY)"),
) -> None:
    """Check that each expense's contributions add up to its total."""
    status_command(ctx.obj["ledger_path"], category, all, month, year)


@app.command()
def fix(
    ctx: typer.Context,
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would change without saving"),
) -> None:
    """Balance contributions that don't match their expense total."""
    fix_command(ctx.obj["ledger_path"], dry_run)


@app.command()
def balances(
    ctx: typer.Context,
    category: str = typer.Option(..., "--category", "-c", help="Category to settle"),
    all: bool = typer.Option(False, "--all", "-a", help="Use all time (default)"),
    month: str = typer.Option(None, "--month", help="Specific month (YYYY-MM)"),
    year: str = typer.Option(None, "--year", help="Specific year (YYYY)"),
) -> None:
    """Show what each participant paid and owes."""
    balances_command(ctx.obj["ledger_path"], category, all, month, year)


@app.command()
def settle(
    ctx: typer.Context,
    category: str = typer.Option(..., "--category", "-c", help="Category to settle"),
    all: bool = typer.Option(False, "--all", "-a", help="Use all time (default)"),
    month: str = typer.Option(None, "--month", help="Specific month (YYYY-MM)"),
    year: str = typer.Option(None, "--year", help="Specific year (YYYY)"),
) -> None:
    """Show the transfers that settle everyone's debts."""
    settle_command(ctx.obj["ledger_path"], category, all, month, year)


if __name__ == "__main__":
    app()
