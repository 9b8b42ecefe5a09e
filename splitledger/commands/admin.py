"""Admin commands for initialising config and the ledger file."""

import sys
from pathlib import Path

from splitledger.commands.shared import console
from splitledger.config import create_default_config, get_config_path, get_ledger_path, load_config_or_default
from splitledger.store import write_sample_ledger


def run_full_init(config_path: Path, ledger_path: Path) -> None:
    """Create config and a sample ledger."""
    console.print(f"[cyan]Creating config file at {config_path}...[/cyan]")
    create_default_config(config_path, ledger_path)
    console.print("[green]✓[/green] Config file created (permissions: 600)")

    console.print(f"[cyan]Writing sample ledger to {ledger_path}...[/cyan]")
    write_sample_ledger(ledger_path)
    console.print("[green]✓[/green] Ledger created")

    console.print("\n[green]Initialization complete![/green]", style="bold")
    console.print(f"[dim]Config: {config_path}[/dim]")
    console.print(f"[dim]Ledger: {ledger_path}[/dim]")


def init_command(force: bool = False, ledger_path: Path | None = None) -> None:
    """Initialize splitledger configuration and a sample ledger."""
    config_path = get_config_path()
    if ledger_path is None:
        ledger_path = get_ledger_path(load_config_or_default(config_path))

    config_exists = config_path.exists()
    ledger_exists = ledger_path.exists()

    try:
        # Guard: refuse to overwrite without force flag
        if not force and (config_exists or ledger_exists):
            console.print("[red]Initialization failed:[/red]", style="bold")
            if config_exists:
                console.print(f"  Config already exists: {config_path}")
            if ledger_exists:
                console.print(f"  Ledger already exists: {ledger_path}")
            console.print("\n[yellow]Use 'splitledger init --force' to overwrite[/yellow]")
            sys.exit(1)

        run_full_init(config_path, ledger_path)

    except OSError as e:
        console.print(f"[red]Filesystem error: {e}[/red]", style="bold")
        sys.exit(1)
