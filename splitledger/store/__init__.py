"""Ledger store layer - provides persistence for the application.

This module re-exports all public ledger file functions for easy importing.
"""

from splitledger.store.ledger_file import (
    Ledger,
    LedgerFileError,
    get_default_ledger_path,
    ledger_to_dict,
    load_ledger,
    parse_ledger,
    save_ledger,
    write_sample_ledger,
)

__all__ = [
    "Ledger",
    "LedgerFileError",
    "get_default_ledger_path",
    "ledger_to_dict",
    "load_ledger",
    "parse_ledger",
    "save_ledger",
    "write_sample_ledger",
]
