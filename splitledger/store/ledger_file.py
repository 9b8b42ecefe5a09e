"""Ledger file loading and saving.

A ledger file is a TOML document holding participants, categories and
expense records for one group. Amounts are written as decimal strings
("12.50") so they survive the round trip exactly.
"""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tomli_w

from splitledger.dates import parse_date
from splitledger.domain.errors import LedgerError, UnknownCategoryError
from splitledger.domain.models import (
    DEFAULT_CURRENCY,
    Category,
    CategoryId,
    Contribution,
    ExpenseRecord,
    Participant,
    ParticipantId,
    RecordId,
    TransactionType,
)
from splitledger.domain.money import DEFAULT_PRECISION, parse_money, to_decimal
from splitledger.domain.registry import ParticipantRegistry


class LedgerFileError(LedgerError):
    """The ledger file is missing required data or is malformed."""

    pass


@dataclass(frozen=True)
class Ledger:
    """Everything a ledger file holds, resolved to domain values."""

    registry: ParticipantRegistry
    categories: dict[CategoryId, Category] = field(default_factory=dict)
    records: list[ExpenseRecord] = field(default_factory=list)
    currency: str = DEFAULT_CURRENCY
    precision: int = DEFAULT_PRECISION

    def category(self, category_id: CategoryId) -> Category:
        """Return a category by id.

        Raises:
            UnknownCategoryError: If the ledger has no such category.
        """
        try:
            return self.categories[category_id]
        except KeyError:
            raise UnknownCategoryError(f"Unknown category '{category_id}'") from None

    def category_records(self, category_id: CategoryId) -> list[ExpenseRecord]:
        return [r for r in self.records if r.category_id == category_id]


def get_xdg_data_home() -> Path:
    """Get XDG data directory, with fallback to ~/.local/share."""
    xdg_data = os.environ.get("XDG_DATA_HOME")
    if xdg_data:
        return Path(xdg_data)
    return Path.home() / ".local" / "share"


def get_default_ledger_path() -> Path:
    """Get the default ledger file path (XDG compliant)."""
    return get_xdg_data_home() / "splitledger" / "ledger.toml"


def _require_table(raw: Any, what: str) -> dict[str, Any]:
    if not isinstance(raw, dict):
        raise LedgerFileError(f"{what} must be a table, got {raw!r}")
    return raw


def _parse_participant(raw: Any, index: int) -> Participant:
    raw = _require_table(raw, f"Participant #{index + 1}")
    try:
        participant_id = ParticipantId(str(raw["id"]))
    except KeyError:
        raise LedgerFileError(f"Participant #{index + 1} has no id") from None

    try:
        order = int(raw.get("order", index))
    except (TypeError, ValueError) as e:
        raise LedgerFileError(f"Participant '{participant_id}': invalid order: {e}") from e

    return Participant(
        id=participant_id,
        name=str(raw.get("name", participant_id)),
        color=raw.get("color"),
        order=order,
        is_default=bool(raw.get("default", False)),
    )


def _parse_category(raw: Any, registry: ParticipantRegistry) -> Category:
    raw = _require_table(raw, "Category entry")
    try:
        category_id = CategoryId(str(raw["id"]))
    except KeyError:
        raise LedgerFileError("Category entry has no id") from None

    defaults = tuple(ParticipantId(str(p)) for p in raw.get("default_participants", []))
    registry.require(defaults)

    return Category(id=category_id, name=str(raw.get("name", category_id)), default_participants=defaults)


def _parse_record(raw: Any, registry: ParticipantRegistry, precision: int) -> ExpenseRecord:
    raw = _require_table(raw, "Expense entry")
    if "id" not in raw:
        raise LedgerFileError("Expense entry has no id")
    record_id = RecordId(str(raw["id"]))

    try:
        participants = tuple(ParticipantId(str(p)) for p in raw.get("participants", []))
        entries = [_require_table(c, "Contribution") for c in raw.get("contributions", [])]
        contributions = tuple(
            Contribution(
                payer=ParticipantId(str(c["payer"])),
                amount=parse_money(c.get("amount") or "0", precision),
            )
            for c in entries
        )
        registry.require(participants)
        registry.require(c.payer for c in contributions)

        category = raw.get("category")
        return ExpenseRecord(
            id=record_id,
            total=parse_money(raw["total"], precision),
            date=parse_date(raw["date"]),
            category_id=CategoryId(str(category)) if category is not None else None,
            type=TransactionType(raw.get("type", TransactionType.EXPENSE.value)),
            participants=participants,
            contributions=contributions,
            note=raw.get("note"),
            currency=str(raw.get("currency", DEFAULT_CURRENCY)),
        )
    except LedgerError as e:
        raise type(e)(f"Expense '{record_id}': {e}") from e
    except KeyError as e:
        raise LedgerFileError(f"Expense '{record_id}' is missing {e}") from e
    except (TypeError, AttributeError, ValueError) as e:
        raise LedgerFileError(f"Expense '{record_id}': {e}") from e


def parse_ledger(data: dict[str, Any]) -> Ledger:
    """Build a Ledger from a parsed TOML document.

    Args:
        data: Dictionary as returned by tomllib.

    Returns:
        Ledger with every reference resolved.

    Raises:
        LedgerFileError: If an entry is malformed.
        UnknownParticipantError: If an entry refers to an unregistered
            participant.
        UnknownCategoryError: If an expense refers to an undeclared
            category.
    """
    try:
        precision = int(data.get("precision", DEFAULT_PRECISION))
    except (TypeError, ValueError) as e:
        raise LedgerFileError(f"Invalid precision: {e}") from e
    if precision < 0:
        raise LedgerFileError(f"Precision cannot be negative, got {precision}")
    currency = str(data.get("currency", DEFAULT_CURRENCY))

    try:
        registry = ParticipantRegistry(
            _parse_participant(raw, index) for index, raw in enumerate(data.get("participants", []))
        )
    except ValueError as e:
        raise LedgerFileError(str(e)) from e

    categories: dict[CategoryId, Category] = {}
    for raw in data.get("categories", []):
        category = _parse_category(raw, registry)
        categories[category.id] = category

    records: list[ExpenseRecord] = []
    seen: set[RecordId] = set()
    for raw in data.get("expenses", []):
        record = _parse_record(raw, registry, precision)
        if record.id in seen:
            raise LedgerFileError(f"Expense id '{record.id}' is used twice")
        if record.category_id is not None and record.category_id not in categories:
            raise UnknownCategoryError(f"Expense '{record.id}': unknown category '{record.category_id}'")
        seen.add(record.id)
        records.append(record)

    return Ledger(registry=registry, categories=categories, records=records, currency=currency, precision=precision)


def load_ledger(ledger_path: Path) -> Ledger:
    """Load a ledger from a TOML file.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        LedgerFileError: If the file is not valid TOML or is malformed.
    """
    with open(ledger_path, "rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise LedgerFileError(f"{ledger_path}: {e}") from e
    return parse_ledger(data)


def ledger_to_dict(ledger: Ledger) -> dict[str, Any]:
    """Convert a Ledger back to a TOML-serialisable dictionary."""

    def amount(value: int) -> str:
        return str(to_decimal(value, ledger.precision))

    participants: list[dict[str, Any]] = []
    for p in ledger.registry.ordered():
        entry: dict[str, Any] = {"id": p.id, "name": p.name, "order": p.order}
        if p.color:
            entry["color"] = p.color
        if p.is_default:
            entry["default"] = True
        participants.append(entry)

    categories = [
        {"id": c.id, "name": c.name, "default_participants": list(c.default_participants)}
        for c in ledger.categories.values()
    ]

    expenses: list[dict[str, Any]] = []
    for r in ledger.records:
        entry = {
            "id": r.id,
            "total": amount(r.total),
            "type": r.type.value,
            "date": r.date,
            "currency": r.currency,
            "participants": list(r.participants),
            "contributions": [{"payer": c.payer, "amount": amount(c.amount)} for c in r.contributions],
        }
        if r.category_id is not None:
            entry["category"] = r.category_id
        if r.note:
            entry["note"] = r.note
        expenses.append(entry)

    return {
        "currency": ledger.currency,
        "precision": ledger.precision,
        "participants": participants,
        "categories": categories,
        "expenses": expenses,
    }


def save_ledger(ledger: Ledger, ledger_path: Path) -> None:
    """Write a ledger to a TOML file, creating parent directories."""
    ledger_path.parent.mkdir(parents=True, exist_ok=True)
    with open(ledger_path, "wb") as f:
        tomli_w.dump(ledger_to_dict(ledger), f)


SAMPLE_LEDGER: dict[str, Any] = {
    "currency": DEFAULT_CURRENCY,
    "precision": DEFAULT_PRECISION,
    "participants": [
        {"id": "alice", "name": "Alice", "default": True},
        {"id": "bob", "name": "Bob"},
        {"id": "carol", "name": "Carol"},
    ],
    "categories": [
        {"id": "trip", "name": "Trip", "default_participants": ["alice", "bob", "carol"]},
    ],
    "expenses": [
        {
            "id": "dinner",
            "total": "90.00",
            "date": "2025-03-01",
            "category": "trip",
            "note": "Dinner",
            "participants": ["alice", "bob", "carol"],
            "contributions": [{"payer": "alice", "amount": "90.00"}],
        },
        {
            "id": "taxi",
            "total": "50.00",
            "date": "2025-03-02",
            "category": "trip",
            "note": "Taxi",
            "participants": ["alice", "bob"],
            "contributions": [{"payer": "bob", "amount": "45.00"}, {"payer": "alice", "amount": "0"}],
        },
    ],
}


def write_sample_ledger(ledger_path: Path) -> None:
    """Create a small example ledger to start from."""
    ledger_path.parent.mkdir(parents=True, exist_ok=True)
    with open(ledger_path, "wb") as f:
        tomli_w.dump(SAMPLE_LEDGER, f)
