"""Pure functions for per-participant balance calculations.

This module contains the functional core for balances:
- No I/O operations (no files, no console)
- No side effects on the input records
- Pure data transformations

Every participant of an expense owes the same share of it, rounded down
to the minor unit. What the rounding leaves over is reported per record
as a residue and is not charged to anyone.

All monetary amounts are in minor units (Money type).
"""

import datetime
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

import structlog

from splitledger.domain.errors import NoParticipantsError
from splitledger.domain.models import (
    CategoryId,
    ExpenseRecord,
    Money,
    ParticipantId,
    RecordId,
    RecordWarning,
    WarningKind,
)
from splitledger.domain.money import divide_money, sum_money
from splitledger.domain.registry import ParticipantRegistry

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ParticipantBalance:
    """Immutable paid/owed totals for one participant."""

    participant: ParticipantId
    paid: Money
    owed: Money

    @property
    def net(self) -> Money:
        """Positive: is owed money. Negative: owes money."""
        return Money(self.paid - self.owed)


@dataclass(frozen=True)
class BalanceSheet:
    """Immutable result of a balance calculation."""

    balances: dict[ParticipantId, ParticipantBalance]
    residues: dict[RecordId, Money]
    warnings: list[RecordWarning]
    record_count: int

    @property
    def total_net(self) -> Money:
        return sum_money(b.net for b in self.balances.values())

    @property
    def total_residue(self) -> Money:
        return sum_money(self.residues.values())

    def net_balances(self) -> dict[ParticipantId, Money]:
        return {pid: balance.net for pid, balance in self.balances.items()}


def select_records(
    records: Iterable[ExpenseRecord],
    category_id: CategoryId | None = None,
    since: datetime.date | None = None,
    until: datetime.date | None = None,
) -> list[ExpenseRecord]:
    """Filter records by category and a half-open date window.

    Args:
        records: Records to filter.
        category_id: Keep only this category. None keeps all.
        since: First date included. None means unbounded.
        until: First date excluded. None means unbounded.

    Returns:
        Matching records in input order.
    """
    selected: list[ExpenseRecord] = []
    for record in records:
        if category_id is not None and record.category_id != category_id:
            continue
        if since is not None and record.date < since:
            continue
        if until is not None and record.date >= until:
            continue
        selected.append(record)
    return selected


def collect_category_participants(records: Iterable[ExpenseRecord]) -> tuple[ParticipantId, ...]:
    """Everyone ever assigned to the records, as participant or payer.

    Args:
        records: Records of one category.

    Returns:
        Ordered, duplicate-free participant ids in first-seen order.
    """
    seen: dict[ParticipantId, None] = {}
    for record in records:
        for participant in record.participants:
            seen.setdefault(participant, None)
        for payer in record.payers:
            seen.setdefault(payer, None)
    return tuple(seen)


def resolve_participants(
    record: ExpenseRecord,
    default_participants: Sequence[ParticipantId] = (),
) -> tuple[ParticipantId, ...]:
    """Participants sharing a record, with the category fallback.

    Raises:
        NoParticipantsError: If the record and the fallback are both empty.
    """
    if record.participants:
        return record.participants
    if default_participants:
        return tuple(dict.fromkeys(default_participants))
    raise NoParticipantsError(f"Record {record.id} has no participants and the category has no default set")


def compute_balances(
    records: Iterable[ExpenseRecord],
    default_participants: Sequence[ParticipantId] = (),
    registry: ParticipantRegistry | None = None,
) -> BalanceSheet:
    """Compute what each participant paid and owes over a set of records.

    Args:
        records: Records already filtered to a category and date range.
            Income records are skipped.
        default_participants: Fallback participant set for records that
            declare none.
        registry: Optional registry, only used for readable diagnostics.

    Returns:
        BalanceSheet with per-participant totals, per-record residues and
        a warning for every record that had to be skipped.
    """
    paid: dict[ParticipantId, Money] = {}
    owed: dict[ParticipantId, Money] = {}
    residues: dict[RecordId, Money] = {}
    warnings: list[RecordWarning] = []
    counted = 0

    def name(pid: ParticipantId) -> str:
        return registry.display_name(pid) if registry else str(pid)

    for record in records:
        if not record.is_expense:
            continue

        try:
            participants = resolve_participants(record, default_participants)
        except NoParticipantsError as e:
            log.warning("record_skipped", record_id=record.id, reason=str(e))
            warnings.append(RecordWarning(record.id, WarningKind.NO_PARTICIPANTS, str(e)))
            continue

        share, residue = divide_money(record.total, len(participants))
        if residue:
            residues[record.id] = residue

        for participant in participants:
            owed[participant] = Money(owed.get(participant, 0) + share)
            paid.setdefault(participant, Money(0))

        for contribution in record.contributions:
            paid[contribution.payer] = Money(paid.get(contribution.payer, 0) + contribution.amount)
            owed.setdefault(contribution.payer, Money(0))

        counted += 1
        log.debug(
            "record_shared",
            record_id=record.id,
            total=record.total,
            participants=[name(p) for p in participants],
            share=share,
            residue=residue,
        )

    balances = {pid: ParticipantBalance(pid, paid[pid], owed[pid]) for pid in paid}

    for balance in balances.values():
        log.debug("participant_balance", participant=name(balance.participant), paid=balance.paid, owed=balance.owed)

    return BalanceSheet(balances=balances, residues=residues, warnings=warnings, record_count=counted)
