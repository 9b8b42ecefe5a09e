"""Pure functions for reconciling contributions with an expense total.

This module contains the functional core for contribution checks:
- No I/O operations
- No side effects (records are returned, never mutated)
- Pure data transformations

All monetary amounts are in minor units (Money type).
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from enum import Enum

import structlog

from splitledger.domain.errors import NoEligiblePayerError, UnreconcilableError
from splitledger.domain.ledger import contribution_sum, set_single_payer
from splitledger.domain.models import (
    EPSILON,
    Contribution,
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


class ContributionStatus(str, Enum):
    """How a record's contributions compare to its total.

    Derived on every read; never stored, because contributions change
    independently of the record.
    """

    NO_CONTRIBUTIONS = "no_contributions"
    BALANCED = "balanced"
    INSUFFICIENT = "insufficient"
    EXCESS = "excess"


@dataclass(frozen=True)
class ContributionIssue:
    """Immutable description of one record that does not balance."""

    record_id: RecordId
    status: ContributionStatus
    total: Money
    contributed: Money
    difference: Money  # total - contributed; positive means money is missing


@dataclass(frozen=True)
class ContributionIssueSummary:
    """Immutable summary of all unbalanced expense records."""

    issues: list[ContributionIssue]
    missing_amount: Money

    @property
    def count(self) -> int:
        return len(self.issues)


@dataclass(frozen=True)
class ReconciliationReport:
    """Result of reconciling a batch of records."""

    records: list[ExpenseRecord]
    fixed: list[RecordId]
    warnings: list[RecordWarning]


def contribution_status(record: ExpenseRecord) -> ContributionStatus:
    """Classify a record's contributions against its total.

    Args:
        record: Expense record to check.

    Returns:
        ContributionStatus, using a tolerance of one minor unit.
    """
    if not record.contributions:
        return ContributionStatus.NO_CONTRIBUTIONS

    contributed = contribution_sum(record)
    if abs(contributed - record.total) <= EPSILON:
        return ContributionStatus.BALANCED
    if contributed < record.total:
        return ContributionStatus.INSUFFICIENT
    return ContributionStatus.EXCESS


def _add_evenly(amounts: list[Money], targets: list[int], remainder: Money) -> None:
    share, residue = divide_money(remainder, len(targets))
    for index in targets:
        amounts[index] = Money(amounts[index] + share)
    amounts[targets[0]] = Money(amounts[targets[0]] + residue)


def _take_evenly(amounts: list[Money], reduction: Money) -> None:
    # Entries that reach zero drop out and the others absorb the rest
    while reduction > 0:
        open_indices = [i for i, amount in enumerate(amounts) if amount > 0]
        share = reduction // len(open_indices)

        if share == 0:
            # Residue comes off the first contributions in list order
            for index in open_indices:
                taken = min(amounts[index], reduction)
                amounts[index] = Money(amounts[index] - taken)
                reduction = Money(reduction - taken)
                if reduction == 0:
                    break
            return

        for index in open_indices:
            taken = min(amounts[index], share)
            amounts[index] = Money(amounts[index] - taken)
            reduction = Money(reduction - taken)


def distribute_remainder(record: ExpenseRecord) -> ExpenseRecord:
    """Spread the gap between contributions and total across contributions.

    A missing amount goes to zero-amount contributions first, since those
    are the fields the user left untouched; without any, it is split across
    all contributions. An excess is taken evenly from contributions that
    still have money, never pushing one below zero. In both cases the
    first contribution in list order absorbs the minor-unit residue.

    Args:
        record: Expense record to balance.

    Returns:
        New record whose contributions sum exactly to the total, or the
        same record when it is already balanced or has no contributions.
    """
    status = contribution_status(record)
    if status not in (ContributionStatus.INSUFFICIENT, ContributionStatus.EXCESS):
        return record

    remainder = Money(record.total - contribution_sum(record))
    amounts = [c.amount for c in record.contributions]

    if remainder > 0:
        targets = [i for i, amount in enumerate(amounts) if amount == 0] or list(range(len(amounts)))
        _add_evenly(amounts, targets, remainder)
    else:
        _take_evenly(amounts, Money(-remainder))

    log.debug("remainder_distributed", record_id=record.id, status=status.value, remainder=remainder)

    contributions = tuple(Contribution(c.payer, amount) for c, amount in zip(record.contributions, amounts))
    return replace(record, contributions=contributions)


def cleanup_invalid_payers(
    record: ExpenseRecord,
    allowed_payers: Sequence[ParticipantId],
    default_payer: ParticipantId | None = None,
) -> ExpenseRecord:
    """Remove contributions by payers that are not allowed.

    If no contribution is left, the first allowed payer (in the given
    order) takes over the full amount; with no allowed payers the default
    payer does.

    Args:
        record: Expense record to clean.
        allowed_payers: Payers that may contribute, in preference order.
        default_payer: Fallback payer when allowed_payers is empty.

    Returns:
        Cleaned record.

    Raises:
        NoEligiblePayerError: If the list ends up empty and there is
            neither an allowed payer nor a default payer.
    """
    allowed = tuple(dict.fromkeys(allowed_payers))
    kept = tuple(c for c in record.contributions if c.payer in allowed)

    if kept:
        if len(kept) == len(record.contributions):
            return record
        removed = [c.payer for c in record.contributions if c.payer not in allowed]
        log.debug("invalid_payers_removed", record_id=record.id, payers=removed)
        return replace(record, contributions=kept)

    fallback = allowed[0] if allowed else default_payer
    if fallback is None:
        raise NoEligiblePayerError(f"Record {record.id} has no eligible payer to take over {record.total}")

    log.debug("single_payer_fallback", record_id=record.id, payer=fallback)
    return set_single_payer(record, fallback)


def fix_and_balance(
    record: ExpenseRecord,
    allowed_payers: Sequence[ParticipantId] | None = None,
    default_payer: ParticipantId | None = None,
) -> ExpenseRecord:
    """Clean up payers, then make contributions add up to the total.

    Idempotent: fixing an already fixed record returns it unchanged.

    Args:
        record: Expense record to fix.
        allowed_payers: Payers that may contribute. Defaults to the
            record's participants; when those are empty, existing
            contributions are kept as they are.
        default_payer: Fallback payer when nobody is allowed. Also takes
            over a record without contributions when it is allowed.

    Returns:
        Balanced record. Income records are returned unchanged.

    Raises:
        UnreconcilableError: If no payer can take over the total. The
            input record is not modified.
    """
    if not record.is_expense:
        return record

    allowed = record.participants if allowed_payers is None else tuple(allowed_payers)

    try:
        if not record.contributions and default_payer is not None and default_payer in allowed:
            # A record nobody has paid yet goes to the default payer first
            cleaned = set_single_payer(record, default_payer)
        elif allowed or not record.contributions:
            cleaned = cleanup_invalid_payers(record, allowed, default_payer)
        else:
            cleaned = record
    except NoEligiblePayerError as e:
        raise UnreconcilableError(str(e)) from e

    balanced = distribute_remainder(cleaned)
    if contribution_status(balanced) != ContributionStatus.BALANCED:
        raise UnreconcilableError(f"Record {record.id} could not be balanced")

    return balanced


def find_contribution_issues(records: Iterable[ExpenseRecord]) -> ContributionIssueSummary:
    """Collect every expense record whose contributions do not balance.

    Args:
        records: Records to scan. Income records are ignored.

    Returns:
        ContributionIssueSummary with one issue per unbalanced record and
        the total missing amount (negative when money was over-assigned).
    """
    issues: list[ContributionIssue] = []

    for record in records:
        if not record.is_expense:
            continue

        status = contribution_status(record)
        if status == ContributionStatus.BALANCED:
            continue

        contributed = contribution_sum(record)
        issues.append(
            ContributionIssue(
                record_id=record.id,
                status=status,
                total=record.total,
                contributed=contributed,
                difference=Money(record.total - contributed),
            )
        )

    return ContributionIssueSummary(
        issues=issues,
        missing_amount=sum_money(issue.difference for issue in issues),
    )


def reconcile_records(
    records: Iterable[ExpenseRecord],
    registry: ParticipantRegistry | None = None,
    default_payer: ParticipantId | None = None,
) -> ReconciliationReport:
    """Run fix_and_balance over a batch of records.

    A record that cannot be reconciled is kept as it was and reported as
    a warning; it never stops the rest of the batch.

    Args:
        records: Records to reconcile.
        registry: Optional registry, used for the default payer when
            default_payer is not given.
        default_payer: Fallback payer for records nobody is allowed to pay.

    Returns:
        ReconciliationReport with the records in input order, the ids of
        records that changed and any warnings.
    """
    if default_payer is None and registry is not None:
        default_payer = registry.default_payer()

    result: list[ExpenseRecord] = []
    fixed: list[RecordId] = []
    warnings: list[RecordWarning] = []

    for record in records:
        try:
            balanced = fix_and_balance(record, default_payer=default_payer)
        except UnreconcilableError as e:
            log.warning("record_unreconcilable", record_id=record.id, reason=str(e))
            warnings.append(RecordWarning(record.id, WarningKind.UNRECONCILABLE, str(e)))
            result.append(record)
            continue

        if balanced != record:
            fixed.append(record.id)
        result.append(balanced)

    return ReconciliationReport(records=result, fixed=fixed, warnings=warnings)
