"""Pure functions for editing the contributions of an expense record.

The ledger only guards structure (one contribution per payer, no negative
amounts). It does not check that contributions add up to the total; that
is the reconciler's job.

All operations return a new ExpenseRecord and leave the input untouched.
"""

from collections.abc import Iterable
from dataclasses import replace

from splitledger.domain.errors import DuplicatePayerError, NegativeAmountError
from splitledger.domain.models import Contribution, ExpenseRecord, Money, ParticipantId
from splitledger.domain.money import sum_money


def contribution_sum(record: ExpenseRecord) -> Money:
    """Total of all recorded contributions in minor units."""
    return sum_money(c.amount for c in record.contributions)


def find_contribution(record: ExpenseRecord, payer: ParticipantId) -> Contribution | None:
    for contribution in record.contributions:
        if contribution.payer == payer:
            return contribution
    return None


def set_participants(record: ExpenseRecord, participant_ids: Iterable[ParticipantId]) -> ExpenseRecord:
    """Replace the participant set.

    Contributions by payers that are no longer participants are kept;
    removing them is an explicit reconciler step (cleanup_invalid_payers).
    """
    return replace(record, participants=tuple(dict.fromkeys(participant_ids)))


def add_contribution(record: ExpenseRecord, payer: ParticipantId, amount: Money) -> ExpenseRecord:
    """Append a contribution for a new payer.

    Raises:
        DuplicatePayerError: If the payer already contributed to the record.
        NegativeAmountError: If amount is below zero.
    """
    if amount < 0:
        raise NegativeAmountError(f"Contribution by {payer} cannot be negative ({amount})")
    if find_contribution(record, payer) is not None:
        raise DuplicatePayerError(f"{payer} already has a contribution on record {record.id}")

    return replace(record, contributions=record.contributions + (Contribution(payer, amount),))


def remove_contribution(record: ExpenseRecord, payer: ParticipantId) -> ExpenseRecord:
    """Drop a payer's contribution. No-op if the payer has none."""
    if find_contribution(record, payer) is None:
        return record
    return replace(record, contributions=tuple(c for c in record.contributions if c.payer != payer))


def set_contribution_amount(record: ExpenseRecord, payer: ParticipantId, amount: Money) -> ExpenseRecord:
    """Change a payer's amount in place, or append it if absent.

    Raises:
        NegativeAmountError: If amount is below zero.
    """
    if amount < 0:
        raise NegativeAmountError(f"Contribution by {payer} cannot be negative ({amount})")
    if find_contribution(record, payer) is None:
        return add_contribution(record, payer, amount)

    contributions = tuple(Contribution(c.payer, amount) if c.payer == payer else c for c in record.contributions)
    return replace(record, contributions=contributions)


def set_single_payer(record: ExpenseRecord, payer: ParticipantId) -> ExpenseRecord:
    """One person pays the full amount: replace all contributions."""
    return replace(record, contributions=(Contribution(payer, record.total),))


def set_contributions(
    record: ExpenseRecord,
    contributions: Iterable[tuple[ParticipantId, Money]],
) -> ExpenseRecord:
    """Itemised splitting: replace all contributions, one add at a time."""
    updated = replace(record, contributions=())
    for payer, amount in contributions:
        updated = add_contribution(updated, payer, amount)
    return updated
