"""Pure functions for turning net balances into settlement transfers.

The optimizer is a greedy heuristic: the largest debtor pays the largest
creditor until one of them is settled, then moves on. It does not search
for the true minimum number of transfers, but it never emits more than
``creditors + debtors - 1`` of them.

All monetary amounts are in minor units (Money type).
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

import structlog

from splitledger.domain.balances import BalanceSheet
from splitledger.domain.models import EPSILON, Money, ParticipantId
from splitledger.domain.money import sum_money

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class SettlementTransfer:
    """Immutable recommended payment from a debtor to a creditor."""

    from_participant: ParticipantId
    to_participant: ParticipantId
    amount: Money


@dataclass(frozen=True)
class SettlementPlan:
    """Immutable settlement result with diagnostics."""

    transfers: list[SettlementTransfer]
    discarded: Money  # residual left on either side, treated as settled
    warning: str | None = None


@dataclass(frozen=True)
class ParticipantSummary:
    """Immutable per-participant view: net balance and who to pay."""

    participant: ParticipantId
    net: Money
    pays: list[SettlementTransfer]


@dataclass
class _Position:
    participant: ParticipantId
    remaining: Money


def _sorted_positions(positions: list[_Position]) -> list[_Position]:
    # Largest first; id breaks ties so the output is deterministic
    return sorted(positions, key=lambda p: (-p.remaining, p.participant))


def optimize_settlement(net_balances: Mapping[ParticipantId, Money]) -> list[SettlementTransfer]:
    """Greedy largest-creditor / largest-debtor matching.

    Args:
        net_balances: Net balance per participant (paid - owed).

    Returns:
        Ordered transfers. Applying them zeroes every balance, except for
        a residual that remains when the balances do not sum to zero.
    """
    creditors = _sorted_positions([_Position(pid, net) for pid, net in net_balances.items() if net > 0])
    debtors = _sorted_positions([_Position(pid, Money(-net)) for pid, net in net_balances.items() if net < 0])

    transfers: list[SettlementTransfer] = []
    i = j = 0

    while i < len(creditors) and j < len(debtors):
        creditor = creditors[i]
        debtor = debtors[j]
        amount = Money(min(creditor.remaining, debtor.remaining))

        if amount > 0:
            transfers.append(SettlementTransfer(debtor.participant, creditor.participant, amount))
            log.debug("settlement_step", payer=debtor.participant, payee=creditor.participant, amount=amount)

        creditor.remaining = Money(creditor.remaining - amount)
        debtor.remaining = Money(debtor.remaining - amount)

        if creditor.remaining == 0:
            i += 1
        if debtor.remaining == 0:
            j += 1

    log.debug("settlement_computed", transfers=len(transfers), creditors=len(creditors), debtors=len(debtors))
    return transfers


def apply_transfers(
    net_balances: Mapping[ParticipantId, Money],
    transfers: Sequence[SettlementTransfer],
) -> dict[ParticipantId, Money]:
    """Balances after every transfer has been paid.

    Args:
        net_balances: Net balance per participant before settling.
        transfers: Transfers to apply, in order.

    Returns:
        New mapping of participant to remaining net balance.
    """
    remaining = dict(net_balances)
    for transfer in transfers:
        remaining[transfer.from_participant] = Money(remaining.get(transfer.from_participant, 0) + transfer.amount)
        remaining[transfer.to_participant] = Money(remaining.get(transfer.to_participant, 0) - transfer.amount)
    return remaining


def plan_settlement(sheet: BalanceSheet) -> SettlementPlan:
    """Settle a balance sheet and check that the result is exact.

    The net balances of a sheet are expected to add up to the residues
    that equal splitting could not charge to anyone. A larger gap means
    the records were not reconciled, and the plan carries a warning.

    Args:
        sheet: Output of compute_balances.

    Returns:
        SettlementPlan with the transfers, the residual that was left
        unsettled, and a warning if the settlement may be inexact.
    """
    net_balances = sheet.net_balances()
    transfers = optimize_settlement(net_balances)
    remaining = apply_transfers(net_balances, transfers)
    discarded = sum_money(abs(amount) for amount in remaining.values())

    warning = None
    gap = Money(sheet.total_net - sheet.total_residue)
    if abs(gap) > EPSILON:
        warning = f"Net balances are off by {gap} minor units; settlement may be inexact"
        log.warning("settlement_inexact", gap=gap, residue=sheet.total_residue)

    return SettlementPlan(transfers=transfers, discarded=discarded, warning=warning)


def participant_summaries(
    sheet: BalanceSheet,
    transfers: Sequence[SettlementTransfer],
) -> list[ParticipantSummary]:
    """Per-participant net balance with the transfers they have to make.

    Args:
        sheet: Output of compute_balances.
        transfers: Output of optimize_settlement for the same sheet.

    Returns:
        Summaries sorted by net balance (largest creditor first), then id.
    """
    summaries = [
        ParticipantSummary(
            participant=pid,
            net=balance.net,
            pays=[t for t in transfers if t.from_participant == pid],
        )
        for pid, balance in sheet.balances.items()
    ]
    return sorted(summaries, key=lambda s: (-s.net, s.participant))
