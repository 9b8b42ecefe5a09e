"""Tests for splitledger.domain.reconcile pure functions."""

import datetime

import pytest

from splitledger.domain.errors import NoEligiblePayerError, UnreconcilableError
from splitledger.domain.ledger import contribution_sum
from splitledger.domain.models import (
    Contribution,
    ExpenseRecord,
    Money,
    Participant,
    ParticipantId,
    RecordId,
    TransactionType,
    WarningKind,
)
from splitledger.domain.reconcile import (
    ContributionStatus,
    cleanup_invalid_payers,
    contribution_status,
    distribute_remainder,
    find_contribution_issues,
    fix_and_balance,
    reconcile_records,
)
from splitledger.domain.registry import ParticipantRegistry

A = ParticipantId("alice")
B = ParticipantId("bob")
C = ParticipantId("carol")


def make_record(
    total: int,
    contributions: list[tuple[ParticipantId, int]],
    participants: tuple[ParticipantId, ...] = (A, B, C),
    record_id: str = "r1",
    type: TransactionType = TransactionType.EXPENSE,
) -> ExpenseRecord:
    return ExpenseRecord(
        id=RecordId(record_id),
        total=Money(total),
        date=datetime.date(2025, 3, 1),
        type=type,
        participants=participants,
        contributions=tuple(Contribution(p, Money(a)) for p, a in contributions),
    )


def amounts(record: ExpenseRecord) -> list[int]:
    return [c.amount for c in record.contributions]


class TestContributionStatus:
    """Tests for contribution_status."""

    def test_no_contributions(self) -> None:
        """Should report an empty contribution list."""
        assert contribution_status(make_record(5000, [])) == ContributionStatus.NO_CONTRIBUTIONS

    def test_balanced(self) -> None:
        """Should report exact matches as balanced."""
        assert contribution_status(make_record(5000, [(A, 2000), (B, 3000)])) == ContributionStatus.BALANCED

    def test_one_minor_unit_is_tolerated(self) -> None:
        """Should treat a one-cent gap as balanced."""
        assert contribution_status(make_record(5000, [(A, 4999)])) == ContributionStatus.BALANCED
        assert contribution_status(make_record(5000, [(A, 5001)])) == ContributionStatus.BALANCED

    def test_insufficient(self) -> None:
        """Should report sums below the total."""
        assert contribution_status(make_record(5000, [(A, 4500)])) == ContributionStatus.INSUFFICIENT

    def test_excess(self) -> None:
        """Should report sums above the total."""
        assert contribution_status(make_record(5000, [(A, 5500)])) == ContributionStatus.EXCESS


class TestDistributeRemainder:
    """Tests for distribute_remainder."""

    def test_zero_amount_entries_absorb_gap(self) -> None:
        """Should give the missing 5.00 to the two untouched fields."""
        record = make_record(5000, [(A, 4500), (B, 0), (C, 0)])
        result = distribute_remainder(record)

        assert amounts(result) == [4500, 250, 250]

    def test_split_across_all_without_zero_entries(self) -> None:
        """Should split evenly across every contribution."""
        result = distribute_remainder(make_record(4000, [(A, 1000), (B, 2000)]))
        assert amounts(result) == [1500, 2500]

    def test_first_entry_absorbs_residue(self) -> None:
        """Should give the leftover minor unit to the first contribution."""
        result = distribute_remainder(make_record(10000, [(A, 0), (B, 0), (C, 0)]))

        assert amounts(result) == [3334, 3333, 3333]
        assert contribution_sum(result) == Money(10000)

    def test_excess_taken_evenly(self) -> None:
        """Should reduce every contribution by the same amount."""
        result = distribute_remainder(make_record(5000, [(A, 3000), (B, 3000)]))
        assert amounts(result) == [2500, 2500]

    def test_excess_never_goes_negative(self) -> None:
        """Should stop at zero and take the rest from the others."""
        result = distribute_remainder(make_record(5000, [(A, 100), (B, 9000)]))

        assert amounts(result) == [0, 5000]

    def test_excess_residue_taken_from_first(self) -> None:
        """Should take the leftover minor unit from the first contribution."""
        result = distribute_remainder(make_record(1997, [(A, 1000), (B, 1000)]))

        assert amounts(result) == [998, 999]

    def test_excess_ignores_zero_entries(self) -> None:
        """Should leave zero-amount contributions at zero when reducing."""
        result = distribute_remainder(make_record(5000, [(A, 6000), (B, 0)]))
        assert amounts(result) == [5000, 0]

    def test_balanced_record_unchanged(self) -> None:
        """Should return the same record."""
        record = make_record(5000, [(A, 5000)])
        assert distribute_remainder(record) is record

    def test_no_contributions_unchanged(self) -> None:
        """Should leave empty lists for cleanup to handle."""
        record = make_record(5000, [])
        assert distribute_remainder(record) is record

    def test_does_not_mutate_input(self) -> None:
        """Should leave the input record as it was."""
        record = make_record(5000, [(A, 4500), (B, 0)])
        distribute_remainder(record)
        assert amounts(record) == [4500, 0]


class TestCleanupInvalidPayers:
    """Tests for cleanup_invalid_payers."""

    def test_removes_payers_not_allowed(self) -> None:
        """Should drop contributions by non-participants."""
        record = make_record(5000, [(A, 2500), (C, 2500)], participants=(A, B))
        result = cleanup_invalid_payers(record, [A, B])

        assert result.payers == (A,)

    def test_all_valid_returns_same_record(self) -> None:
        """Should not rebuild a clean record."""
        record = make_record(5000, [(A, 5000)])
        assert cleanup_invalid_payers(record, [A, B, C]) is record

    def test_emptied_list_falls_back_to_first_allowed(self) -> None:
        """Should give the full amount to the first allowed payer."""
        record = make_record(9000, [(C, 9000)], participants=(B, A))
        result = cleanup_invalid_payers(record, [B, A])

        assert result.contributions == (Contribution(B, Money(9000)),)

    def test_empty_allowed_uses_default_payer(self) -> None:
        """Should use the caller's default payer."""
        record = make_record(9000, [(C, 9000)])
        result = cleanup_invalid_payers(record, [], default_payer=A)

        assert result.contributions == (Contribution(A, Money(9000)),)

    def test_no_eligible_payer_raises(self) -> None:
        """Should fail when nobody can take over."""
        record = make_record(9000, [(C, 9000)])
        with pytest.raises(NoEligiblePayerError):
            cleanup_invalid_payers(record, [])


class TestFixAndBalance:
    """Tests for fix_and_balance."""

    def test_cleans_then_balances(self) -> None:
        """Should drop outsiders and spread the gap."""
        record = make_record(6000, [(A, 2000), (B, 0), (ParticipantId("dave"), 4000)])
        result = fix_and_balance(record)

        assert result.contributions == (Contribution(A, Money(2000)), Contribution(B, Money(4000)))
        assert contribution_status(result) == ContributionStatus.BALANCED

    def test_idempotent(self) -> None:
        """Should not change an already fixed record."""
        record = make_record(10000, [(A, 0), (B, 1000), (C, 0)])
        once = fix_and_balance(record)
        twice = fix_and_balance(once)

        assert twice == once

    def test_empty_contributions_use_first_participant(self) -> None:
        """Should fall back to a single full-amount payer."""
        result = fix_and_balance(make_record(9000, [], participants=(B, C)))
        assert result.contributions == (Contribution(B, Money(9000)),)

    def test_without_participants_keeps_contributions(self) -> None:
        """Should not strip payers when there is nothing to check against."""
        record = make_record(9000, [(A, 4000), (B, 4000)], participants=())
        result = fix_and_balance(record)

        assert result.payers == (A, B)
        assert contribution_sum(result) == Money(9000)

    def test_unreconcilable_leaves_record_untouched(self) -> None:
        """Should raise without modifying the input."""
        record = make_record(9000, [], participants=())

        with pytest.raises(UnreconcilableError):
            fix_and_balance(record)
        assert record.contributions == ()

    def test_default_payer_rescues_empty_record(self) -> None:
        """Should use the default payer when nobody else is eligible."""
        result = fix_and_balance(make_record(9000, [], participants=()), default_payer=C)
        assert result.contributions == (Contribution(C, Money(9000)),)

    def test_income_unchanged(self) -> None:
        """Should ignore income records."""
        record = make_record(9000, [], type=TransactionType.INCOME)
        assert fix_and_balance(record) is record

    def test_explicit_allowed_payers(self) -> None:
        """Should clean against the given payers instead of participants."""
        record = make_record(9000, [(A, 9000)])
        result = fix_and_balance(record, allowed_payers=[C])

        assert result.contributions == (Contribution(C, Money(9000)),)


class TestFindContributionIssues:
    """Tests for find_contribution_issues."""

    def test_collects_unbalanced_expenses(self) -> None:
        """Should list every unbalanced expense with its difference."""
        records = [
            make_record(5000, [(A, 4500)], record_id="short"),
            make_record(5000, [(A, 5000)], record_id="ok"),
            make_record(3000, [(A, 4000)], record_id="over"),
            make_record(2000, [], record_id="empty"),
            make_record(1000, [], record_id="income", type=TransactionType.INCOME),
        ]
        summary = find_contribution_issues(records)

        assert [i.record_id for i in summary.issues] == ["short", "over", "empty"]
        assert [i.difference for i in summary.issues] == [500, -1000, 2000]
        assert summary.missing_amount == Money(1500)
        assert summary.count == 3

    def test_no_issues(self) -> None:
        """Should return an empty summary."""
        summary = find_contribution_issues([make_record(5000, [(A, 5000)])])

        assert summary.count == 0
        assert summary.missing_amount == Money(0)


class TestReconcileRecords:
    """Tests for reconcile_records."""

    def test_batch_continues_past_unreconcilable_record(self) -> None:
        """Should warn about bad records and fix the rest."""
        records = [
            make_record(5000, [(A, 4500), (B, 0)], record_id="fixable"),
            make_record(5000, [], participants=(), record_id="orphan"),
            make_record(5000, [(A, 5000)], record_id="fine"),
        ]
        report = reconcile_records(records)

        assert report.fixed == [RecordId("fixable")]
        assert [r.id for r in report.records] == ["fixable", "orphan", "fine"]
        assert report.records[1] is records[1]
        assert len(report.warnings) == 1
        assert report.warnings[0].record_id == "orphan"
        assert report.warnings[0].kind == WarningKind.UNRECONCILABLE

    def test_registry_default_payer(self) -> None:
        """Should use the registry's default payer as the fallback."""
        registry = ParticipantRegistry(
            [
                Participant(A, "Alice", order=0),
                Participant(B, "Bob", order=1, is_default=True),
            ]
        )
        report = reconcile_records([make_record(5000, [], participants=())], registry=registry)

        assert report.warnings == []
        assert report.records[0].contributions == (Contribution(B, Money(5000)),)

    def test_default_payer_preferred_for_unpaid_record(self) -> None:
        """Should give an unpaid record to the default payer when they take part."""
        registry = ParticipantRegistry(
            [
                Participant(A, "Alice", order=1, is_default=True),
                Participant(C, "Carol", order=0),
            ]
        )
        report = reconcile_records([make_record(9000, [], participants=(C, A))], registry=registry)

        assert report.records[0].contributions == (Contribution(A, Money(9000)),)

    def test_default_payer_outside_participants_is_ignored(self) -> None:
        """Should fall back to the first participant when the default payer is not one."""
        report = reconcile_records([make_record(9000, [], participants=(C, B))], default_payer=A)
        assert report.records[0].contributions == (Contribution(C, Money(9000)),)

    def test_every_fixed_record_is_balanced(self) -> None:
        """Should leave each reconciled record balanced."""
        records = [
            make_record(10000, [(A, 0), (B, 0), (C, 0)], record_id="a"),
            make_record(7777, [(A, 9000), (C, 1)], record_id="b"),
            make_record(4321, [(B, 1)], record_id="c"),
        ]
        report = reconcile_records(records)

        for record in report.records:
            assert contribution_sum(record) == record.total
