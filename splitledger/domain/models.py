"""Domain type definitions for splitledger.

These NewTypes provide semantic clarity and help with type checking:
- Money: Amount in minor units (cents, pence)
- ParticipantId: Opaque id of a person sharing expenses
- CategoryId: Opaque id of an expense category
- RecordId: Opaque id of an expense record

The frozen dataclasses below are the values every other domain module
works on. Operations never mutate them; they return new instances.
"""

import datetime
from dataclasses import dataclass, field
from enum import Enum
from typing import NewType

from splitledger.domain.errors import DuplicatePayerError, InvalidAmountError, NegativeAmountError

# Money amounts are stored as minor units to avoid floating point errors
Money = NewType("Money", int)

ParticipantId = NewType("ParticipantId", str)

CategoryId = NewType("CategoryId", str)

RecordId = NewType("RecordId", str)

# One minor unit: the tolerance used by every money comparison
EPSILON = Money(1)

DEFAULT_CURRENCY = "HKD"


class TransactionType(str, Enum):
    """Direction of a record. Only expenses take part in settlement."""

    EXPENSE = "expense"
    INCOME = "income"


@dataclass(frozen=True)
class Contribution:
    """Immutable record of who actually paid what."""

    payer: ParticipantId
    amount: Money


@dataclass(frozen=True)
class ExpenseRecord:
    """Immutable shared expense with its participants and contributions.

    ``participants`` is an ordered, duplicate-free tuple standing for the
    participant set; the order only matters for picking a fallback payer.
    """

    id: RecordId
    total: Money
    date: datetime.date
    category_id: CategoryId | None = None
    type: TransactionType = TransactionType.EXPENSE
    participants: tuple[ParticipantId, ...] = ()
    contributions: tuple[Contribution, ...] = ()
    note: str | None = None
    currency: str = DEFAULT_CURRENCY

    def __post_init__(self) -> None:
        if self.total <= 0:
            raise InvalidAmountError(f"Record {self.id}: total must be positive, got {self.total}")

        if len(set(self.participants)) != len(self.participants):
            # Normalise to set semantics while keeping first-seen order
            object.__setattr__(self, "participants", tuple(dict.fromkeys(self.participants)))

        seen: set[ParticipantId] = set()
        for contribution in self.contributions:
            if contribution.amount < 0:
                raise NegativeAmountError(
                    f"Record {self.id}: contribution by {contribution.payer} is negative ({contribution.amount})"
                )
            if contribution.payer in seen:
                raise DuplicatePayerError(f"Record {self.id}: {contribution.payer} already has a contribution")
            seen.add(contribution.payer)

    @property
    def is_expense(self) -> bool:
        return self.type == TransactionType.EXPENSE

    @property
    def payers(self) -> tuple[ParticipantId, ...]:
        return tuple(c.payer for c in self.contributions)


@dataclass(frozen=True)
class Participant:
    """Display metadata for a participant. Never used in computation."""

    id: ParticipantId
    name: str
    color: str | None = None
    order: int = 0
    is_default: bool = False


@dataclass(frozen=True)
class Category:
    """Expense category with its fallback participant set."""

    id: CategoryId
    name: str
    default_participants: tuple[ParticipantId, ...] = field(default_factory=tuple)


class WarningKind(str, Enum):
    """Per-record problems reported alongside a batch result."""

    NO_PARTICIPANTS = "no_participants"
    UNRECONCILABLE = "unreconcilable"


@dataclass(frozen=True)
class RecordWarning:
    """A record that was skipped by a batch computation, and why."""

    record_id: RecordId
    kind: WarningKind
    message: str
