"""Domain models and types for splitledger.

This package contains the functional core:
- Pure functions with no side effects
- No I/O operations
- Easy to test
- Business logic separated from infrastructure
"""

from splitledger.domain.models import (
    EPSILON,
    Category,
    CategoryId,
    Contribution,
    ExpenseRecord,
    Money,
    Participant,
    ParticipantId,
    RecordId,
    TransactionType,
)

__all__ = [
    "EPSILON",
    "Category",
    "CategoryId",
    "Contribution",
    "ExpenseRecord",
    "Money",
    "Participant",
    "ParticipantId",
    "RecordId",
    "TransactionType",
]
