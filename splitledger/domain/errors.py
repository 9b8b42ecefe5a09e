"""Error types raised by the splitledger functional core."""


class LedgerError(Exception):
    """Base exception for ledger operations."""

    pass


class DuplicatePayerError(LedgerError):
    """A payer already has a contribution on the record."""

    pass


class NegativeAmountError(LedgerError, ValueError):
    """A contribution amount was below zero."""

    pass


class InvalidAmountError(LedgerError, ValueError):
    """An amount could not be represented exactly or is out of range."""

    pass


class NoEligiblePayerError(LedgerError):
    """No payer is available to take over a record's total."""

    pass


class NoParticipantsError(LedgerError):
    """A record has no participants and no fallback set exists."""

    pass


class UnreconcilableError(LedgerError):
    """A record's contributions cannot be made to match its total."""

    pass


class UnknownParticipantError(LedgerError, KeyError):
    """A participant id is not present in the registry."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message
        return str(self.args[0]) if self.args else ""


class UnknownCategoryError(LedgerError, KeyError):
    """A category id is not present in the ledger."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""
