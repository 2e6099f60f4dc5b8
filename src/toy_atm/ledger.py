from dataclasses import dataclass
from enum import Enum

from .models import Amount


class StateTransition(Enum):
    NO_OPERATION = "no_operation"
    INVALID = "invalid"
    VALID = "valid"


class TransactionState(Enum):
    # Every deposit and withdrawal starts out resolved.
    RESOLVED = "resolved"
    DISPUTED = "disputed"
    CHARGEBACK = "chargeback"

    def transition_to(self, target: "TransactionState") -> StateTransition:
        """
        Classify moving from this state to target.

        A chargeback is final. A resolved entry has to be disputed before
        it can be charged back.
        """
        if self is TransactionState.CHARGEBACK:
            return StateTransition.INVALID
        if self is target:
            return StateTransition.NO_OPERATION
        if self is TransactionState.RESOLVED and target is TransactionState.CHARGEBACK:
            return StateTransition.INVALID
        return StateTransition.VALID


class EntryKind(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"


@dataclass
class LedgerEntry:
    """Dispute lifecycle of one accepted deposit or withdrawal."""

    kind: EntryKind
    amount: Amount
    state: TransactionState = TransactionState.RESOLVED

    @classmethod
    def deposit(cls, amount: Amount) -> "LedgerEntry":
        return cls(EntryKind.DEPOSIT, amount)

    @classmethod
    def withdrawal(cls, amount: Amount) -> "LedgerEntry":
        return cls(EntryKind.WITHDRAWAL, amount)

    @property
    def reversal_amount(self) -> Amount:
        """Amount moved out of available funds when this entry is disputed."""
        if self.kind is EntryKind.WITHDRAWAL:
            return self.amount.reversed()
        return self.amount
