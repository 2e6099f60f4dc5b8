"""
Outcomes of a rejected transaction.

Two disjoint families, both raised from ``handle_transaction``:

    HandledTransactionError
    |
    +-- IgnoredTransactionError      expected, balance was not modified
    +-- InvalidClientBalanceError    balance invariant broken, a logic defect

Callers catch by type and read the structured ``transaction_id`` and
``reason`` attributes instead of parsing messages.
"""

from enum import Enum

from .models import TransactionID


class IgnoredTransactionReason(Enum):
    LOCKED_ACCOUNT = "locked_account"
    NEGATIVE_AMOUNT = "negative_amount"
    # A zero deposit or withdrawal would not change anything, so it is rejected.
    ZERO_AMOUNT = "zero_amount"
    DUPLICATE_TRANSACTION_ID_INSERTION = "duplicate_transaction_id_insertion"
    INSUFFICIENT_AVAILABLE_FUNDS = "insufficient_available_funds"
    MISSING_TRANSACTION_ID = "missing_transaction_id"
    NO_TRANSACTION_STATE_CHANGE = "no_transaction_state_change"
    INVALID_TRANSACTION_STATE_TRANSITION = "invalid_transaction_state_transition"


class InvalidClientBalance(Enum):
    INVALID_AVAILABLE_AMOUNT = "invalid_available_amount"
    INVALID_HELD_AMOUNT = "invalid_held_amount"
    INVALID_TOTAL_AMOUNT = "invalid_total_amount"


class HandledTransactionError(Exception):
    """Base class for every rejected or inconsistent transaction."""

    def __init__(self, transaction_id: TransactionID, reason: Enum):
        self.transaction_id = transaction_id
        self.reason = reason
        super().__init__(f"tx {transaction_id}: {reason.value}")


class IgnoredTransactionError(HandledTransactionError):
    """The transaction was dropped and the account balance is unchanged."""

    reason: IgnoredTransactionReason


class InvalidClientBalanceError(HandledTransactionError):
    """The transaction left the account with total != available + held."""

    reason: InvalidClientBalance
