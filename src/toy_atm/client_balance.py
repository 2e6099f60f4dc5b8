from dataclasses import dataclass, field
from typing import Dict

from .errors import (
    IgnoredTransactionError,
    IgnoredTransactionReason,
    InvalidClientBalance,
    InvalidClientBalanceError,
)
from .ledger import EntryKind, LedgerEntry, StateTransition, TransactionState
from .models import (
    Amount,
    Chargeback,
    ClientBalanceSnapshot,
    ClientID,
    Deposit,
    Dispute,
    Resolve,
    Transaction,
    TransactionID,
    Withdrawal,
)


@dataclass
class ClientBalance:
    """
    Balance state machine for a single client.
    Owns the ledger entries of every deposit and withdrawal it accepted.
    """

    client_id: ClientID
    available: Amount = Amount(0)
    held: Amount = Amount(0)
    total: Amount = Amount(0)
    locked: bool = False
    entries: Dict[TransactionID, LedgerEntry] = field(default_factory=dict, repr=False)

    def snapshot(self) -> ClientBalanceSnapshot:
        return ClientBalanceSnapshot(
            client_id=self.client_id,
            available=self.available,
            held=self.held,
            total=self.total,
            locked=self.locked,
        )

    def handle_transaction(self, transaction: Transaction) -> None:
        """
        Validate and apply a single transaction.

        Raises:
            IgnoredTransactionError: transaction rejected, balance unchanged
            InvalidClientBalanceError: balance no longer satisfies total == available + held
        """
        transaction_id = transaction.transaction_id

        if self.locked:
            raise IgnoredTransactionError(transaction_id, IgnoredTransactionReason.LOCKED_ACCOUNT)

        match transaction.transaction_type:
            case Deposit(amount=amount):
                self._insert_entry(transaction_id, EntryKind.DEPOSIT, amount)
            case Withdrawal(amount=amount):
                self._insert_entry(transaction_id, EntryKind.WITHDRAWAL, amount)
            case Dispute():
                self._transition_entry(transaction_id, TransactionState.DISPUTED)
            case Resolve():
                self._transition_entry(transaction_id, TransactionState.RESOLVED)
            case Chargeback():
                self._transition_entry(transaction_id, TransactionState.CHARGEBACK)
            case _:
                raise TypeError(f"Unsupported transaction type {transaction.transaction_type!r}")

        invalid = self._check_balance()
        if invalid is not None:
            raise InvalidClientBalanceError(transaction_id, invalid)

    def _check_balance(self):
        if self.available != self.total - self.held:
            return InvalidClientBalance.INVALID_AVAILABLE_AMOUNT
        if self.held != self.total - self.available:
            return InvalidClientBalance.INVALID_HELD_AMOUNT
        if self.total != self.available + self.held:
            return InvalidClientBalance.INVALID_TOTAL_AMOUNT
        return None

    def _insert_entry(self, transaction_id: TransactionID, kind: EntryKind, amount: Amount) -> None:
        reason = None
        if amount.is_negative():
            reason = IgnoredTransactionReason.NEGATIVE_AMOUNT
        elif amount.is_zero():
            reason = IgnoredTransactionReason.ZERO_AMOUNT
        elif transaction_id in self.entries:
            reason = IgnoredTransactionReason.DUPLICATE_TRANSACTION_ID_INSERTION
        elif kind is EntryKind.WITHDRAWAL and self.available < amount:
            reason = IgnoredTransactionReason.INSUFFICIENT_AVAILABLE_FUNDS
        if reason is not None:
            raise IgnoredTransactionError(transaction_id, reason)

        # New balances are computed before anything is stored.
        if kind is EntryKind.WITHDRAWAL:
            entry = LedgerEntry.withdrawal(amount)
            available, total = self.available - amount, self.total - amount
        else:
            entry = LedgerEntry.deposit(amount)
            available, total = self.available + amount, self.total + amount

        self.entries[transaction_id] = entry
        self.available, self.total = available, total

    def _transition_entry(self, transaction_id: TransactionID, target: TransactionState) -> None:
        entry = self.entries.get(transaction_id)
        if entry is None:
            raise IgnoredTransactionError(transaction_id, IgnoredTransactionReason.MISSING_TRANSACTION_ID)

        match entry.state.transition_to(target):
            case StateTransition.NO_OPERATION:
                raise IgnoredTransactionError(transaction_id, IgnoredTransactionReason.NO_TRANSACTION_STATE_CHANGE)
            case StateTransition.INVALID:
                raise IgnoredTransactionError(
                    transaction_id, IgnoredTransactionReason.INVALID_TRANSACTION_STATE_TRANSITION
                )

        # Disputing a withdrawal moves a negative amount into held.
        amount = entry.reversal_amount
        available, held, total, locked = self.available, self.held, self.total, self.locked
        match target:
            case TransactionState.DISPUTED:
                available, held = available - amount, held + amount
            case TransactionState.RESOLVED:
                available, held = available + amount, held - amount
            case TransactionState.CHARGEBACK:
                locked = True
                total, held = total - amount, held - amount

        entry.state = target
        self.available, self.held, self.total, self.locked = available, held, total, locked
