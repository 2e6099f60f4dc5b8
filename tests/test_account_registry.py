import sys
import os
import types

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from toy_atm.account_registry import AccountRegistry
from toy_atm.errors import IgnoredTransactionError, IgnoredTransactionReason
from toy_atm.models import Amount, ClientID, Deposit, Dispute, Transaction, TransactionID, Withdrawal


def deposit(client_id: int, transaction_id: int, amount: str) -> Transaction:
    return Transaction(ClientID(client_id), TransactionID(transaction_id), Deposit(Amount(amount)))


class TestAccountRegistry:
    def setup_method(self):
        self.registry = AccountRegistry()

    def snapshots(self):
        return {snapshot.client_id: snapshot for snapshot in self.registry.accounts()}

    def test_empty_registry(self):
        assert len(self.registry) == 0
        assert list(self.registry.accounts()) == []

    def test_routes_by_client(self):
        self.registry.handle_transaction(deposit(1, 1, "1.0"))
        self.registry.handle_transaction(deposit(2, 2, "2.0"))
        self.registry.handle_transaction(deposit(1, 3, "2.0"))

        snapshots = self.snapshots()
        assert len(self.registry) == 2
        assert snapshots[ClientID(1)].available == Amount("3")
        assert snapshots[ClientID(2)].available == Amount("2")

    def test_client_created_even_when_first_transaction_ignored(self):
        with pytest.raises(IgnoredTransactionError) as exc_info:
            self.registry.handle_transaction(
                Transaction(ClientID(7), TransactionID(1), Withdrawal(Amount("5")))
            )
        assert exc_info.value.reason == IgnoredTransactionReason.INSUFFICIENT_AVAILABLE_FUNDS
        assert ClientID(7) in self.registry
        assert self.snapshots()[ClientID(7)].total == Amount("0")

    def test_client_cannot_dispute_another_clients_transaction(self):
        self.registry.handle_transaction(deposit(1, 1, "100"))
        with pytest.raises(IgnoredTransactionError) as exc_info:
            self.registry.handle_transaction(Transaction(ClientID(2), TransactionID(1), Dispute()))
        assert exc_info.value.reason == IgnoredTransactionReason.MISSING_TRANSACTION_ID
        assert self.snapshots()[ClientID(1)].held == Amount("0")

    def test_accounts_is_lazy_single_pass(self):
        self.registry.handle_transaction(deposit(1, 1, "1"))
        accounts = self.registry.accounts()
        assert isinstance(accounts, types.GeneratorType)
        assert len(list(accounts)) == 1
        assert list(accounts) == []

    def test_registries_are_independent(self):
        other = AccountRegistry()
        self.registry.handle_transaction(deposit(1, 1, "1"))
        other.handle_transaction(deposit(1, 1, "5"))

        assert self.snapshots()[ClientID(1)].total == Amount("1")
        assert next(other.accounts()).total == Amount("5")
