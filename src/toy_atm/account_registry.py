from typing import Dict, Iterator

from .client_balance import ClientBalance
from .models import ClientBalanceSnapshot, ClientID, Transaction


class AccountRegistry:
    """
    Routes transactions to the balance of the client they belong to.
    Balances are created on first sight of a client and kept for the whole run.
    """

    def __init__(self):
        self._client_balances: Dict[ClientID, ClientBalance] = {}

    def handle_transaction(self, transaction: Transaction) -> None:
        """
        Apply a transaction to its client's balance.
        Errors from ClientBalance.handle_transaction propagate unchanged.
        """
        client_balance = self._get_or_create_account(transaction.client_id)
        client_balance.handle_transaction(transaction)

    def accounts(self) -> Iterator[ClientBalanceSnapshot]:
        """Yield a snapshot per known client, in no particular order."""
        for client_balance in self._client_balances.values():
            yield client_balance.snapshot()

    def _get_or_create_account(self, client_id: ClientID) -> ClientBalance:
        if client_id not in self._client_balances:
            self._client_balances[client_id] = ClientBalance(client_id=client_id)
        return self._client_balances[client_id]

    def __len__(self) -> int:
        return len(self._client_balances)

    def __contains__(self, client_id: ClientID) -> bool:
        return client_id in self._client_balances
