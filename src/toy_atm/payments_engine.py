import csv
import logging
import re
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, Iterator, List, Optional

from .account_registry import AccountRegistry
from .errors import IgnoredTransactionError, InvalidClientBalanceError
from .models import (
    Amount,
    Chargeback,
    ClientBalanceSnapshot,
    ClientID,
    Deposit,
    Dispute,
    ProcessingStats,
    Resolve,
    Transaction,
    TransactionID,
    Withdrawal,
)

logger = logging.getLogger(__name__)

_AMOUNT_TYPES = {"deposit": Deposit, "withdrawal": Withdrawal}
_REFERENCE_TYPES = {"dispute": Dispute, "resolve": Resolve, "chargeback": Chargeback}

# Plain digits only, so separators like "1_000" are rejected.
_INTEGER_PATTERN = re.compile(r"\+?[0-9]+")
_AMOUNT_PATTERN = re.compile(r"[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)([eE][+-]?[0-9]+)?")


class PaymentsEngine:
    """
    Feeds a transaction stream into an AccountRegistry, one transaction at a time.
    Ignored transactions are counted and skipped, the stream is never aborted for them.
    """

    def __init__(self, strict: bool = False):
        self._strict = strict
        self._registry = AccountRegistry()
        self._stats = ProcessingStats()

    @property
    def registry(self) -> AccountRegistry:
        return self._registry

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def process_file(self, filepath: str) -> List[ClientBalanceSnapshot]:
        """Process CSV file and return final account states."""
        logger.info(f"Processing {filepath}")
        with open(filepath, "r", newline="") as f:
            self.process_transactions(self.read_transactions(f))

        logger.info(
            f"Processed: {self._stats.processed}, "
            f"Ignored: {self._stats.ignored}, "
            f"Invalid: {self._stats.invalid}, "
            f"Malformed: {self._stats.malformed}"
        )
        return list(self._registry.accounts())

    def process_transactions(self, transactions: Iterable[Transaction]) -> None:
        """
        Apply transactions in arrival order.

        Raises:
            InvalidClientBalanceError: only in strict mode
        """
        for transaction in transactions:
            try:
                self._registry.handle_transaction(transaction)
            except IgnoredTransactionError as e:
                self._stats.record_ignored(e.reason)
                logger.debug(f"Ignored {transaction}: {e.reason.value}")
            except InvalidClientBalanceError as e:
                self._stats.record_invalid()
                logger.error(f"{transaction} left client {transaction.client_id} inconsistent: {e.reason.value}")
                if self._strict:
                    raise
            else:
                self._stats.record_success()

    def read_transactions(self, lines: Iterable[str]) -> Iterator[Transaction]:
        """Parse CSV lines into transactions, dropping rows that fail to parse."""
        reader = csv.DictReader(lines)
        for row in reader:
            transaction = self._parse_csv_row(row)
            if transaction is None:
                self._stats.record_malformed()
                continue
            yield transaction

    def _parse_csv_row(self, row: Dict[Optional[str], Optional[str]]) -> Optional[Transaction]:
        """Parse CSV row into Transaction."""
        try:
            return parse_transaction(row)
        except (KeyError, ValueError, InvalidOperation) as e:
            logger.warning(f"Failed to parse row {row}: {e}")
            return None


def parse_transaction(row: Dict[Optional[str], Optional[str]]) -> Transaction:
    """
    Build a Transaction from a CSV row with type, client, tx and amount columns.
    Short rows without a trailing amount are accepted.

    Raises:
        KeyError: a required column is missing
        ValueError: unknown type, missing amount, or a value out of range
    """
    # DictReader stores surplus fields under a None key and fills short rows with None
    normalized = {k.strip(): (v or "").strip() for k, v in row.items() if isinstance(k, str)}

    transaction_type_str = normalized["type"].lower()
    client_id = ClientID(_parse_integer(normalized["client"]))
    transaction_id = TransactionID(_parse_integer(normalized["tx"]))
    amount_str = normalized.get("amount", "")

    if transaction_type_str in _AMOUNT_TYPES:
        if not amount_str:
            raise ValueError(f"Missing amount for {transaction_type_str}")
        transaction_type = _AMOUNT_TYPES[transaction_type_str](_parse_amount(amount_str))
    elif transaction_type_str in _REFERENCE_TYPES:
        transaction_type = _REFERENCE_TYPES[transaction_type_str]()
    else:
        raise ValueError(f"Unknown transaction type {transaction_type_str!r}")

    return Transaction(
        client_id=client_id,
        transaction_id=transaction_id,
        transaction_type=transaction_type,
    )


def _parse_integer(text: str) -> int:
    if not _INTEGER_PATTERN.fullmatch(text):
        raise ValueError(f"Invalid integer {text!r}")
    return int(text)


def _parse_amount(text: str) -> Amount:
    if not _AMOUNT_PATTERN.fullmatch(text):
        raise ValueError(f"Invalid amount {text!r}")
    value = Decimal(text)
    if value.copy_abs() >= Amount.MAX_INPUT:
        raise ValueError(f"Amount {text} exceeds {Amount.MAX_INPUT}")
    return Amount(value)
