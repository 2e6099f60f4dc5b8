from collections import Counter
from dataclasses import dataclass, field
from decimal import Context, Decimal, InvalidOperation, ROUND_HALF_UP
from typing import ClassVar, Union

# Wide enough that sums of parsed amounts never round or overflow.
_CONTEXT = Context(prec=100, rounding=ROUND_HALF_UP)


@dataclass(frozen=True, order=True)
class Amount:
    """
    Signed monetary value with a fixed precision of 4 decimal places.
    Any finer input is rounded to nearest, ties away from zero.
    """

    PRECISION: ClassVar[Decimal] = Decimal("0.0001")
    # Largest magnitude accepted from external input, see payments_engine.
    MAX_INPUT: ClassVar[Decimal] = Decimal("1e28")

    value: Decimal = Decimal(0)

    def __post_init__(self):
        object.__setattr__(self, "value", self._round(self.value))

    @classmethod
    def _round(cls, raw) -> Decimal:
        if isinstance(raw, Amount):
            return raw.value
        if isinstance(raw, float):
            raw = repr(raw)
        try:
            value = Decimal(raw)
            if value.is_finite():
                return value.quantize(cls.PRECISION, context=_CONTEXT)
        except (InvalidOperation, TypeError) as e:
            raise ValueError(f"Invalid amount {raw!r}") from e
        raise ValueError(f"Invalid amount {raw!r}")

    def is_negative(self) -> bool:
        return self.value < 0

    def is_zero(self) -> bool:
        return self.value == 0

    def reversed(self) -> "Amount":
        return Amount(_CONTEXT.minus(self.value))

    def __neg__(self) -> "Amount":
        return self.reversed()

    def __add__(self, other: "Amount") -> "Amount":
        if not isinstance(other, Amount):
            return NotImplemented
        return Amount(_CONTEXT.add(self.value, other.value))

    def __sub__(self, other: "Amount") -> "Amount":
        if not isinstance(other, Amount):
            return NotImplemented
        return Amount(_CONTEXT.subtract(self.value, other.value))

    def __str__(self) -> str:
        """Format with up to 4 decimal places, removing trailing zeros."""
        if self.is_zero():
            return "0"
        return f"{self.value.normalize(_CONTEXT):f}"


@dataclass(frozen=True, order=True)
class ClientID:
    MAX: ClassVar[int] = 2**16 - 1

    value: int

    def __post_init__(self):
        _check_identifier(self.value, self.MAX, "client")

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True, order=True)
class TransactionID:
    """Globally unique across the input stream."""

    MAX: ClassVar[int] = 2**32 - 1

    value: int

    def __post_init__(self):
        _check_identifier(self.value, self.MAX, "transaction")

    def next(self) -> "TransactionID":
        return TransactionID(self.value + 1)

    def __str__(self) -> str:
        return str(self.value)


def _check_identifier(value, maximum: int, name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Invalid {name} id {value!r}")
    if not 0 <= value <= maximum:
        raise ValueError(f"{name.capitalize()} id {value} out of range 0..{maximum}")


@dataclass(frozen=True)
class Deposit:
    amount: Amount


@dataclass(frozen=True)
class Withdrawal:
    amount: Amount


@dataclass(frozen=True)
class Dispute:
    pass


@dataclass(frozen=True)
class Resolve:
    pass


@dataclass(frozen=True)
class Chargeback:
    pass


TransactionType = Union[Deposit, Withdrawal, Dispute, Resolve, Chargeback]


@dataclass(frozen=True)
class Transaction:
    client_id: ClientID
    transaction_id: TransactionID
    transaction_type: TransactionType

    def __repr__(self) -> str:
        kind = type(self.transaction_type).__name__.lower()
        amount = getattr(self.transaction_type, "amount", None)
        return f"Transaction({kind}, client={self.client_id}, tx={self.transaction_id}, amount={amount})"


@dataclass(frozen=True)
class ClientBalanceSnapshot:
    client_id: ClientID
    available: Amount
    held: Amount
    total: Amount
    locked: bool


@dataclass
class ProcessingStats:
    """Counters for one batch run."""

    processed: int = 0
    ignored: int = 0
    invalid: int = 0
    malformed: int = 0
    ignored_reasons: Counter = field(default_factory=Counter)

    def record_success(self) -> None:
        self.processed += 1

    def record_ignored(self, reason) -> None:
        self.ignored += 1
        self.ignored_reasons[reason] += 1

    def record_invalid(self) -> None:
        self.invalid += 1

    def record_malformed(self) -> None:
        self.malformed += 1
