from dataclasses import dataclass
from decimal import Context, Decimal, ROUND_HALF_EVEN, localcontext
from enum import Enum
from typing import Optional

FOUR_PLACES = Decimal("0.0001")

MAX_CLIENT_ID = 2**16 - 1
MAX_TRANSACTION_ID = 2**32 - 1

# Largest magnitude accepted for a single amount (96-bit integer limit).
MAX_AMOUNT = Decimal(2**96 - 1)

# Wide enough that MAX_AMOUNT-sized balances keep all 4 fractional digits exact.
MONEY_CONTEXT = Context(prec=40, rounding=ROUND_HALF_EVEN)


def to_money(value) -> Decimal:
    """Round a monetary value to 4 fractional digits."""
    with localcontext(MONEY_CONTEXT):
        return Decimal(value).quantize(FOUR_PLACES)


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"


@dataclass(frozen=True)
class TransactionRow:
    """One input record as handed to the ledger. tx_type is the raw type string."""

    tx_type: str
    client_id: int
    tx_id: int
    amount: Optional[Decimal] = None

    def __repr__(self) -> str:
        return f"TransactionRow({self.tx_type}, client={self.client_id}, tx={self.tx_id}, amount={self.amount})"


@dataclass
class TransactionRecord:
    tx_id: int
    client_id: int
    amount: Decimal
    disputed: bool = False

    def __post_init__(self):
        self.amount = to_money(self.amount)


@dataclass
class ClientAccount:
    client_id: int
    available: Decimal = to_money(0)
    held: Decimal = to_money(0)
    locked: bool = False

    @property
    def total(self) -> Decimal:
        with localcontext(MONEY_CONTEXT):
            return self.available + self.held

    def deposit(self, amount: Decimal) -> None:
        with localcontext(MONEY_CONTEXT):
            self.available += to_money(amount)

    def withdraw(self, amount: Decimal) -> None:
        with localcontext(MONEY_CONTEXT):
            self.available -= to_money(amount)

    def withhold(self, amount: Decimal) -> None:
        with localcontext(MONEY_CONTEXT):
            self.available -= to_money(amount)
            self.held += to_money(amount)

    def release_held(self, amount: Decimal) -> None:
        with localcontext(MONEY_CONTEXT):
            self.available += to_money(amount)
            self.held -= to_money(amount)

    def charge(self, amount: Decimal) -> None:
        with localcontext(MONEY_CONTEXT):
            self.held -= to_money(amount)

    def lock(self) -> None:
        self.locked = True

    def snapshot(self) -> "AccountSnapshot":
        return AccountSnapshot(
            client_id=self.client_id,
            available=self.available,
            held=self.held,
            locked=self.locked,
        )


@dataclass(frozen=True)
class AccountSnapshot:
    """Read-only view of an account, taken after a pass."""

    client_id: int
    available: Decimal
    held: Decimal
    locked: bool

    @property
    def total(self) -> Decimal:
        with localcontext(MONEY_CONTEXT):
            return self.available + self.held
