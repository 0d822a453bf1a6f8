import logging
from dataclasses import replace
from decimal import Decimal
from typing import Dict, Iterable, Optional, Tuple

from events import (
    AmountNegative,
    EventSink,
    InsufficientFunds,
    NullEventSink,
    ProcessComplete,
    ProcessEvent,
    TxIdExists,
    TxNotDisputed,
    TxNotFound,
    UnauthorisedTx,
    UnrecognisedTx,
)
from models import AccountSnapshot, ClientAccount, TransactionRecord, TransactionRow, TransactionType, to_money

logger = logging.getLogger(__name__)


class Ledger:
    """
    Folds transaction rows into client accounts and transaction history.
    Rows are applied strictly in the order given. Accepted rows are silent;
    each rejected row records exactly one event to the sink and leaves
    state untouched.
    Not thread-safe: one ledger serves one input stream.
    """

    def __init__(self, event_sink: Optional[EventSink] = None):
        self._sink = event_sink if event_sink is not None else NullEventSink()
        self._accounts: Dict[int, ClientAccount] = {}
        self._history: Dict[int, TransactionRecord] = {}
        self._rows_applied = 0

    def process(self, rows: Iterable[Tuple[int, TransactionRow]]) -> ProcessEvent:
        """Apply (row_index, row) pairs, as produced by csv_input.read_rows, in order."""
        for row_index, row in rows:
            self.apply(row, row_index)
        return ProcessComplete()

    def apply(self, row: TransactionRow, row_index: Optional[int] = None) -> None:
        if row_index is None:
            row_index = self._rows_applied
        self._rows_applied += 1

        try:
            transaction_type = TransactionType(row.tx_type)
        except ValueError:
            self._reject(UnrecognisedTx(row_index, row.tx_type))
            return

        match transaction_type:
            case TransactionType.DEPOSIT:
                self._handle_deposit(row)
            case TransactionType.WITHDRAWAL:
                self._handle_withdrawal(row)
            case TransactionType.DISPUTE:
                self._handle_dispute(row)
            case TransactionType.RESOLVE:
                self._handle_resolve(row)
            case TransactionType.CHARGEBACK:
                self._handle_chargeback(row)

    def accounts(self) -> Dict[int, AccountSnapshot]:
        """Snapshot of every account touched so far."""
        return {client_id: account.snapshot() for client_id, account in self._accounts.items()}

    def transaction(self, tx_id: int) -> Optional[TransactionRecord]:
        """Copy of the stored deposit/withdrawal record, if any."""
        record = self._history.get(tx_id)
        if record is None:
            return None
        return replace(record)

    def _reject(self, event: ProcessEvent) -> None:
        logger.info(f"Rejected: {event.message}")
        self._sink.record(event)

    def _get_or_create_account(self, client_id: int) -> ClientAccount:
        if client_id not in self._accounts:
            self._accounts[client_id] = ClientAccount(client_id=client_id)
        return self._accounts[client_id]

    def _checked_amount(self, row: TransactionRow) -> Optional[Decimal]:
        """
        Shared deposit/withdrawal checks: negative amount first, then duplicate id.
        Returns the rounded amount, or None if the row was rejected.
        """
        if row.amount is None:
            raise ValueError(f"{row.tx_type} tx {row.tx_id} has no amount")

        amount = to_money(row.amount)
        if amount < 0:
            self._reject(AmountNegative(row.tx_id))
            return None

        if row.tx_id in self._history:
            self._reject(TxIdExists(row.tx_id))
            return None

        return amount

    def _handle_deposit(self, row: TransactionRow) -> None:
        amount = self._checked_amount(row)
        if amount is None:
            return

        account = self._get_or_create_account(row.client_id)
        account.deposit(amount)
        self._history[row.tx_id] = TransactionRecord(row.tx_id, row.client_id, amount)

    def _handle_withdrawal(self, row: TransactionRow) -> None:
        amount = self._checked_amount(row)
        if amount is None:
            return

        # The account exists from here on, even if the funds check fails.
        account = self._get_or_create_account(row.client_id)
        if amount > account.available:
            self._reject(InsufficientFunds(row.client_id, row.tx_id))
            return

        account.withdraw(amount)
        self._history[row.tx_id] = TransactionRecord(row.tx_id, row.client_id, amount)

    def _find_owned(self, row: TransactionRow) -> Tuple[Optional[TransactionRecord], bool]:
        """Look up the referenced record. Returns (record, owned_by_row_client)."""
        record = self._history.get(row.tx_id)
        if record is None:
            return None, False
        return record, record.client_id == row.client_id

    def _handle_dispute(self, row: TransactionRow) -> None:
        record, owned = self._find_owned(row)

        # A record owned by someone else is reported as missing.
        if record is None or not owned:
            self._reject(TxNotFound(row.tx_id))
            return

        # Already-disputed records are not guarded: the amount is held again.
        account = self._get_or_create_account(row.client_id)
        record.disputed = True
        account.withhold(record.amount)

    def _handle_resolve(self, row: TransactionRow) -> None:
        record, owned = self._find_owned(row)

        if record is None or not owned:
            self._reject(TxNotFound(row.tx_id))
            return

        if not record.disputed:
            self._reject(TxNotDisputed(row.tx_id))
            return

        account = self._get_or_create_account(row.client_id)
        account.release_held(record.amount)
        record.disputed = False

    def _handle_chargeback(self, row: TransactionRow) -> None:
        record, owned = self._find_owned(row)

        if record is None:
            self._reject(TxNotFound(row.tx_id))
            return

        if not owned:
            self._reject(UnauthorisedTx(row.client_id, row.tx_id))
            return

        if not record.disputed:
            self._reject(TxNotDisputed(row.tx_id))
            return

        account = self._get_or_create_account(row.client_id)
        account.charge(record.amount)
        account.lock()
        record.disputed = False
