import csv
import logging
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterator, Optional, TextIO, Tuple

from models import MAX_AMOUNT, MAX_CLIENT_ID, MAX_TRANSACTION_ID, TransactionRow, TransactionType

logger = logging.getLogger(__name__)

AMOUNT_REQUIRED = {TransactionType.DEPOSIT.value, TransactionType.WITHDRAWAL.value}


def read_rows(stream: TextIO) -> Iterator[Tuple[int, TransactionRow]]:
    """
    Read CSV records and yield (row_index, TransactionRow) pairs.
    row_index counts data records from 0, including ones skipped as malformed.
    """
    reader = csv.DictReader(stream)
    if reader.fieldnames is not None:
        reader.fieldnames = [name.strip() for name in reader.fieldnames]

    for row_index, record in enumerate(reader):
        row = parse_csv_row(record)
        if row is not None:
            yield row_index, row


def parse_csv_row(record: Dict[str, Optional[str]]) -> Optional[TransactionRow]:
    """Parse one CSV record into a TransactionRow, or None if it is malformed."""
    try:
        normalized = {
            key.strip(): value.strip()
            for key, value in record.items()
            if isinstance(key, str) and isinstance(value, str)
        }

        tx_type = normalized["type"]
        client_id = _parse_id(normalized["client"], MAX_CLIENT_ID)
        tx_id = _parse_id(normalized["tx"], MAX_TRANSACTION_ID)

        amount = None
        amount_str = normalized.get("amount", "")
        if amount_str:
            amount = Decimal(amount_str)
            if not amount.is_finite():
                raise ValueError(f"amount must be finite, got {amount_str}")
            if abs(amount) > MAX_AMOUNT:
                raise ValueError(f"amount {amount_str} out of range")
        elif tx_type in AMOUNT_REQUIRED:
            raise ValueError(f"{tx_type} requires an amount")

        return TransactionRow(tx_type=tx_type, client_id=client_id, tx_id=tx_id, amount=amount)
    except (KeyError, ValueError, InvalidOperation) as e:
        logger.warning(f"Failed to parse row {record}: {e}")
        return None


def _parse_id(text: str, upper: int) -> int:
    value = int(text)
    if not 0 <= value <= upper:
        raise ValueError(f"id {value} out of range 0..{upper}")
    return value
