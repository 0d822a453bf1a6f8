import sys
import os
import io
from decimal import Decimal

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from csv_input import parse_csv_row, read_rows
from models import TransactionRow


def rows_from(text):
    return list(read_rows(io.StringIO(text)))


class TestReadRows:
    def test_strips_whitespace_and_indentation(self):
        rows = rows_from('\n'.join([
            "type,       client,     tx,     amount",
            "    deposit,         1,      1,        5.0",
            "    dispute,         1,      1,",
        ]))

        assert rows == [
            (0, TransactionRow("deposit", 1, 1, Decimal("5.0"))),
            (1, TransactionRow("dispute", 1, 1, None)),
        ]

    def test_missing_trailing_amount_column(self):
        rows = rows_from('\n'.join([
            "type,client,tx,amount",
            "resolve,2,7",
        ]))
        assert rows == [(0, TransactionRow("resolve", 2, 7, None))]

    def test_unknown_type_passes_through(self):
        rows = rows_from('\n'.join([
            "type,client,tx,amount",
            "transfer,1,1,1.0",
        ]))
        assert rows == [(0, TransactionRow("transfer", 1, 1, Decimal("1.0")))]

    def test_malformed_row_skipped_without_shifting_indices(self):
        rows = rows_from('\n'.join([
            "type,client,tx,amount",
            "deposit,x,1,1.0",
            "bogus,1,2,",
        ]))
        assert rows == [(1, TransactionRow("bogus", 1, 2, None))]

    def test_empty_input(self):
        assert rows_from("") == []


class TestParseCsvRow:
    def test_deposit_without_amount_rejected(self):
        assert parse_csv_row({"type": "deposit", "client": "1", "tx": "1", "amount": ""}) is None

    def test_withdrawal_without_amount_rejected(self):
        assert parse_csv_row({"type": "withdrawal", "client": "1", "tx": "1", "amount": None}) is None

    def test_invalid_amount_rejected(self):
        assert parse_csv_row({"type": "deposit", "client": "1", "tx": "1", "amount": "abc"}) is None
        assert parse_csv_row({"type": "deposit", "client": "1", "tx": "1", "amount": "NaN"}) is None

    def test_amount_beyond_96_bits_rejected(self):
        assert parse_csv_row({"type": "deposit", "client": "1", "tx": "1", "amount": "79228162514264337593543950336"}) is None
        assert parse_csv_row({"type": "withdrawal", "client": "1", "tx": "1", "amount": "-1e40"}) is None

        row = parse_csv_row({"type": "deposit", "client": "1", "tx": "1", "amount": "79228162514264337593543950335"})
        assert row.amount == Decimal("79228162514264337593543950335")

    def test_client_id_out_of_range(self):
        assert parse_csv_row({"type": "deposit", "client": "65536", "tx": "1", "amount": "1"}) is None
        assert parse_csv_row({"type": "deposit", "client": "-1", "tx": "1", "amount": "1"}) is None

    def test_tx_id_bounds(self):
        row = parse_csv_row({"type": "deposit", "client": "65535", "tx": "4294967295", "amount": "1"})
        assert row == TransactionRow("deposit", 65535, 4294967295, Decimal("1"))
        assert parse_csv_row({"type": "deposit", "client": "1", "tx": "4294967296", "amount": "1"}) is None

    def test_negative_amount_passes_to_ledger(self):
        row = parse_csv_row({"type": "deposit", "client": "1", "tx": "1", "amount": "-2.5"})
        assert row.amount == Decimal("-2.5")

    def test_missing_column_rejected(self):
        assert parse_csv_row({"type": "deposit", "client": "1"}) is None
