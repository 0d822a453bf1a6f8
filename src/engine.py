import io
import logging
import threading
from decimal import localcontext
from queue import Queue, Empty
from typing import Dict, List, Optional, Tuple

from csv_input import read_rows
from events import EventSink, ExternalError, ProcessEvent
from ledger import Ledger
from models import MONEY_CONTEXT, AccountSnapshot, TransactionRecord

logger = logging.getLogger(__name__)


class PaymentsEngine:
    """
    Runs one input file through a private ledger.
    An input that cannot be opened or decoded ends the pass before any row is applied.
    """

    def __init__(self, event_sink: Optional[EventSink] = None):
        self._ledger = Ledger(event_sink)

    def process_file(self, filepath: str) -> ProcessEvent:
        """Process CSV file. Returns ProcessComplete or ExternalError."""
        # Read and decode up front so an unreadable input applies no rows at all.
        try:
            with open(filepath, "r", newline="", encoding="utf-8") as f:
                text = f.read()
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Cannot read {filepath}: {e}")
            return ExternalError(str(e))

        logger.info(f"Starting processing of {filepath}")
        outcome = self._ledger.process(read_rows(io.StringIO(text, newline="")))
        logger.info(f"Processing of {filepath} complete")
        return outcome

    def accounts(self) -> Dict[int, AccountSnapshot]:
        return self._ledger.accounts()

    def transaction(self, tx_id: int) -> Optional[TransactionRecord]:
        return self._ledger.transaction(tx_id)


def merge_accounts(target: Dict[int, AccountSnapshot], accounts: Dict[int, AccountSnapshot]) -> None:
    """Fold one ledger's accounts into target: balances add up, locked is sticky."""
    for client_id, account in accounts.items():
        existing = target.get(client_id)
        if existing is None:
            target[client_id] = account
            continue
        with localcontext(MONEY_CONTEXT):
            target[client_id] = AccountSnapshot(
                client_id=client_id,
                available=existing.available + account.available,
                held=existing.held + account.held,
                locked=existing.locked or account.locked,
            )


def process_files(
    filepaths: List[str],
    num_workers: int = 4,
    event_sink: Optional[EventSink] = None,
) -> Tuple[Dict[int, AccountSnapshot], List[ProcessEvent]]:
    """
    Process several files concurrently, one private ledger per file.
    Each finished ledger is merged into the shared account table under a lock.
    Returns the merged accounts and one outcome per file, in input order.
    """
    work: Queue = Queue()
    for index, filepath in enumerate(filepaths):
        work.put((index, filepath))

    merged: Dict[int, AccountSnapshot] = {}
    outcomes: List[Optional[ProcessEvent]] = [None] * len(filepaths)
    merge_lock = threading.Lock()

    def worker() -> None:
        while True:
            try:
                index, filepath = work.get_nowait()
            except Empty:
                return

            engine = PaymentsEngine(event_sink)
            outcome = engine.process_file(filepath)
            accounts = engine.accounts()

            with merge_lock:
                merge_accounts(merged, accounts)
                outcomes[index] = outcome

    threads = []
    for _ in range(max(1, min(num_workers, len(filepaths)))):
        t = threading.Thread(target=worker)
        t.start()
        threads.append(t)

    for t in threads:
        t.join()

    failed = sum(1 for outcome in outcomes if isinstance(outcome, ExternalError))
    if failed:
        logger.warning(f"{failed} of {len(filepaths)} files could not be processed")

    return merged, outcomes
