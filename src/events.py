from dataclasses import dataclass
from typing import List


class ProcessEvent:
    """Base for every outcome the ledger or its host can report."""

    @property
    def message(self) -> str:
        raise NotImplementedError


@dataclass(frozen=True)
class StartOfLog(ProcessEvent):
    @property
    def message(self) -> str:
        return "Event logger created."


@dataclass(frozen=True)
class ProcessComplete(ProcessEvent):
    @property
    def message(self) -> str:
        return "Processing completed."


@dataclass(frozen=True)
class ExternalError(ProcessEvent):
    """Environmental failure, e.g. the input source could not be opened."""

    reason: str

    @property
    def message(self) -> str:
        return self.reason


@dataclass(frozen=True)
class TxNotFound(ProcessEvent):
    tx_id: int

    @property
    def message(self) -> str:
        return f"ProcessError: Transaction with id '{self.tx_id}' is not found"


@dataclass(frozen=True)
class UnrecognisedTx(ProcessEvent):
    row_index: int
    tx_type: str

    @property
    def message(self) -> str:
        return f"ProcessError: In csv, line {self.row_index}: '{self.tx_type}' is not a recognised transaction type."


@dataclass(frozen=True)
class InsufficientFunds(ProcessEvent):
    client_id: int
    tx_id: int

    @property
    def message(self) -> str:
        return (
            f"ProcessError: Client with id '{self.client_id}' has insufficient funds "
            f"for transaction with id '{self.tx_id}'"
        )


@dataclass(frozen=True)
class TxNotDisputed(ProcessEvent):
    tx_id: int

    @property
    def message(self) -> str:
        return f"ProcessError: The referenced transaction with id '{self.tx_id}' isn't under dispute."


@dataclass(frozen=True)
class UnauthorisedTx(ProcessEvent):
    client_id: int
    tx_id: int

    @property
    def message(self) -> str:
        return (
            f"ProcessError: Client with id '{self.client_id}' cannot reference transaction "
            f"with id '{self.tx_id}' because they do not own the transaction."
        )


@dataclass(frozen=True)
class AmountNegative(ProcessEvent):
    tx_id: int

    @property
    def message(self) -> str:
        return f"ProcessError: Transaction with id '{self.tx_id}' has a negative amount"


@dataclass(frozen=True)
class TxIdExists(ProcessEvent):
    tx_id: int

    @property
    def message(self) -> str:
        return f"ProcessError: Transaction with id '{self.tx_id}' already exists"


class EventSink:
    """Receives one event per rejected row."""

    def record(self, event: ProcessEvent) -> None:
        raise NotImplementedError


class NullEventSink(EventSink):
    def record(self, event: ProcessEvent) -> None:
        pass


class MemoryEventSink(EventSink):
    """Keeps recorded events in order. Not thread-safe; use one per ledger."""

    def __init__(self):
        self.events: List[ProcessEvent] = []

    def record(self, event: ProcessEvent) -> None:
        self.events.append(event)

    def last_entry(self) -> ProcessEvent:
        if not self.events:
            return StartOfLog()
        return self.events[-1]
