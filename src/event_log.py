import threading
from datetime import datetime

from events import EventSink, ProcessEvent, StartOfLog


class FileEventLog(EventSink):
    """
    Appends each recorded event to a log file with a local timestamp.
    The file is created if missing and never truncated.
    """

    def __init__(self, path: str):
        self._path = path
        self._file = open(path, "a", encoding="utf-8")
        self._lock = threading.Lock()
        self._last_event: ProcessEvent = StartOfLog()

    def record(self, event: ProcessEvent) -> None:
        timestamp = datetime.now().astimezone().isoformat(sep=" ")
        with self._lock:
            self._file.write(f"EVENT LOG {timestamp}:\n{event.message}\n\n")
            self._file.flush()
            self._last_event = event

    def last_entry(self) -> ProcessEvent:
        """Return the last recorded event, or StartOfLog if nothing was recorded."""
        return self._last_event

    def close(self) -> None:
        self._file.close()

    def __enter__(self) -> "FileEventLog":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
