import sys
import logging

from engine import PaymentsEngine
from event_log import FileEventLog
from events import ExternalError
from report import write_accounts


def run(argv) -> int:
    if len(argv) not in (2, 3):
        print("Usage: python main.py <transactions.csv> [event-log-file]", file=sys.stderr)
        return 1

    event_log = None
    if len(argv) == 3:
        try:
            event_log = FileEventLog(argv[2])
        except OSError as e:
            print(f"App failed: {e}", file=sys.stderr)
            return 1

    try:
        engine = PaymentsEngine(event_log)
        outcome = engine.process_file(argv[1])
    finally:
        if event_log is not None:
            event_log.close()

    if isinstance(outcome, ExternalError):
        print(f"App failed: {outcome.message}", file=sys.stderr)
        return 1

    write_accounts(engine.accounts(), sys.stdout)
    return 0


def main():
    logging.basicConfig(
        level=logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )
    sys.exit(run(sys.argv))


if __name__ == "__main__":
    main()
