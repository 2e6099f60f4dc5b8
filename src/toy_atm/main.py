import csv
import logging
import sys
from typing import Iterable, TextIO

from .models import ClientBalanceSnapshot
from .payments_engine import PaymentsEngine


def write_accounts(snapshots: Iterable[ClientBalanceSnapshot], out: TextIO) -> None:
    """Write one CSV row per client, ordered by client id."""
    writer = csv.writer(out, lineterminator="\n")
    writer.writerow(["client", "available", "held", "total", "locked"])
    for snapshot in sorted(snapshots, key=lambda s: s.client_id):
        writer.writerow([
            snapshot.client_id,
            snapshot.available,
            snapshot.held,
            snapshot.total,
            str(snapshot.locked).lower(),
        ])


def main():
    logging.basicConfig(
        level=logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    if len(sys.argv) != 2:
        print("Usage: python -m toy_atm <input.csv>", file=sys.stderr)
        sys.exit(1)

    filepath = sys.argv[1]
    engine = PaymentsEngine()
    accounts = engine.process_file(filepath)
    write_accounts(accounts, sys.stdout)
