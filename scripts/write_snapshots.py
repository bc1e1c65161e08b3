"""Run the daily snapshot writer once from the command line.

Usage:
    python -m scripts.write_snapshots            # today in SNAPSHOT_TIMEZONE
    python -m scripts.write_snapshots --date 2024-01-15
"""

from __future__ import annotations

import argparse
import json
import sys
from datetime import date
from typing import Optional, Sequence

from core.logging import get_logger
from database import SessionLocal
from services.errors import SnapshotWriteError
from services.snapshot_writer import write_daily_snapshots

logger = get_logger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Capture one snapshot per live ticket and issue.")
    parser.add_argument(
        "--date",
        type=date.fromisoformat,
        default=None,
        help="Snapshot day as YYYY-MM-DD (defaults to today).",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    with SessionLocal() as db:
        try:
            result = write_daily_snapshots(db, today=args.date)
        except SnapshotWriteError as exc:
            logger.error("Snapshot run failed: %s", exc)
            print(json.dumps(exc.to_detail(), ensure_ascii=False))
            return 1
    print(json.dumps(result.as_dict(), ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
