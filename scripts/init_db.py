"""Create the customer, live record and snapshot tables.

Usage:
    python -m scripts.init_db [--retries 7] [--delay 3]
"""

from __future__ import annotations

import argparse
import sys
import time
from typing import Callable, Optional, Sequence

from sqlalchemy.exc import OperationalError

from core.logging import get_logger
from database import Base, engine
import models  # noqa: F401

logger = get_logger(__name__)


def _retry(operation: Callable[[], None], *, retries: int, delay: float) -> None:
    # The database container may still be starting when this runs.
    for attempt in range(1, retries + 1):
        try:
            operation()
            return
        except OperationalError as exc:
            if attempt == retries:
                raise
            logger.warning("Database not reachable (attempt %d/%d), retrying in %.1fs: %s", attempt, retries, delay, exc)
            time.sleep(delay)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Create all tables that do not exist yet.")
    parser.add_argument("--retries", type=int, default=7)
    parser.add_argument("--delay", type=float, default=3.0)
    args = parser.parse_args(argv)

    _retry(lambda: Base.metadata.create_all(bind=engine), retries=max(args.retries, 1), delay=args.delay)
    logger.info("Tables ensured: %s", ", ".join(sorted(Base.metadata.tables)))
    return 0


if __name__ == "__main__":
    sys.exit(main())
