"""
Follow the verification feed from the command line.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from backend.config import get_settings
from backend.dependencies import get_session, get_store_client
from backend.feed import SnapshotFeed
from backend.verifications import filter_records, summarize

logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Watch verification records")
    parser.add_argument(
        "-q",
        "--query",
        type=str,
        default=None,
        help="Only show records whose name or order id contains this text",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Print the current snapshot and exit",
    )
    parser.add_argument(
        "--timeout-seconds",
        type=float,
        default=30.0,
        help="How long to wait for a snapshot before logging a heartbeat",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=get_settings().log_level.upper(),
        format="%(name)s %(levelname)s %(asctime)s %(message)s",
        datefmt="%m/%d/%Y %I:%M:%S %p",
    )

    session = get_session()
    if session.bootstrap() is None:
        logger.error("Could not establish a session identity")
        return 1

    with SnapshotFeed(get_store_client(), session) as feed:
        try:
            while True:
                records = feed.get(timeout=args.timeout_seconds)
                if records is None:
                    if feed.error:
                        logger.error("Feed failed: %s", feed.error)
                        return 1
                    logger.info("No changes")
                    continue
                summary = summarize(records)
                logger.info(
                    "%d responses, %d confirmed, %d need changes, %d pending sync",
                    summary.total,
                    summary.confirmed,
                    summary.needs_change,
                    summary.pending_sync,
                )
                for record in filter_records(records, args.query):
                    synced = "synced" if record.synced_with_carrier else "pending"
                    address = record.updated_address or record.original_address
                    print(
                        f"{record.order_id}\t{record.customer_name}\t"
                        f"{record.status}\t{synced}\t{address}"
                    )
                if args.once:
                    return 0
        except KeyboardInterrupt:
            return 0


if __name__ == "__main__":
    raise SystemExit(main())
