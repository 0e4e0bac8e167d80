"""Send the emails still owed for notifications that have become visible.

Scheduled notifications are skipped at creation time; run this periodically
(for example from cron) to deliver them once their start date has passed.
"""

from __future__ import annotations

import argparse
import logging

from notification_engine.application.use_cases.notifications import deliver_pending_emails
from notification_engine.config import get_settings
from notification_engine.infrastructure.database import SessionLocal, initialize_database


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument(
        "--limit",
        type=int,
        default=100,
        help="Maximum number of notifications processed in this run (default: 100)",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(
        level=get_settings().log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    initialize_database()

    session = SessionLocal()
    try:
        reports = deliver_pending_emails(session, limit=args.limit)
    finally:
        session.close()

    sent = sum(report.sent for report in reports)
    failed = sum(report.failed for report in reports)
    print(f"Processed {len(reports)} notification(s): {sent} email(s) sent, {failed} failed")


if __name__ == "__main__":
    main()
