"""Run one reminder sweep. Schedule it every few minutes (cron, systemd timer, k8s CronJob).

    python -m app.scripts.run_reminder_sweep
    python -m app.scripts.run_reminder_sweep --now 2026-10-20T14:00:00+00:00
"""

import argparse
import logging
import sys
from datetime import datetime
from typing import List, Optional

from app.config import settings
from app.crud.session import SessionStore
from app.database import SessionLocal
from app.services.notification_service import NotificationService
from app.services.reminder_service import ReminderScheduler
from app.utils.clock import FixedClock, SystemClock

logger = logging.getLogger("app.scripts.run_reminder_sweep")


def _parse_instant(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"Invalid --now value {value!r}. Use ISO 8601 (e.g. '2026-10-20T14:00:00+00:00')"
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Send due mentorship session reminders.")
    parser.add_argument(
        "--now",
        type=_parse_instant,
        default=None,
        help="Evaluate reminders as of this instant instead of the current time (naive = UTC).",
    )
    return parser


def run_reminder_sweep(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    clock = FixedClock(args.now) if args.now else SystemClock()

    db = SessionLocal()
    try:
        sweeper = ReminderScheduler(SessionStore(db), NotificationService(db))
        delivered = sweeper.sweep(clock.now())
        print(f"Reminder sweep complete: {delivered} notification(s) sent")
        return 0
    except Exception as exc:
        db.rollback()
        logger.exception("Reminder sweep failed")
        print(f"Reminder sweep failed: {exc}", file=sys.stderr)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    raise SystemExit(run_reminder_sweep())
