"""End-of-day job: write Absent records for employees who never checked in.

Run from the repository root: `python -m scripts.reconcile_absences [YYYY-MM-DD]`
(defaults to today). Meant for cron after the shift ends.
"""

from __future__ import annotations

import argparse
import importlib
import logging

from config import get_settings_module

from src.attendance_ledger.attendance_ledger.common.datetime_utils import now_local, parse_iso_date
from src.attendance_ledger.attendance_ledger.container import build_container


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("date", nargs="?", help="work date to reconcile (YYYY-MM-DD)")
    args = parser.parse_args()

    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(level=getattr(settings, "LOG_LEVEL", "INFO"))
    container = build_container(db_config=settings.DB_CONFIG, settings=settings)

    work_date = parse_iso_date(args.date) if args.date else now_local().date()
    created = container.attendance_service.reconcile_absences(work_date)
    authorized = sum(1 for r in created if r.has_permission)
    print(f"OK: {work_date} -> {len(created)} absent ({authorized} authorized, {len(created) - authorized} unauthorized)")


if __name__ == "__main__":
    main()
