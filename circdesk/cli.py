"""
Sweep CLI

Ages circulation records for schedulers that live outside the app
(cron, systemd timers):

    circdesk-sweep                  # both sweeps
    circdesk-sweep --overdue        # loans past due -> OVERDUE
    circdesk-sweep --reservations   # lapsed PENDING reservations -> EXPIRED

Exits non-zero if any requested sweep was rejected.
"""

import argparse
import logging
from circdesk.configs import DB_URI, LOG_LEVEL
from circdesk.core.api import CirculationAPI
from circdesk.core.db import Store

logger = logging.getLogger(__name__)


def run_sweeps(circulation, overdue=True, reservations=True):
    results = []
    if overdue:
        results.append(circulation.sweep_overdue())
    if reservations:
        results.append(circulation.sweep_expired_reservations())
    for result in results:
        if result.success:
            logger.info(result.message)
        else:
            logger.error(result.message)
    return results


def main(argv=None, store=None):
    parser = argparse.ArgumentParser(description="Run circdesk sweep jobs")
    parser.add_argument("--overdue", action="store_true", help="Only flag overdue loans")
    parser.add_argument("--reservations", action="store_true", help="Only expire lapsed reservations")
    parser.add_argument("--db-uri", default=DB_URI, help="Database URI")
    args = parser.parse_args(argv)

    logging.basicConfig(level=LOG_LEVEL.upper())
    both = not (args.overdue or args.reservations)
    store = store or Store.from_uri(args.db_uri)
    store.init_db()
    results = run_sweeps(
        CirculationAPI(store),
        overdue=both or args.overdue,
        reservations=both or args.reservations,
    )
    return 0 if all(r.success for r in results) else 1


if __name__ == "__main__":
    raise SystemExit(main())
