"""
Repair job: re-run FIFO reconciliation on stored invoices.

Usage:
     python -m scripts.recalc_fifo_all                 # every non-terminated lease
     python -m scripts.recalc_fifo_all --lease-id 118  # one lease
     python -m scripts.recalc_fifo_all --dry-run       # report only

Runs the same reconcile operation the API runs after each payment, so a
second run right after the first changes nothing.
"""
import argparse
import logging
import sys
from datetime import date
from typing import List, Optional

from database import get_session_context
from ledger.exceptions import LedgerError
from logging_config import configure_logging
from services.reconcile_service import ReconcileResult, reconcile_all, reconcile_lease

logger = logging.getLogger(__name__)


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
     parser = argparse.ArgumentParser(
          description="Recalculate invoice paid state from payments, oldest month first.",
     )
     parser.add_argument("--lease-id", type=int, default=None, help="Only reconcile this lease")
     parser.add_argument("--dry-run", action="store_true", help="Report drift without writing")
     parser.add_argument(
          "--as-of",
          type=date.fromisoformat,
          default=None,
          help="Count months up to this day, YYYY-MM-DD (default: today)",
     )
     return parser.parse_args(argv)


def run(lease_id: Optional[int] = None, dry_run: bool = False, as_of: Optional[date] = None) -> List[ReconcileResult]:
     with get_session_context() as db:
          if lease_id is not None:
               return [reconcile_lease(db, lease_id, as_of=as_of, dry_run=dry_run)]
          return reconcile_all(db, as_of=as_of, dry_run=dry_run)


def main(argv: Optional[List[str]] = None) -> int:
     configure_logging()
     args = _parse_args(argv)

     try:
          results = run(lease_id=args.lease_id, dry_run=args.dry_run, as_of=args.as_of)
     except LedgerError as exc:
          logger.error("Reconciliation failed: %s", exc.message)
          return 1

     billed = sum(r.invoices_billed for r in results)
     updated = sum(r.invoices_updated for r in results)
     warnings = sum(len(r.warnings) for r in results)
     logger.info(
          "%s lease(s) checked, %s month(s) %s, %s invoice(s) %s, %s warning(s)",
          len(results),
          billed,
          "to bill" if args.dry_run else "billed",
          updated,
          "would change" if args.dry_run else "updated",
          warnings,
     )
     return 0


if __name__ == "__main__":
     sys.exit(main())
