"""
Reconcile Service - rewrites stored invoice paid state from the FIFO allocation.

RentInvoice.is_paid / paid_amount are derived data. reconcile_lease() is the
one operation that refreshes them. It is idempotent and is called both
synchronously after every payment or invoice change and by the batch repair
job (scripts/recalc_fifo_all.py).
"""
import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from ledger import LeaseStatus, allocate, needs_update
from ledger.projection import sum_payments
from ledger.types import ZERO, to_money
from models import Lease, RentInvoice
from .lease_lock import locked_lease
from .ledger_service import active_payments, elapsed_obligations, lease_invoices, payment_events, unbilled_obligations

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
     lease_id: int
     invoices_checked: int = 0
     invoices_updated: int = 0
     invoices_billed: int = 0
     warnings: List[str] = field(default_factory=list)
     dry_run: bool = False


def bill_missing_months(db: Session, lease: Lease, through: Optional[date] = None) -> List[RentInvoice]:
     """
     Insert an invoice for every scheduled month up to `through` that has
     none, leaving existing invoices alone. Running it twice adds nothing.

     The caller must hold the lease lock.
     """
     missing = unbilled_obligations(lease, lease_invoices(db, lease.id), through)
     invoices = [RentInvoice.for_obligation(lease, o) for o in missing]
     if invoices:
          db.add_all(invoices)
          db.flush()
          logger.info(
               "Lease %s: billed %s new month(s) through %s",
               lease.id, len(invoices), invoices[-1].to_obligation().key,
          )
     return invoices


def reconcile_locked_lease(
     db: Session,
     lease: Lease,
     as_of: Optional[date] = None,
     dry_run: bool = False,
) -> ReconcileResult:
     """
     Reconcile a lease whose lock the caller already holds.

     Months that have come due since the lease was last billed are invoiced
     first; a dry run only counts them.
     Only elapsed months are allocated; invoices for later months are reset
     to unpaid. Rows already within tolerance of the computed state are left
     untouched. Inconsistent stored data is repaired and reported as a
     warning rather than raised.
     """
     result = ReconcileResult(lease_id=lease.id, dry_run=dry_run)

     if dry_run:
          result.invoices_billed = len(unbilled_obligations(lease, lease_invoices(db, lease.id), as_of))
     else:
          result.invoices_billed = len(bill_missing_months(db, lease, as_of))

     invoices = lease_invoices(db, lease.id)
     obligations = elapsed_obligations(invoices, as_of)
     elapsed_keys = {o.key for o in obligations}

     total_paid = sum_payments(payment_events(active_payments(db, lease.id)))
     if total_paid < ZERO:
          message = f"Lease {lease.id}: net payments are negative ({total_paid}); treating as zero"
          logger.warning(message)
          result.warnings.append(message)
          total_paid = ZERO

     opening = to_money(lease.opening_due_balance or ZERO, "opening_due_balance")
     by_key = {r.obligation.key: r for r in allocate(obligations, total_paid, opening)}

     for invoice in invoices:
          result.invoices_checked += 1
          stored_paid = Decimal(str(invoice.paid_amount)) if invoice.paid_amount is not None else ZERO
          if stored_paid > to_money(invoice.amount):
               message = (
                    f"Lease {lease.id}: invoice {invoice.id} ({invoice.year}-{invoice.month:02d}) "
                    f"stored paid {stored_paid} exceeds amount {invoice.amount}; clamping"
               )
               logger.warning(message)
               result.warnings.append(message)

          computed = by_key.get(invoice.to_obligation().key)
          if computed is None or invoice.to_obligation().key not in elapsed_keys:
               # Future month: nothing is allocated to it yet
               if invoice.is_paid or stored_paid != ZERO:
                    result.invoices_updated += 1
                    if not dry_run:
                         invoice.is_paid = False
                         invoice.paid_amount = ZERO
               continue

          if needs_update(stored_paid, invoice.is_paid, computed):
               result.invoices_updated += 1
               if not dry_run:
                    invoice.apply_allocation(computed)

     if not dry_run:
          db.flush()
     if result.invoices_updated:
          logger.info(
               "Lease %s: %s of %s invoice(s) %s",
               lease.id,
               result.invoices_updated,
               result.invoices_checked,
               "need repair" if dry_run else "updated",
          )
     return result


def reconcile_lease(
     db: Session,
     lease_id: int,
     as_of: Optional[date] = None,
     dry_run: bool = False,
) -> ReconcileResult:
     """
     Take the lease lock, reconcile, and commit.

     Raises:
          ResourceNotFoundError: If the lease does not exist.
     """
     with locked_lease(db, lease_id) as lease:
          result = reconcile_locked_lease(db, lease, as_of=as_of, dry_run=dry_run)
          if dry_run:
               db.rollback()
     return result


def reconcile_all(
     db: Session,
     as_of: Optional[date] = None,
     dry_run: bool = False,
) -> List[ReconcileResult]:
     """Reconcile every non-terminated lease, one lock and commit per lease."""
     lease_ids = [
          row[0]
          for row in db.query(Lease.id)
          .filter(Lease.status != LeaseStatus.TERMINATED)
          .order_by(Lease.id)
          .all()
     ]
     logger.info("Reconciling %s lease(s)%s", len(lease_ids), " (dry run)" if dry_run else "")

     results = []
     for lease_id in lease_ids:
          results.append(reconcile_lease(db, lease_id, as_of=as_of, dry_run=dry_run))
     return results
