# services/invoice_service.py
"""
Invoice Service - Business logic layer for rent invoice operations.

Invoices are never edited one by one. Whenever a lease's rent history or
term changes, all of its invoices are regenerated from the lease start and
the lease is reconciled again. Months that simply come due are billed by
reconciliation (reconcile_service.bill_missing_months).
"""
import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional
from sqlalchemy.orm import Session

from ledger import ensure_can_terminate, original_rent
from ledger.exceptions import LeaseTerminatedError, LedgerValidationError
from ledger.invoices import rent_for_month
from ledger.types import ZERO, to_money
from models import Lease, RentAdjustment, RentInvoice
from .lease_lock import locked_lease
from .ledger_service import rent_changes, scheduled_obligations
from .reconcile_service import ReconcileResult, reconcile_locked_lease

logger = logging.getLogger(__name__)


def _ensure_open(lease: Lease) -> None:
     try:
          ensure_can_terminate(lease.status, lease.id)
     except LeaseTerminatedError:
          logger.info("Rejected ledger change on terminated lease %s", lease.id)
          raise


class InvoiceService:
     """Service class for invoice-related business logic."""

     @staticmethod
     def replace_invoices(db: Session, lease: Lease, today: Optional[date] = None) -> List[RentInvoice]:
          """
          Delete every invoice on a lease and write a fresh monthly sequence.

          The caller must hold the lease lock.

          Args:
               db: SQLAlchemy database session
               lease: Lease whose invoices are rebuilt
               today: Generate through this day's month (default: today)

          Returns:
               The new RentInvoice rows, oldest month first
          """
          obligations = scheduled_obligations(lease, today)

          removed = (
               db.query(RentInvoice)
               .filter(RentInvoice.lease_id == lease.id)
               .delete(synchronize_session="fetch")
          )
          db.flush()  # Deletes must reach the table before the unique (lease, year, month) inserts

          invoices = [RentInvoice.for_obligation(lease, o) for o in obligations]
          db.add_all(invoices)
          db.flush()

          logger.info(
               "Lease %s: replaced %s invoice(s) with %s", lease.id, removed, len(invoices)
          )
          return invoices

     @staticmethod
     def regenerate_lease_invoices(
          db: Session,
          lease_id: int,
          today: Optional[date] = None,
     ) -> ReconcileResult:
          """
          Destructively regenerate a lease's invoices, then reconcile it.

          Raises:
               ResourceNotFoundError: If the lease does not exist
               LeaseTerminatedError: If the lease is terminated
          """
          with locked_lease(db, lease_id) as lease:
               _ensure_open(lease)
               InvoiceService.replace_invoices(db, lease, today)
               result = reconcile_locked_lease(db, lease, as_of=today)
          return result

     @staticmethod
     def adjust_rent(
          db: Session,
          lease_id: int,
          new_rent: Decimal,
          effective_date: date,
          agreement_terms: Optional[str] = None,
          notes: Optional[str] = None,
          today: Optional[date] = None,
     ) -> RentAdjustment:
          """
          Record a rent change and rebill the lease.

          previous_rent is the rent in force on effective_date before this
          change. lease.monthly_rent is kept equal to the rent of the latest
          adjustment.

          Raises:
               ResourceNotFoundError: If the lease does not exist
               LeaseTerminatedError: If the lease is terminated
               LedgerValidationError: If new_rent is negative
          """
          new_rent = to_money(new_rent, "new_rent")
          if new_rent < ZERO:
               raise LedgerValidationError("Rent cannot be negative", details={"new_rent": str(new_rent)})

          with locked_lease(db, lease_id) as lease:
               _ensure_open(lease)
               if effective_date < lease.start_date:
                    raise LedgerValidationError(
                         "Rent adjustment cannot take effect before the lease starts",
                         details={
                              "effective_date": effective_date.isoformat(),
                              "lease_start": lease.start_date.isoformat(),
                         },
                    )

               changes = rent_changes(lease)
               previous_rent = rent_for_month(
                    original_rent(lease.monthly_rent, changes), changes, effective_date
               )
               adjustment = RentAdjustment(
                    previous_rent=previous_rent,
                    new_rent=new_rent,
                    adjustment_amount=new_rent - previous_rent,
                    effective_date=effective_date,
                    agreement_terms=agreement_terms,
                    notes=notes,
               )
               lease.rent_adjustments.append(adjustment)
               latest = max(lease.rent_adjustments, key=lambda a: a.effective_date)
               lease.monthly_rent = latest.new_rent
               db.flush()

               logger.info(
                    "Lease %s: rent %s -> %s effective %s",
                    lease.id, previous_rent, new_rent, effective_date,
               )
               InvoiceService.replace_invoices(db, lease, today)
               reconcile_locked_lease(db, lease, as_of=today)
          return adjustment

     @staticmethod
     def update_lease_dates(
          db: Session,
          lease_id: int,
          start_date: Optional[date] = None,
          end_date: Optional[date] = None,
          today: Optional[date] = None,
     ) -> Lease:
          """
          Move a lease's start and/or end date and rebill it from the new start.

          Raises:
               ResourceNotFoundError: If the lease does not exist
               LeaseTerminatedError: If the lease is terminated
               LedgerValidationError: If the end would precede the start, or a
                    rent adjustment would fall before the new start
          """
          with locked_lease(db, lease_id) as lease:
               _ensure_open(lease)
               new_start = start_date or lease.start_date
               new_end = end_date or lease.end_date
               if new_end < new_start:
                    raise LedgerValidationError(
                         "Lease end date is before its start date",
                         details={"start_date": new_start.isoformat(), "end_date": new_end.isoformat()},
                    )
               early = [adj for adj in lease.rent_adjustments if adj.effective_date < new_start]
               if early:
                    raise LedgerValidationError(
                         "Lease cannot start after one of its rent adjustments",
                         details={"effective_date": min(a.effective_date for a in early).isoformat()},
                    )

               lease.start_date = new_start
               lease.end_date = new_end
               db.flush()
               logger.info("Lease %s: term now %s to %s", lease.id, new_start, new_end)

               InvoiceService.replace_invoices(db, lease, today)
               reconcile_locked_lease(db, lease, as_of=today)
          return lease
