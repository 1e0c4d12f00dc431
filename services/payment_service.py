"""
Payment Service - records and soft-deletes cash received against a lease.

Every write reconciles the lease under its lock before returning, so stored
invoice paid state never lags the payments table.
"""
import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ledger.exceptions import LeaseTerminatedError, LedgerValidationError, ResourceNotFoundError
from ledger.types import ZERO, to_money
from models import DeletionLog, Payment, PaymentMethod
from .lease_lock import locked_lease
from .reconcile_service import reconcile_locked_lease

logger = logging.getLogger(__name__)


def _normalize_months(rent_months: Optional[Iterable[str]]) -> list:
     """Validate YYYY-MM labels and return them sorted without duplicates."""
     months = set()
     rent_months = list(rent_months or [])
     for label in rent_months:
          try:
               datetime.strptime(label, "%Y-%m")
          except (TypeError, ValueError):
               raise LedgerValidationError(
                    f"Rent month must be formatted YYYY-MM: {label!r}",
                    details={"rent_months": rent_months},
               )
          months.add(label)
     return sorted(months)


def payment_snapshot(payment: Payment) -> dict:
     """JSON-safe copy of a payment as stored in the deletion log."""
     return {
          "id": payment.id,
          "tenant_id": payment.tenant_id,
          "lease_id": payment.lease_id,
          "amount": str(to_money(payment.amount)),
          "payment_date": payment.payment_date.isoformat(),
          "rent_months": payment.rent_months or [],
          "receipt_number": payment.receipt_number,
          "method": payment.method.value if payment.method else None,
          "notes": payment.notes,
     }


def record_payment(
     db: Session,
     lease_id: int,
     amount: Decimal,
     payment_date: date,
     rent_months: Optional[Iterable[str]] = None,
     receipt_number: Optional[str] = None,
     method: PaymentMethod = PaymentMethod.CASH,
     notes: Optional[str] = None,
     as_of: Optional[date] = None,
) -> Payment:
     """
     Record a payment on a lease and reconcile the lease.

     rent_months is stored as entered. It does not influence which invoices
     the money is applied to.

     Raises:
          ResourceNotFoundError: If the lease does not exist
          LeaseTerminatedError: If the lease is terminated
          LedgerValidationError: Non-positive amount or malformed month label
     """
     amount = to_money(amount, "amount")
     if amount <= ZERO:
          raise LedgerValidationError("Payment amount must be positive", details={"amount": str(amount)})
     if method == PaymentMethod.TRANSFER:
          raise LedgerValidationError("Transfer payments are created by lease settlement only")
     months = _normalize_months(rent_months)

     with locked_lease(db, lease_id) as lease:
          if lease.is_terminated:
               raise LeaseTerminatedError(lease.id)

          payment = Payment(
               tenant_id=lease.tenant_id,
               lease_id=lease.id,
               amount=amount,
               payment_date=payment_date,
               rent_months=months,
               receipt_number=receipt_number,
               method=method,
               notes=notes,
               is_deleted=False,
          )
          db.add(payment)
          db.flush()
          logger.info("Payment %s recorded on lease %s: %s", payment.id, lease.id, amount)

          reconcile_locked_lease(db, lease, as_of=as_of)
     return payment


def soft_delete_payment(
     db: Session,
     payment_id: int,
     reason: str,
     deleted_by: Optional[str] = None,
     as_of: Optional[date] = None,
) -> Payment:
     """
     Soft-delete a payment, write the audit log entry, and reconcile.

     Raises:
          ResourceNotFoundError: If the payment does not exist or is already deleted
          LeaseTerminatedError: If the payment's lease is terminated
          LedgerValidationError: If no reason is given, or the payment is a
               settlement transfer leg
     """
     if not reason or not reason.strip():
          raise LedgerValidationError("A reason is required to delete a payment")

     payment = db.query(Payment).filter(Payment.id == payment_id, Payment.is_deleted.is_(False)).first()
     if payment is None:
          raise ResourceNotFoundError("Payment", payment_id)
     if payment.method == PaymentMethod.TRANSFER:
          raise LedgerValidationError(
               "Settlement transfer payments cannot be deleted",
               details={"payment_id": payment_id},
          )

     with locked_lease(db, payment.lease_id) as lease:
          db.refresh(payment)
          if payment.is_deleted:
               raise ResourceNotFoundError("Payment", payment_id)
          if lease.is_terminated:
               raise LeaseTerminatedError(lease.id)

          db.add(
               DeletionLog(
                    record_type="payment",
                    record_id=payment.id,
                    record_details=payment_snapshot(payment),
                    reason=reason.strip(),
                    deleted_by=deleted_by,
               )
          )
          payment.is_deleted = True
          payment.deleted_at = func.now()
          payment.deletion_reason = reason.strip()
          payment.deleted_by = deleted_by
          db.flush()
          logger.info("Payment %s on lease %s soft-deleted: %s", payment.id, lease.id, reason.strip())

          reconcile_locked_lease(db, lease, as_of=as_of)
     return payment
