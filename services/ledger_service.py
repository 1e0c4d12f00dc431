"""
Lease Ledger Service - loads a lease's invoices and payments and runs the
ledger engine over them.

Also computes the ledger fingerprint: a SHA-256 over every invoice and
active payment on a lease. A settlement preview hands the fingerprint to the
client; confirmation recomputes it and refuses to proceed if anything moved
in between.
"""
import hashlib
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import List, Optional, Sequence

from sqlalchemy.orm import Session

from ledger import (
     AllocationResult,
     LedgerEntry,
     LedgerSummary,
     LeaseStatus,
     Obligation,
     PaymentEvent,
     RentChange,
     allocate,
     elapsed,
     generate_obligations,
     original_rent,
     project,
     summarize,
)
from ledger.exceptions import ResourceNotFoundError
from ledger.types import ZERO, to_money
from models import Lease, Payment, RentInvoice


@dataclass
class LeaseLedger:
     """Everything the API shows about one lease's dues."""
     lease: Lease
     entries: List[LedgerEntry]
     summary: LedgerSummary
     allocations: List[AllocationResult]
     fingerprint: str


def _normalize_amount(amount) -> str:
     """Normalize amount to canonical string for hashing (2 decimal places)."""
     return str(to_money(amount if amount is not None else ZERO))


def _normalize_date(value: Optional[date]) -> str:
     """Normalize date to ISO format for deterministic hashing."""
     return value.isoformat() if value is not None else "-"


def get_lease(db: Session, lease_id: int) -> Lease:
     """
     Raises:
          ResourceNotFoundError: If the lease does not exist.
     """
     lease = db.query(Lease).filter(Lease.id == lease_id).first()
     if lease is None:
          raise ResourceNotFoundError("Lease", lease_id)
     return lease


def lease_invoices(db: Session, lease_id: int) -> List[RentInvoice]:
     """All stored invoices for a lease, oldest month first."""
     return (
          db.query(RentInvoice)
          .filter(RentInvoice.lease_id == lease_id)
          .order_by(RentInvoice.year, RentInvoice.month)
          .all()
     )


def active_payments(db: Session, lease_id: int) -> List[Payment]:
     """Payments on a lease that have not been soft-deleted, by payment date."""
     return (
          db.query(Payment)
          .filter(Payment.lease_id == lease_id, Payment.is_deleted.is_(False))
          .order_by(Payment.payment_date, Payment.id)
          .all()
     )


def elapsed_obligations(invoices: Sequence[RentInvoice], as_of: Optional[date] = None) -> List[Obligation]:
     return elapsed([inv.to_obligation() for inv in invoices], as_of)


def rent_changes(lease: Lease) -> List[RentChange]:
     return [
          RentChange(
               effective_date=adj.effective_date,
               new_rent=to_money(adj.new_rent, "new_rent"),
               previous_rent=to_money(adj.previous_rent, "previous_rent"),
          )
          for adj in lease.rent_adjustments
     ]


def scheduled_obligations(lease: Lease, through: Optional[date] = None) -> List[Obligation]:
     """The lease's monthly rent schedule from its start month through `through`'s month."""
     changes = rent_changes(lease)
     return generate_obligations(
          lease_start=lease.start_date,
          monthly_rent=original_rent(lease.monthly_rent, changes),
          adjustments=changes,
          through=through,
          lease_end=lease.end_date,
     )


def unbilled_obligations(
     lease: Lease,
     invoices: Sequence[RentInvoice],
     through: Optional[date] = None,
) -> List[Obligation]:
     """
     Scheduled months up to `through` that have no stored invoice yet.
     A terminated lease is never billed again.
     """
     if lease.status == LeaseStatus.TERMINATED:
          return []
     billed = {(inv.year, inv.month) for inv in invoices}
     return [o for o in scheduled_obligations(lease, through) if (o.year, o.month) not in billed]


def lease_obligations(
     lease: Lease,
     invoices: Sequence[RentInvoice],
     as_of: Optional[date] = None,
) -> List[Obligation]:
     """Months counted as of `as_of`: stored invoices plus months not billed yet."""
     obligations = [inv.to_obligation() for inv in invoices]
     obligations.extend(unbilled_obligations(lease, invoices, as_of))
     return elapsed(sorted(obligations, key=lambda o: o.sort_key), as_of)


def payment_events(payments: Sequence[Payment]) -> List[PaymentEvent]:
     return [p.to_event() for p in payments]


def compute_ledger_fingerprint(
     lease: Lease,
     invoices: Sequence[RentInvoice],
     payments: Sequence[Payment],
) -> str:
     """
     Compute SHA-256 fingerprint of a lease's ledger state.

     Input string: lease header, then one canonical line per invoice and per
     active payment, sorted by id. Returns 64-char hex string.
     """
     parts = [
          "|".join([
               str(lease.id),
               _normalize_amount(lease.opening_due_balance),
               _normalize_amount(lease.security_deposit),
               _normalize_amount(lease.security_deposit_used),
               lease.status.value if lease.status else "",
          ])
     ]
     for inv in sorted(invoices, key=lambda i: i.id):
          parts.append("|".join([
               "inv",
               str(inv.id),
               f"{inv.year:04d}-{inv.month:02d}",
               _normalize_amount(inv.amount),
          ]))
     for payment in sorted(payments, key=lambda p: p.id):
          parts.append("|".join([
               "pay",
               str(payment.id),
               _normalize_amount(payment.amount),
               _normalize_date(payment.payment_date),
          ]))
     return hashlib.sha256("\n".join(parts).encode("utf-8")).hexdigest()


def lease_fingerprint(db: Session, lease: Lease) -> str:
     return compute_ledger_fingerprint(lease, lease_invoices(db, lease.id), active_payments(db, lease.id))


def lease_summary(db: Session, lease: Lease, as_of: Optional[date] = None) -> LedgerSummary:
     """Dues for one lease, counting only months up to as_of."""
     return summarize(
          lease.opening_due_balance or ZERO,
          lease_obligations(lease, lease_invoices(db, lease.id), as_of),
          payment_events(active_payments(db, lease.id)),
     )


def build_lease_ledger(db: Session, lease: Lease, as_of: Optional[date] = None) -> LeaseLedger:
     """Running-balance ledger, dues summary and month-by-month allocation for a lease."""
     invoices = lease_invoices(db, lease.id)
     payments = active_payments(db, lease.id)
     obligations = lease_obligations(lease, invoices, as_of)
     events = payment_events(payments)
     opening = lease.opening_due_balance or ZERO

     summary = summarize(opening, obligations, events)
     allocations = allocate(obligations, max(ZERO, summary.total_paid), opening)
     return LeaseLedger(
          lease=lease,
          entries=project(opening, obligations, events, opening_date=lease.start_date),
          summary=summary,
          allocations=allocations,
          fingerprint=compute_ledger_fingerprint(lease, invoices, payments),
     )


def other_active_leases(db: Session, lease: Lease) -> List[Lease]:
     """The tenant's other non-terminated leases, oldest first."""
     return (
          db.query(Lease)
          .filter(
               Lease.tenant_id == lease.tenant_id,
               Lease.id != lease.id,
               Lease.status != LeaseStatus.TERMINATED,
          )
          .order_by(Lease.start_date, Lease.id)
          .all()
     )


def global_ledger_balance(
     db: Session,
     lease: Lease,
     as_of: Optional[date] = None,
     others: Optional[Sequence[Lease]] = None,
) -> Decimal:
     """
     Net current due across the tenant's other active leases.
     Positive = tenant owes elsewhere, negative = tenant has credit elsewhere.

     Pass `others` when the caller already holds those leases locked.
     """
     if others is None:
          others = other_active_leases(db, lease)
     total = ZERO
     for other in others:
          total += lease_summary(db, other, as_of).current_due
     return total


def tenant_dues(db: Session, tenant_id: int, as_of: Optional[date] = None) -> List[tuple]:
     """(lease, summary) for each of a tenant's non-terminated leases."""
     leases = (
          db.query(Lease)
          .filter(Lease.tenant_id == tenant_id, Lease.status != LeaseStatus.TERMINATED)
          .order_by(Lease.start_date, Lease.id)
          .all()
     )
     return [(lease, lease_summary(db, lease, as_of)) for lease in leases]
