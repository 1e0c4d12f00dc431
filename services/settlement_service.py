"""
Settlement Service - lease termination.

preview() computes what terminating a lease would settle to, together with a
fingerprint of every ledger it read. confirm_termination() recomputes under
the lease locks and only commits if the fingerprint still matches, so an
operator never confirms numbers that a concurrent payment has changed.
"""
import hashlib
import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from ledger import LeaseStatus, LedgerSummary, Settlement, SettlementOptions, compute_settlement, ensure_can_terminate
from ledger.exceptions import StaleSettlementError
from ledger.types import ZERO, to_money
from models import Lease, LeaseSettlement, Payment, PaymentMethod, ShopStatus
from .lease_lock import locked_leases
from .ledger_service import get_lease, global_ledger_balance, lease_fingerprint, lease_summary, other_active_leases
from .reconcile_service import bill_missing_months, reconcile_locked_lease

logger = logging.getLogger(__name__)


@dataclass
class SettlementPreview:
     lease: Lease
     summary: LedgerSummary
     settlement: Settlement
     fingerprint: str


def settlement_fingerprint(db: Session, lease: Lease, others: List[Lease], as_of: Optional[date] = None) -> str:
     """
     SHA-256 over the ledger fingerprints of a lease and the tenant's other
     active leases, plus the month the settlement counts dues through.
     """
     through = as_of or date.today()
     parts = [f"through|{through.year:04d}-{through.month:02d}", lease_fingerprint(db, lease)]
     parts.extend(lease_fingerprint(db, other) for other in sorted(others, key=lambda l: l.id))
     return hashlib.sha256("\n".join(parts).encode("utf-8")).hexdigest()


def _shop_label(lease: Lease) -> str:
     if lease.shop is not None:
          return f"Shop {lease.shop.shop_number}"
     return f"Shop #{lease.shop_id}"


def _compute(
     db: Session,
     lease: Lease,
     others: List[Lease],
     options: SettlementOptions,
     as_of: Optional[date],
) -> SettlementPreview:
     summary = lease_summary(db, lease, as_of)
     global_balance = global_ledger_balance(db, lease, as_of, others=others)
     settlement = compute_settlement(
          this_lease_current_due=summary.current_due,
          security_deposit_available=to_money(lease.security_deposit_available, "security_deposit_available"),
          global_ledger_balance=global_balance,
          options=options,
     )
     return SettlementPreview(
          lease=lease,
          summary=summary,
          settlement=settlement,
          fingerprint=settlement_fingerprint(db, lease, others, as_of),
     )


def preview(
     db: Session,
     lease_id: int,
     options: SettlementOptions = SettlementOptions(),
     as_of: Optional[date] = None,
) -> SettlementPreview:
     """
     Raises:
          ResourceNotFoundError: If the lease does not exist
          LeaseTerminatedError: If the lease is already terminated
          SettlementTransferError: If the requested transfer is not covered
     """
     lease = get_lease(db, lease_id)
     ensure_can_terminate(lease.status, lease.id)
     return _compute(db, lease, other_active_leases(db, lease), options, as_of)


def _transfer_credit(
     db: Session,
     lease: Lease,
     others: List[Lease],
     amount: Decimal,
     payment_date: date,
     as_of: Optional[date],
) -> List[Lease]:
     """
     Move `amount` of credit from the tenant's other leases onto `lease`.

     Credit is drawn from the oldest lease first, each up to its own credit.
     Each draw is written as a pair of transfer payments: negative on the
     source lease and positive on the terminated one.
     """
     touched = []
     remaining = amount
     for other in others:
          if remaining <= ZERO:
               break
          credit = lease_summary(db, other, as_of).credit_balance
          if credit <= ZERO:
               continue
          take = min(credit, remaining)
          db.add_all([
               Payment(
                    tenant_id=lease.tenant_id,
                    lease_id=other.id,
                    amount=-take,
                    payment_date=payment_date,
                    method=PaymentMethod.TRANSFER,
                    notes=f"Settlement transfer to {_shop_label(lease)} (Lease #{lease.id})",
                    is_deleted=False,
               ),
               Payment(
                    tenant_id=lease.tenant_id,
                    lease_id=lease.id,
                    amount=take,
                    payment_date=payment_date,
                    method=PaymentMethod.TRANSFER,
                    notes=f"Settlement transfer from {_shop_label(other)} (Lease #{other.id})",
                    is_deleted=False,
               ),
          ])
          logger.info("Transferred %s credit from lease %s to lease %s", take, other.id, lease.id)
          touched.append(other)
          remaining -= take
     db.flush()
     return touched


def confirm_termination(
     db: Session,
     lease_id: int,
     expected_fingerprint: str,
     options: SettlementOptions = SettlementOptions(),
     notes: Optional[str] = None,
     confirmed_by: Optional[str] = None,
     as_of: Optional[date] = None,
) -> LeaseSettlement:
     """
     Terminate a lease with the settlement the operator previewed.

     Raises:
          ResourceNotFoundError: If the lease does not exist
          LeaseTerminatedError: If the lease is already terminated
          StaleSettlementError: If any ledger read by the preview has changed
          SettlementTransferError: If the requested transfer is not covered
     """
     lease = get_lease(db, lease_id)
     lock_ids = [lease.id] + [other.id for other in other_active_leases(db, lease)]

     with locked_leases(db, lock_ids) as locked:
          lease = locked[lease_id]
          ensure_can_terminate(lease.status, lease.id)
          others = other_active_leases(db, lease)

          current = _compute(db, lease, others, options, as_of)
          if current.fingerprint != expected_fingerprint:
               logger.warning("Settlement for lease %s is stale; ledger changed since preview", lease.id)
               raise StaleSettlementError(
                    "Lease ledger changed since the settlement was previewed",
                    details={"lease_id": lease.id, "fingerprint": current.fingerprint},
               )
          settlement = current.settlement

          touched = []
          if settlement.global_ledger_transferred > ZERO:
               touched = _transfer_credit(
                    db, lease, others, settlement.global_ledger_transferred,
                    payment_date=as_of or date.today(), as_of=as_of,
               )

          # Months this lease was settled for must exist as invoices before it closes
          bill_missing_months(db, lease, as_of)
          lease.security_deposit_used = (
               to_money(lease.security_deposit_used or ZERO) + settlement.security_deposit_applied
          )
          lease.status = LeaseStatus.TERMINATED
          lease.termination_notes = notes
          if lease.shop is not None:
               lease.shop.status = ShopStatus.VACANT

          record = LeaseSettlement(
               lease_id=lease.id,
               this_lease_current_due=settlement.this_lease_current_due,
               security_deposit_available=settlement.security_deposit_available,
               security_deposit_applied=settlement.security_deposit_applied,
               global_ledger_balance=settlement.global_ledger_balance,
               global_ledger_transferred=settlement.global_ledger_transferred,
               final_amount=settlement.final_amount,
               ledger_fingerprint=current.fingerprint,
               confirmed_by=confirmed_by,
               notes=notes,
          )
          db.add(record)
          db.flush()

          for affected in [lease] + touched:
               reconcile_locked_lease(db, affected, as_of=as_of)

          logger.info(
               "Lease %s terminated: final amount %s (%s)",
               lease.id, settlement.final_amount, settlement.outcome,
          )
     return record
