"""
Lease termination settlement and lease status rules.

A settlement nets what is still owed on one lease against the tenant's
security deposit and, optionally, credit the tenant holds on their other
leases. It is a point-in-time computation; persisting it is the caller's job.
"""
from datetime import date, timedelta

from .exceptions import LeaseTerminatedError, LedgerValidationError, SettlementTransferError
from .types import LeaseStatus, Settlement, SettlementOptions, ZERO, to_money

DEFAULT_EXPIRY_WARNING_DAYS = 30


def compute_settlement(
     this_lease_current_due,
     security_deposit_available,
     global_ledger_balance,
     options: SettlementOptions = SettlementOptions(),
) -> Settlement:
     """
     Compute the final amount owed or returned when a lease is terminated.

     Args:
          this_lease_current_due: Current due on this lease only. Negative
               when the tenant has overpaid this lease.
          security_deposit_available: Deposit held minus any already used.
          global_ledger_balance: Net balance over the tenant's other active
               leases. Positive = owes elsewhere, negative = credit elsewhere.
          options: Whether to apply the deposit, and how much external credit
               to transfer in.

     Returns:
          Settlement. final_amount > 0 means the tenant still owes, < 0 means
          funds are returned to the tenant.

     Raises:
          LedgerValidationError: Negative deposit or negative transfer request.
          SettlementTransferError: Transfer requested without credit, above the
               available credit, or above what remains due after the deposit.
     """
     current_due = to_money(this_lease_current_due, "this_lease_current_due")
     deposit = to_money(security_deposit_available, "security_deposit_available")
     global_balance = to_money(global_ledger_balance, "global_ledger_balance")
     requested = to_money(options.global_ledger_transfer_amount, "global_ledger_transfer_amount")

     if deposit < ZERO:
          raise LedgerValidationError(
               "Security deposit available cannot be negative",
               details={"security_deposit_available": str(deposit)},
          )
     if requested < ZERO:
          raise LedgerValidationError(
               "Global ledger transfer amount cannot be negative",
               details={"global_ledger_transfer_amount": str(requested)},
          )

     deposit_applied = ZERO
     if options.use_security_deposit:
          deposit_applied = min(deposit, max(ZERO, current_due))

     available_credit = -global_balance if global_balance < ZERO else ZERO
     remaining_due = max(ZERO, current_due - deposit_applied)
     max_transferable = min(available_credit, remaining_due)

     if requested > ZERO:
          if available_credit == ZERO:
               raise SettlementTransferError(
                    "Tenant has no credit on other leases to transfer",
                    details={"global_ledger_balance": str(global_balance)},
               )
          if requested > available_credit:
               raise SettlementTransferError(
                    f"Transfer of {requested} exceeds available credit of {available_credit}",
                    details={"requested": str(requested), "available_credit": str(available_credit)},
               )
          if requested > remaining_due:
               raise SettlementTransferError(
                    f"Transfer of {requested} exceeds remaining due of {remaining_due}",
                    details={"requested": str(requested), "remaining_due": str(remaining_due)},
               )

     return Settlement(
          this_lease_current_due=current_due,
          security_deposit_available=deposit,
          security_deposit_applied=deposit_applied,
          global_ledger_balance=global_balance,
          available_credit=available_credit,
          max_transferable=max_transferable,
          global_ledger_transferred=requested,
          final_amount=current_due - deposit_applied - requested,
     )


def lease_display_status(
     status: LeaseStatus,
     end_date: date,
     today: date = None,
     warning_days: int = DEFAULT_EXPIRY_WARNING_DAYS,
) -> LeaseStatus:
     """
     Status to show for a lease on a given day.

     active/expiring_soon/expired are derived from the end date and never
     need to be stored; terminated is final and always returned as is.
     """
     if status == LeaseStatus.TERMINATED:
          return LeaseStatus.TERMINATED
     today = today or date.today()
     if end_date < today:
          return LeaseStatus.EXPIRED
     if end_date <= today + timedelta(days=warning_days):
          return LeaseStatus.EXPIRING_SOON
     return LeaseStatus.ACTIVE


def ensure_can_terminate(status: LeaseStatus, lease_id: int = None) -> None:
     """Only a non-terminated lease can move to terminated."""
     if status == LeaseStatus.TERMINATED:
          raise LeaseTerminatedError(lease_id)

