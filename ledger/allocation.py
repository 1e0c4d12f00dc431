"""
FIFO payment allocation.

Total cash received on a lease is pooled and applied to the oldest
obligation first. Which months a payment was labelled for is irrelevant:
a payment always retires the oldest debt. This keeps one consistent state
no matter how payments were entered, at the cost of not supporting
"skip a month, pay a later one".

This module is the only implementation of the allocation loop. The request
path, the reconcile service and the batch repair script all call allocate().
"""
from decimal import Decimal
from typing import List, Sequence

from .exceptions import LedgerValidationError
from .types import AllocationResult, AllocationStatus, Obligation, ZERO, to_money

# Stored paid amounts within this many currency units of the computed value
# are treated as already correct.
PAID_AMOUNT_TOLERANCE = Decimal("0.01")


def order_obligations(obligations: Sequence[Obligation]) -> List[Obligation]:
     """Sort oldest first (opening balance before every month) and validate."""
     seen = set()
     for obligation in obligations:
          to_money(obligation.amount, f"obligation {obligation.key}")
          if obligation.amount < ZERO:
               raise LedgerValidationError(
                    f"Obligation {obligation.key} has a negative amount",
                    details={"key": obligation.key, "amount": str(obligation.amount)},
               )
          if obligation.key in seen:
               raise LedgerValidationError(
                    f"Duplicate obligation for {obligation.key}",
                    details={"key": obligation.key},
               )
          seen.add(obligation.key)
     return sorted(obligations, key=lambda o: o.sort_key)


def with_opening_balance(obligations: Sequence[Obligation], opening_balance, opening_date=None) -> List[Obligation]:
     """Prepend the opening balance as a virtual obligation when it is non-zero."""
     opening = to_money(opening_balance, "opening_balance")
     if opening < ZERO:
          raise LedgerValidationError(
               "Opening balance cannot be negative",
               details={"opening_balance": str(opening)},
          )
     if any(o.is_opening for o in obligations):
          raise LedgerValidationError("Opening balance passed both as an obligation and separately")
     ordered = list(obligations)
     if opening > ZERO:
          ordered.insert(0, Obligation.opening(opening, opening_date))
     return ordered


def allocate(
     obligations: Sequence[Obligation],
     total_paid,
     opening_balance=ZERO,
) -> List[AllocationResult]:
     """
     Allocate a pooled payment total across obligations, oldest first.

     Args:
          obligations: Monthly obligations, in any order.
          total_paid: Sum of all active payments on the lease. Must be >= 0.
          opening_balance: Arrears carried in from before the first month.
               Allocated before any monthly obligation when non-zero.

     Returns:
          One AllocationResult per obligation (opening first), oldest first.
          Money left over after the last obligation is not represented here;
          it shows up as a negative current due in the ledger summary.

     Raises:
          LedgerValidationError: On negative amounts or duplicate months.
     """
     remaining = to_money(total_paid, "total_paid")
     if remaining < ZERO:
          raise LedgerValidationError(
               "Total paid cannot be negative",
               details={"total_paid": str(remaining)},
          )

     ordered = order_obligations(with_opening_balance(obligations, opening_balance))

     results = []
     for obligation in ordered:
          amount = obligation.amount
          if remaining >= amount:
               paid = amount
               status = AllocationStatus.PAID
          elif remaining > ZERO:
               paid = remaining
               status = AllocationStatus.PARTIAL
          else:
               paid = ZERO
               status = AllocationStatus.UNPAID
          remaining -= paid
          results.append(
               AllocationResult(
                    obligation=obligation,
                    paid_amount=paid,
                    remaining_balance=amount - paid,
                    status=status,
               )
          )

     return results


def needs_update(stored_paid_amount, stored_is_paid: bool, result: AllocationResult) -> bool:
     """
     True when a stored invoice disagrees with its computed allocation.

     Differences within PAID_AMOUNT_TOLERANCE are ignored so repeated
     reconciliation does not rewrite rows over float-era rounding noise.
     """
     stored = Decimal(str(stored_paid_amount)) if stored_paid_amount is not None else ZERO
     if bool(stored_is_paid) != result.is_paid:
          return True
     return abs(stored - result.paid_amount) > PAID_AMOUNT_TOLERANCE


def months_due(results: Sequence[AllocationResult]) -> int:
     """Number of rent months not yet fully paid. The opening balance is not a month."""
     return sum(
          1 for r in results
          if not r.obligation.is_opening and r.status != AllocationStatus.PAID
     )

