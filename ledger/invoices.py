"""
Monthly rent obligation generator.

Builds the full sequence of rent obligations for a lease from its start
month up to the current month. The sequence is always rebuilt from scratch;
callers replace whatever invoices they had stored with the result.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, List, Optional, Sequence

from .exceptions import LedgerValidationError
from .types import Obligation, RentChange, ZERO, to_money

# Rent is due on the 5th of every month.
DUE_DAY = 5


def _require_date(value, field_name: str) -> date:
     if isinstance(value, datetime):
          return value.date()
     if not isinstance(value, date):
          raise LedgerValidationError(
               f"{field_name} must be a date, got {type(value).__name__}",
               details={"field": field_name},
          )
     return value


def _month_start(d: date) -> date:
     return date(d.year, d.month, 1)


def _next_month(d: date) -> date:
     if d.month == 12:
          return date(d.year + 1, 1, 1)
     return date(d.year, d.month + 1, 1)


def original_rent(current_rent, adjustments: Sequence[RentChange]) -> Decimal:
     """
     Rent in force before the first adjustment.

     A lease row only keeps its current rent, so the original rent is taken
     from the earliest adjustment's previous_rent when there is one.
     """
     ordered = sorted(adjustments, key=lambda a: a.effective_date)
     if ordered and ordered[0].previous_rent is not None:
          return to_money(ordered[0].previous_rent, "previous_rent")
     return to_money(current_rent, "monthly_rent")


def rent_for_month(base_rent: Decimal, adjustments: Sequence[RentChange], month_start: date) -> Decimal:
     """Most recent adjustment effective on or before month_start, else base_rent."""
     rent = base_rent
     for adjustment in sorted(adjustments, key=lambda a: a.effective_date):
          if adjustment.effective_date <= month_start:
               rent = to_money(adjustment.new_rent, "new_rent")
          else:
               break
     return rent


def generate_obligations(
     lease_start: date,
     monthly_rent,
     adjustments: Iterable[RentChange] = (),
     through: Optional[date] = None,
     lease_end: Optional[date] = None,
) -> List[Obligation]:
     """
     Generate one rent obligation per calendar month of a lease.

     Args:
          lease_start: First day of the lease. A mid-month start still bills
               the full first month.
          monthly_rent: Rent before any adjustment applies.
          adjustments: Rent changes; order does not matter.
          through: Upper bound ("now"); the month containing it is included.
               Defaults to today.
          lease_end: If the lease ends before `through`, generation stops at
               the month containing lease_end.

     Returns:
          Obligations ordered oldest first, each due on the 5th of its month.

     Raises:
          LedgerValidationError: On malformed dates, an empty lease term, or
               negative rent.
     """
     lease_start = _require_date(lease_start, "lease_start")
     through = _require_date(through, "through") if through is not None else date.today()
     if lease_end is not None:
          lease_end = _require_date(lease_end, "lease_end")
          if lease_end < lease_start:
               raise LedgerValidationError(
                    "Lease end date is before its start date",
                    details={"lease_start": lease_start.isoformat(), "lease_end": lease_end.isoformat()},
               )

     base_rent = to_money(monthly_rent, "monthly_rent")
     changes = sorted(adjustments, key=lambda a: a.effective_date)
     if base_rent < ZERO or any(to_money(c.new_rent, "new_rent") < ZERO for c in changes):
          raise LedgerValidationError("Rent cannot be negative")

     last_month = _month_start(through)
     if lease_end is not None and _month_start(lease_end) < last_month:
          last_month = _month_start(lease_end)

     obligations = []
     current = _month_start(lease_start)
     while current <= last_month:
          obligations.append(
               Obligation(
                    amount=rent_for_month(base_rent, changes, current),
                    due_date=date(current.year, current.month, DUE_DAY),
                    year=current.year,
                    month=current.month,
               )
          )
          current = _next_month(current)

     return obligations
