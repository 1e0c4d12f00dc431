"""
Ledger projection: running-balance statement and dues summary for a lease.
"""
import calendar
import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional, Sequence

from .allocation import allocate, months_due, order_obligations, with_opening_balance
from .exceptions import LedgerValidationError
from .types import (
     LedgerEntry,
     LedgerEntryType,
     LedgerSummary,
     Obligation,
     PaymentEvent,
     ZERO,
     to_money,
)

logger = logging.getLogger(__name__)

# Same-day ordering: charges are posted before the payments against them.
_DEBIT_FIRST = 0
_CREDIT_AFTER = 1


def month_label(year: int, month: int) -> str:
     return f"{calendar.month_abbr[month]} {year}"


def elapsed(obligations: Sequence[Obligation], as_of: Optional[date] = None) -> List[Obligation]:
     """Obligations for months up to and including as_of's month."""
     as_of = as_of or date.today()
     return [
          o for o in obligations
          if o.is_opening or (o.year, o.month) <= (as_of.year, as_of.month)
     ]


def sum_payments(payments: Sequence[PaymentEvent]) -> Decimal:
     """
     Net amount received. Only transfer legs may be negative.

     Raises:
          LedgerValidationError: If a regular payment is negative.
     """
     total = ZERO
     for payment in payments:
          amount = to_money(payment.amount)
          if amount < ZERO and not payment.transfer:
               raise LedgerValidationError(
                    "Payment amount cannot be negative",
                    details={"amount": str(amount), "payment_date": str(payment.payment_date)},
               )
          total += amount
     return total


def _payment_description(payment: PaymentEvent) -> str:
     if payment.transfer:
          return payment.description or "Settlement transfer"
     suffix = f" ({payment.reference})" if payment.reference else ""
     if payment.applies_to_months:
          labels = []
          for key in sorted(payment.applies_to_months):
               try:
                    year, month = (int(part) for part in key.split("-"))
                    labels.append(month_label(year, month))
               except ValueError:
                    labels.append(key)
          return f"Payment for {', '.join(labels)}{suffix}"
     return f"Payment received{suffix}"


def project(
     opening_balance,
     obligations: Sequence[Obligation],
     payments: Sequence[PaymentEvent],
     opening_date: Optional[date] = None,
) -> List[LedgerEntry]:
     """
     Build the chronological ledger for a lease.

     The opening balance (if any) comes first. Rent obligations are posted as
     debits on their due date and payments as credits on their payment date.
     An outgoing transfer leg (negative amount) is posted as a debit.
     Each entry carries running_balance = previous + debit - credit.
     """
     ordered = order_obligations(with_opening_balance(obligations, opening_balance, opening_date))
     sum_payments(payments)

     postings = []
     for index, obligation in enumerate(ordered):
          if obligation.is_opening:
               continue
          postings.append((
               obligation.due_date,
               _DEBIT_FIRST,
               index,
               LedgerEntryType.RENT,
               f"Rent for {month_label(obligation.year, obligation.month)}",
               obligation.amount,
               ZERO,
          ))
     for index, payment in enumerate(payments):
          amount = to_money(payment.amount)
          entry_type = LedgerEntryType.TRANSFER if payment.transfer else LedgerEntryType.PAYMENT
          if amount < ZERO:
               postings.append((payment.payment_date, _DEBIT_FIRST, index, entry_type,
                                _payment_description(payment), -amount, ZERO))
          else:
               postings.append((payment.payment_date, _CREDIT_AFTER, index, entry_type,
                                _payment_description(payment), ZERO, amount))
     postings.sort(key=lambda p: (p[0], p[1]))

     entries = []
     balance = ZERO
     if ordered and ordered[0].is_opening:
          balance = ordered[0].amount
          entries.append(
               LedgerEntry(
                    date=ordered[0].due_date,
                    entry_type=LedgerEntryType.OPENING,
                    description="Opening Due Balance",
                    debit=balance,
                    credit=ZERO,
                    running_balance=balance,
               )
          )

     for posted_on, _, _, entry_type, description, debit, credit in postings:
          balance = balance + debit - credit
          entries.append(
               LedgerEntry(
                    date=posted_on,
                    entry_type=entry_type,
                    description=description,
                    debit=debit,
                    credit=credit,
                    running_balance=balance,
               )
          )

     return entries


def summarize(
     opening_balance,
     obligations: Sequence[Obligation],
     payments: Sequence[PaymentEvent],
) -> LedgerSummary:
     """
     Dues summary for a lease.

     current_due is total_due - total_paid and is not floored: a negative
     value means the tenant holds a credit, which settlement relies on.
     """
     opening = to_money(opening_balance, "opening_balance")
     total_paid = sum_payments(payments)
     total_due = opening + sum((o.amount for o in obligations), ZERO)

     allocatable = total_paid
     if allocatable < ZERO:
          # Transfers out exceeded receipts; nothing is left to allocate.
          logger.warning("Net payments are negative (%s); allocating zero", total_paid)
          allocatable = ZERO

     results = allocate(obligations, allocatable, opening)
     return LedgerSummary(
          total_due=total_due,
          total_paid=total_paid,
          current_due=total_due - total_paid,
          months_due_count=months_due(results),
     )
