"""
Value types shared by the rent-ledger engine.

These are plain, immutable records. The engine never touches the database;
services translate ORM rows into these types before calling it.
"""
import enum
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import FrozenSet, Optional, Tuple

from .exceptions import LedgerValidationError

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

OPENING_KEY = "opening"


def to_money(value, field_name: str = "amount") -> Decimal:
     """
     Coerce a number or numeric string to a Decimal with exactly two places.

     Values with sub-cent digits are rejected, never rounded.
     """
     if isinstance(value, float):
          value = str(value)
     try:
          amount = Decimal(value)
     except (InvalidOperation, TypeError, ValueError):
          raise LedgerValidationError(
               f"{field_name} is not a valid amount: {value!r}",
               details={"field": field_name},
          )
     if not amount.is_finite():
          raise LedgerValidationError(
               f"{field_name} must be finite", details={"field": field_name}
          )
     cents = amount.quantize(CENT)
     if cents != amount:
          raise LedgerValidationError(
               f"{field_name} has more than two decimal places: {value}",
               details={"field": field_name, "value": str(value)},
          )
     return cents


def month_key(year: int, month: int) -> str:
     """Canonical YYYY-MM key, as stored in payment rent_months."""
     return f"{year:04d}-{month:02d}"


class AllocationStatus(str, enum.Enum):
     UNPAID = "unpaid"
     PARTIAL = "partial"
     PAID = "paid"


class LeaseStatus(str, enum.Enum):
     """Stored lease status. TERMINATED is absorbing."""
     ACTIVE = "active"
     EXPIRING_SOON = "expiring_soon"
     EXPIRED = "expired"
     TERMINATED = "terminated"


class LedgerEntryType(str, enum.Enum):
     OPENING = "opening"
     RENT = "rent"
     PAYMENT = "payment"
     TRANSFER = "transfer"


@dataclass(frozen=True)
class Obligation:
     """
     One amount owed on a lease: a monthly rent invoice or the opening balance.

     year/month are None for the opening balance, which always sorts first.
     """
     amount: Decimal
     due_date: Optional[date]
     year: Optional[int] = None
     month: Optional[int] = None

     @classmethod
     def opening(cls, amount: Decimal, due_date: Optional[date] = None) -> "Obligation":
          return cls(amount=amount, due_date=due_date)

     @property
     def is_opening(self) -> bool:
          return self.year is None

     @property
     def key(self) -> str:
          if self.is_opening:
               return OPENING_KEY
          return month_key(self.year, self.month)

     @property
     def sort_key(self) -> Tuple[int, int, int]:
          if self.is_opening:
               return (0, 0, 0)
          return (1, self.year, self.month)


@dataclass(frozen=True)
class RentChange:
     """A rent adjustment: new_rent applies from effective_date onward."""
     effective_date: date
     new_rent: Decimal
     previous_rent: Optional[Decimal] = None


@dataclass(frozen=True)
class PaymentEvent:
     """
     A cash-in fact.

     applies_to_months is the label entered with the payment. It is kept for
     display only; allocation pools every payment regardless of label.
     """
     amount: Decimal
     payment_date: date
     applies_to_months: FrozenSet[str] = field(default_factory=frozenset)
     reference: Optional[str] = None
     transfer: bool = False
     description: Optional[str] = None


@dataclass(frozen=True)
class AllocationResult:
     obligation: Obligation
     paid_amount: Decimal
     remaining_balance: Decimal
     status: AllocationStatus

     @property
     def is_paid(self) -> bool:
          return self.status == AllocationStatus.PAID


@dataclass(frozen=True)
class LedgerEntry:
     date: Optional[date]
     entry_type: LedgerEntryType
     description: str
     debit: Decimal
     credit: Decimal
     running_balance: Decimal


@dataclass(frozen=True)
class LedgerSummary:
     total_due: Decimal
     total_paid: Decimal
     current_due: Decimal
     months_due_count: int

     @property
     def credit_balance(self) -> Decimal:
          """Amount the tenant has paid beyond what is due (0 if none)."""
          return max(ZERO, -self.current_due)


@dataclass(frozen=True)
class SettlementOptions:
     use_security_deposit: bool = False
     global_ledger_transfer_amount: Decimal = ZERO


@dataclass(frozen=True)
class Settlement:
     this_lease_current_due: Decimal
     security_deposit_available: Decimal
     security_deposit_applied: Decimal
     global_ledger_balance: Decimal
     available_credit: Decimal
     max_transferable: Decimal
     global_ledger_transferred: Decimal
     final_amount: Decimal

     @property
     def outcome(self) -> str:
          """'owes', 'refund' or 'settled' from the tenant's point of view."""
          if self.final_amount > ZERO:
               return "owes"
          if self.final_amount < ZERO:
               return "refund"
          return "settled"
