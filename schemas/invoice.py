# schemas/invoice.py
"""
Pydantic schemas for rent invoices and their FIFO allocation.
"""
from datetime import date
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict

from ledger import AllocationStatus


class RentInvoiceResponse(BaseModel):
     """A stored monthly invoice with its reconciled paid state."""
     id: int
     lease_id: int
     year: int
     month: int = Field(..., ge=1, le=12)
     amount: Decimal
     due_date: date
     is_paid: bool
     paid_amount: Decimal
     status: AllocationStatus

     model_config = ConfigDict(
          from_attributes=True,
          json_schema_extra={
               "example": {
                    "id": 12,
                    "lease_id": 3,
                    "year": 2025,
                    "month": 2,
                    "amount": "10000.00",
                    "due_date": "2025-02-05",
                    "is_paid": False,
                    "paid_amount": "5000.00",
                    "status": "partial"
               }
          }
     )


class AllocationResponse(BaseModel):
     """FIFO outcome for one obligation. key is YYYY-MM or "opening"."""
     key: str
     year: Optional[int] = None
     month: Optional[int] = None
     due_date: Optional[date] = None
     amount: Decimal
     paid_amount: Decimal
     remaining_balance: Decimal
     status: AllocationStatus

     @classmethod
     def from_result(cls, result) -> "AllocationResponse":
          obligation = result.obligation
          return cls(
               key=obligation.key,
               year=obligation.year,
               month=obligation.month,
               due_date=obligation.due_date,
               amount=obligation.amount,
               paid_amount=result.paid_amount,
               remaining_balance=result.remaining_balance,
               status=result.status,
          )

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "key": "2025-01",
                    "year": 2025,
                    "month": 1,
                    "due_date": "2025-01-05",
                    "amount": "10000.00",
                    "paid_amount": "10000.00",
                    "remaining_balance": "0.00",
                    "status": "paid"
               }
          }
     )
