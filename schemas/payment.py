# schemas/payment.py
"""
Pydantic schemas for the payments API.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict

from models import PaymentMethod


class PaymentCreate(BaseModel):
     """Request body for POST /api/payments."""

     lease_id: int = Field(..., gt=0, description="Lease the payment is made against")
     amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2, description="Cash received")
     payment_date: date = Field(..., description="Date the cash was received")
     rent_months: List[str] = Field(
          default_factory=list,
          description="Months the payer said this covers (YYYY-MM). Recorded only; allocation is always oldest-first.",
     )
     receipt_number: Optional[str] = Field(None, max_length=255)
     method: PaymentMethod = Field(default=PaymentMethod.CASH, description="cash or bank")
     notes: Optional[str] = None

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "lease_id": 3,
                    "amount": 15000.00,
                    "payment_date": "2025-03-10",
                    "rent_months": ["2025-03"],
                    "receipt_number": "R-1042",
                    "method": "cash"
               }
          }
     )


class PaymentDeleteRequest(BaseModel):
     """Request body for DELETE /api/payments/{id}."""

     reason: str = Field(..., min_length=1, description="Why the payment is being removed (kept in the audit log)")
     deleted_by: Optional[str] = Field(None, max_length=255)

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "reason": "Duplicate entry of receipt R-1042",
                    "deleted_by": "office"
               }
          }
     )


class PaymentResponse(BaseModel):
     """A recorded payment."""

     id: int
     tenant_id: int
     lease_id: int
     amount: Decimal
     payment_date: date
     rent_months: Optional[List[str]] = None
     receipt_number: Optional[str] = None
     method: PaymentMethod
     notes: Optional[str] = None
     is_deleted: bool = False
     deleted_at: Optional[datetime] = None
     deletion_reason: Optional[str] = None

     model_config = ConfigDict(
          from_attributes=True,
          json_schema_extra={
               "example": {
                    "id": 42,
                    "tenant_id": 1,
                    "lease_id": 3,
                    "amount": "15000.00",
                    "payment_date": "2025-03-10",
                    "rent_months": ["2025-03"],
                    "receipt_number": "R-1042",
                    "method": "cash",
                    "notes": None,
                    "is_deleted": False,
                    "deleted_at": None,
                    "deletion_reason": None
               }
          }
     )
