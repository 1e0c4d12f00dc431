# routers/payments.py
"""
Payment API.

POST /api/payments: record cash received on a lease and reconcile it.
DELETE /api/payments/{id}: soft-delete with a reason, keep an audit copy, reconcile.
Payments are never edited; a wrong entry is deleted and entered again.
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.orm import Session

from database import get_session
from schemas.payment import PaymentCreate, PaymentDeleteRequest, PaymentResponse
from services import record_payment, soft_delete_payment

router = APIRouter(prefix="/api/payments", tags=["payments"])


@router.post(
     "",
     response_model=PaymentResponse,
     status_code=status.HTTP_201_CREATED,
     summary="Record payment",
)
def create_payment(
     body: PaymentCreate,
     as_of: Optional[date] = Query(None),
     db: Session = Depends(get_session),
):
     """
     Record a payment.

     rent_months is stored as the payer's note. The amount is pooled with
     the lease's other payments and applied to the oldest unpaid month first.
     """
     return record_payment(
          db,
          lease_id=body.lease_id,
          amount=body.amount,
          payment_date=body.payment_date,
          rent_months=body.rent_months,
          receipt_number=body.receipt_number,
          method=body.method,
          notes=body.notes,
          as_of=as_of,
     )


@router.delete("/{payment_id}", response_model=PaymentResponse, summary="Soft-delete payment")
def delete_payment(
     payment_id: int,
     body: PaymentDeleteRequest = Body(...),
     as_of: Optional[date] = Query(None),
     db: Session = Depends(get_session),
):
     return soft_delete_payment(
          db,
          payment_id,
          reason=body.reason,
          deleted_by=body.deleted_by,
          as_of=as_of,
     )
