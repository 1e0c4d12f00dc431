# routers/invoices.py
"""
Monthly billing.

POST /api/invoices/generate-monthly invoices every month that has come due
on a non-terminated lease and has no invoice yet, then re-applies payments.
Existing invoices are never touched, so calling it twice in a month bills
nothing the second time.
"""
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database import get_session
from schemas.lease import ReconcileAllResponse
from services import reconcile_all

router = APIRouter(prefix="/api/invoices", tags=["invoices"])


@router.post("/generate-monthly", response_model=ReconcileAllResponse, summary="Bill months that have come due")
def generate_monthly(
     as_of: Optional[date] = Query(None, description="Bill through this day's month (default: today)"),
     db: Session = Depends(get_session),
):
     results = reconcile_all(db, as_of=as_of)
     return ReconcileAllResponse(
          leases_processed=len(results),
          invoices_billed=sum(r.invoices_billed for r in results),
          invoices_updated=sum(r.invoices_updated for r in results),
          warnings=[w for r in results for w in r.warnings],
     )
