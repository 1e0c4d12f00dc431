# routers/admin.py
"""
Maintenance routes.

POST /api/admin/recalculate-fifo re-runs reconciliation on every
non-terminated lease. It is the same operation the request path runs after
each payment, so it only changes rows that have drifted.
"""
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database import get_session
from schemas.lease import ReconcileAllResponse
from services import reconcile_all

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.post("/recalculate-fifo", response_model=ReconcileAllResponse, summary="Reconcile all leases")
def recalculate_fifo(
     dry_run: bool = Query(False, description="Report what would change without writing"),
     as_of: Optional[date] = Query(None),
     db: Session = Depends(get_session),
):
     results = reconcile_all(db, as_of=as_of, dry_run=dry_run)
     return ReconcileAllResponse(
          leases_processed=len(results),
          invoices_billed=sum(r.invoices_billed for r in results),
          invoices_updated=sum(r.invoices_updated for r in results),
          warnings=[w for r in results for w in r.warnings],
     )
