# routers/tenants.py
"""
Tenant dues across all of a tenant's active leases.
"""
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database import get_session
from ledger.exceptions import ResourceNotFoundError
from ledger.types import ZERO
from models import Tenant
from schemas.lease import LeaseDuesResponse, LedgerSummaryResponse, TenantDuesResponse
from services import tenant_dues

router = APIRouter(prefix="/api/tenants", tags=["tenants"])


@router.get("/{tenant_id}/dues", response_model=TenantDuesResponse, summary="Tenant dues")
def get_tenant_dues(
     tenant_id: int,
     as_of: Optional[date] = Query(None),
     db: Session = Depends(get_session),
):
     """
     Per-lease dues for each non-terminated lease. Each lease is computed on
     its own; total_due is their sum, so credit on one lease offsets dues on
     another only in the total.
     """
     tenant = db.query(Tenant).filter(Tenant.id == tenant_id, Tenant.is_deleted.is_(False)).first()
     if not tenant:
          raise ResourceNotFoundError("Tenant", tenant_id)

     rows = tenant_dues(db, tenant_id, as_of=as_of)
     return TenantDuesResponse(
          tenant_id=tenant_id,
          leases=[
               LeaseDuesResponse(
                    lease_id=lease.id,
                    shop_id=lease.shop_id,
                    summary=LedgerSummaryResponse.model_validate(summary),
               )
               for lease, summary in rows
          ],
          total_due=sum((summary.current_due for _, summary in rows), ZERO),
     )
