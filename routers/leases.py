# routers/leases.py
"""
Lease API routes: ledger, lease dates, rent adjustments, invoice
regeneration and termination settlement.

Ledger errors raised by the services (missing lease, validation, terminated
lease, stale or over-drawn settlement) are rendered by the handler
registered in main.py.
"""
import os
from datetime import date
from decimal import Decimal
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from database import get_session
from ledger import SettlementOptions, lease_display_status
from models import Lease
from schemas.invoice import AllocationResponse, RentInvoiceResponse
from schemas.lease import (
     LeaseDatesUpdate,
     LeaseLedgerResponse,
     LeaseResponse,
     LeaseSettlementResponse,
     LedgerEntryResponse,
     LedgerSummaryResponse,
     RegenerateResponse,
     RentAdjustmentCreate,
     RentAdjustmentResponse,
     SettlementResponse,
     TerminateRequest,
)
from services import InvoiceService, build_lease_ledger, confirm_termination, preview
from services.ledger_service import get_lease, lease_invoices

router = APIRouter(prefix="/api/leases", tags=["leases"])

LEASE_EXPIRY_WARNING_DAYS = int(os.getenv("LEASE_EXPIRY_WARNING_DAYS", "30"))


def _lease_to_response(lease: Lease, today: Optional[date] = None) -> LeaseResponse:
     return LeaseResponse(
          id=lease.id,
          tenant_id=lease.tenant_id,
          shop_id=lease.shop_id,
          start_date=lease.start_date,
          end_date=lease.end_date,
          monthly_rent=lease.monthly_rent,
          opening_due_balance=lease.opening_due_balance,
          security_deposit=lease.security_deposit,
          security_deposit_used=lease.security_deposit_used,
          status=lease.status,
          display_status=lease_display_status(
               lease.status, lease.end_date, today=today, warning_days=LEASE_EXPIRY_WARNING_DAYS
          ),
          notes=lease.notes,
          termination_notes=lease.termination_notes,
     )


@router.get("/{lease_id}", response_model=LeaseResponse, summary="Get lease")
def read_lease(
     lease_id: int,
     as_of: Optional[date] = Query(None, description="Compute display status for this day (default: today)"),
     db: Session = Depends(get_session),
):
     return _lease_to_response(get_lease(db, lease_id), today=as_of)


@router.patch("/{lease_id}", response_model=LeaseResponse, summary="Change lease dates")
def update_lease_dates(
     lease_id: int,
     body: LeaseDatesUpdate,
     as_of: Optional[date] = Query(None),
     db: Session = Depends(get_session),
):
     """Move the lease start and/or end date; invoices are rebuilt from the new start."""
     lease = InvoiceService.update_lease_dates(
          db,
          lease_id,
          start_date=body.start_date,
          end_date=body.end_date,
          today=as_of,
     )
     return _lease_to_response(lease, today=as_of)


@router.get("/{lease_id}/ledger", response_model=LeaseLedgerResponse, summary="Lease ledger")
def get_lease_ledger(
     lease_id: int,
     as_of: Optional[date] = Query(None, description="Count months up to this day (default: today)"),
     db: Session = Depends(get_session),
):
     """
     Running-balance ledger, dues summary and month-by-month FIFO allocation.
     Invoices for months after as_of are listed but not counted.
     """
     lease = get_lease(db, lease_id)
     ledger = build_lease_ledger(db, lease, as_of=as_of)
     return LeaseLedgerResponse(
          lease_id=lease.id,
          entries=[LedgerEntryResponse.from_entry(e) for e in ledger.entries],
          summary=LedgerSummaryResponse.model_validate(ledger.summary),
          allocations=[AllocationResponse.from_result(r) for r in ledger.allocations],
          invoices=[RentInvoiceResponse.model_validate(inv) for inv in lease_invoices(db, lease.id)],
          fingerprint=ledger.fingerprint,
     )


@router.get("/{lease_id}/settlement", response_model=SettlementResponse, summary="Preview termination settlement")
def get_settlement(
     lease_id: int,
     use_security_deposit: bool = Query(False),
     global_ledger_amount: Decimal = Query(Decimal("0"), ge=0),
     as_of: Optional[date] = Query(None),
     db: Session = Depends(get_session),
):
     """
     What terminating the lease would settle to. Pass the returned fingerprint
     to PATCH /terminate to confirm exactly these numbers.
     """
     result = preview(
          db,
          lease_id,
          SettlementOptions(
               use_security_deposit=use_security_deposit,
               global_ledger_transfer_amount=global_ledger_amount,
          ),
          as_of=as_of,
     )
     s = result.settlement
     return SettlementResponse(
          lease_id=lease_id,
          this_lease_current_due=s.this_lease_current_due,
          security_deposit_available=s.security_deposit_available,
          security_deposit_applied=s.security_deposit_applied,
          global_ledger_balance=s.global_ledger_balance,
          available_credit=s.available_credit,
          max_transferable=s.max_transferable,
          global_ledger_transferred=s.global_ledger_transferred,
          final_amount=s.final_amount,
          outcome=s.outcome,
          fingerprint=result.fingerprint,
     )


@router.patch("/{lease_id}/terminate", response_model=LeaseSettlementResponse, summary="Terminate lease")
def terminate_lease(
     lease_id: int,
     body: TerminateRequest,
     as_of: Optional[date] = Query(None),
     db: Session = Depends(get_session),
):
     """
     Confirm a previewed settlement: move any credit transfer, use the
     deposit, terminate the lease and free its shop.
     Returns 409 if the ledger changed since the preview.
     """
     record = confirm_termination(
          db,
          lease_id,
          expected_fingerprint=body.fingerprint,
          options=SettlementOptions(
               use_security_deposit=body.use_security_deposit,
               global_ledger_transfer_amount=body.global_ledger_amount,
          ),
          notes=body.termination_notes,
          confirmed_by=body.confirmed_by,
          as_of=as_of,
     )
     return record


@router.post(
     "/{lease_id}/rent-adjustments",
     response_model=RentAdjustmentResponse,
     status_code=status.HTTP_201_CREATED,
     summary="Adjust rent",
)
def create_rent_adjustment(
     lease_id: int,
     body: RentAdjustmentCreate,
     as_of: Optional[date] = Query(None),
     db: Session = Depends(get_session),
):
     """Record a rent change, regenerate the lease's invoices and reconcile."""
     return InvoiceService.adjust_rent(
          db,
          lease_id,
          new_rent=body.new_rent,
          effective_date=body.effective_date,
          agreement_terms=body.agreement_terms,
          notes=body.notes,
          today=as_of,
     )


@router.post("/{lease_id}/regenerate-invoices", response_model=RegenerateResponse, summary="Regenerate invoices")
def regenerate_invoices(
     lease_id: int,
     as_of: Optional[date] = Query(None),
     db: Session = Depends(get_session),
):
     """Delete and rebuild every invoice on the lease from its start month."""
     return InvoiceService.regenerate_lease_invoices(db, lease_id, today=as_of)
