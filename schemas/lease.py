# schemas/lease.py
"""
Pydantic schemas for lease ledger, rent adjustment and settlement APIs.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict

from ledger import LeaseStatus, LedgerEntryType
from .invoice import AllocationResponse, RentInvoiceResponse


class LeaseResponse(BaseModel):
     """Lease with its stored status and the status shown for today."""
     id: int
     tenant_id: int
     shop_id: int
     start_date: date
     end_date: date
     monthly_rent: Decimal
     opening_due_balance: Decimal
     security_deposit: Decimal
     security_deposit_used: Decimal
     status: LeaseStatus
     display_status: LeaseStatus
     notes: Optional[str] = None
     termination_notes: Optional[str] = None

     model_config = ConfigDict(
          from_attributes=True,
          json_schema_extra={
               "example": {
                    "id": 3,
                    "tenant_id": 1,
                    "shop_id": 7,
                    "start_date": "2025-01-01",
                    "end_date": "2025-12-31",
                    "monthly_rent": "10000.00",
                    "opening_due_balance": "0.00",
                    "security_deposit": "30000.00",
                    "security_deposit_used": "0.00",
                    "status": "active",
                    "display_status": "expiring_soon",
                    "notes": None,
                    "termination_notes": None
               }
          }
     )


class LeaseDatesUpdate(BaseModel):
     """Request body for PATCH /api/leases/{id}. Omitted dates are kept."""
     start_date: Optional[date] = None
     end_date: Optional[date] = None

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "end_date": "2026-06-30"
               }
          }
     )


class LedgerEntryResponse(BaseModel):
     entry_date: Optional[date] = None
     entry_type: LedgerEntryType
     description: str
     debit: Decimal
     credit: Decimal
     running_balance: Decimal

     @classmethod
     def from_entry(cls, entry) -> "LedgerEntryResponse":
          return cls(
               entry_date=entry.date,
               entry_type=entry.entry_type,
               description=entry.description,
               debit=entry.debit,
               credit=entry.credit,
               running_balance=entry.running_balance,
          )


class LedgerSummaryResponse(BaseModel):
     """current_due is negative when the tenant holds a credit."""
     total_due: Decimal
     total_paid: Decimal
     current_due: Decimal
     credit_balance: Decimal
     months_due_count: int

     model_config = ConfigDict(from_attributes=True)


class LeaseLedgerResponse(BaseModel):
     """Response for GET /api/leases/{id}/ledger."""
     lease_id: int
     entries: List[LedgerEntryResponse]
     summary: LedgerSummaryResponse
     allocations: List[AllocationResponse]
     invoices: List[RentInvoiceResponse]
     fingerprint: str = Field(..., description="Ledger state hash; changes whenever an invoice or payment does")


class RentAdjustmentCreate(BaseModel):
     """Request body for POST /api/leases/{id}/rent-adjustments."""
     new_rent: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
     effective_date: date = Field(..., description="First day the new rent applies")
     agreement_terms: Optional[str] = None
     notes: Optional[str] = None

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "new_rent": 12000.00,
                    "effective_date": "2025-03-01",
                    "agreement_terms": "Annual increase per clause 4"
               }
          }
     )


class RentAdjustmentResponse(BaseModel):
     id: int
     lease_id: int
     previous_rent: Decimal
     new_rent: Decimal
     adjustment_amount: Decimal
     effective_date: date
     agreement_terms: Optional[str] = None
     notes: Optional[str] = None

     model_config = ConfigDict(from_attributes=True)


class RegenerateResponse(BaseModel):
     lease_id: int
     invoices_checked: int
     invoices_updated: int
     invoices_billed: int = 0
     warnings: List[str] = Field(default_factory=list)

     model_config = ConfigDict(from_attributes=True)


class SettlementResponse(BaseModel):
     """Response for GET /api/leases/{id}/settlement."""
     lease_id: int
     this_lease_current_due: Decimal
     security_deposit_available: Decimal
     security_deposit_applied: Decimal
     global_ledger_balance: Decimal
     available_credit: Decimal
     max_transferable: Decimal
     global_ledger_transferred: Decimal
     final_amount: Decimal
     outcome: str = Field(..., description="owes, refund or settled")
     fingerprint: str = Field(..., description="Send back unchanged when confirming the termination")

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "lease_id": 3,
                    "this_lease_current_due": "8000.00",
                    "security_deposit_available": "3000.00",
                    "security_deposit_applied": "3000.00",
                    "global_ledger_balance": "-4000.00",
                    "available_credit": "4000.00",
                    "max_transferable": "4000.00",
                    "global_ledger_transferred": "4000.00",
                    "final_amount": "1000.00",
                    "outcome": "owes",
                    "fingerprint": "9f86d081884c7d65..."
               }
          }
     )


class TerminateRequest(BaseModel):
     """Request body for PATCH /api/leases/{id}/terminate."""
     fingerprint: str = Field(..., min_length=64, max_length=64, description="From the settlement preview")
     use_security_deposit: bool = False
     global_ledger_amount: Decimal = Field(default=Decimal("0"), ge=0, max_digits=12, decimal_places=2)
     termination_notes: Optional[str] = None
     confirmed_by: Optional[str] = Field(None, max_length=255)

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "fingerprint": "9f86d081884c7d659a2feaa0c55ad015a3bf4f1b2b0b822cd15d6c15b0f00a08",
                    "use_security_deposit": True,
                    "global_ledger_amount": 4000.00,
                    "termination_notes": "Tenant moved out"
               }
          }
     )


class LeaseSettlementResponse(BaseModel):
     """The confirmed settlement stored for a terminated lease."""
     id: int
     lease_id: int
     this_lease_current_due: Decimal
     security_deposit_available: Decimal
     security_deposit_applied: Decimal
     global_ledger_balance: Decimal
     global_ledger_transferred: Decimal
     final_amount: Decimal
     ledger_fingerprint: str
     confirmed_by: Optional[str] = None
     notes: Optional[str] = None
     confirmed_at: Optional[datetime] = None

     model_config = ConfigDict(from_attributes=True)


class LeaseDuesResponse(BaseModel):
     lease_id: int
     shop_id: int
     summary: LedgerSummaryResponse


class TenantDuesResponse(BaseModel):
     """Response for GET /api/tenants/{id}/dues."""
     tenant_id: int
     leases: List[LeaseDuesResponse]
     total_due: Decimal

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "tenant_id": 1,
                    "leases": [],
                    "total_due": "0.00"
               }
          }
     )


class ReconcileAllResponse(BaseModel):
     """Response for POST /api/admin/recalculate-fifo and /api/invoices/generate-monthly."""
     leases_processed: int
     invoices_billed: int = 0
     invoices_updated: int
     warnings: List[str] = Field(default_factory=list)
