"""
Rent-ledger engine.

Pure computation over plain records: invoice generation, FIFO allocation,
ledger projection and termination settlement. No database or HTTP access.
"""
from .allocation import PAID_AMOUNT_TOLERANCE, allocate, months_due, needs_update
from .exceptions import (
     LedgerError,
     LedgerValidationError,
     LeaseTerminatedError,
     ResourceNotFoundError,
     SettlementTransferError,
     StaleSettlementError,
)
from .invoices import DUE_DAY, generate_obligations, original_rent
from .projection import elapsed, project, summarize
from .settlement import compute_settlement, ensure_can_terminate, lease_display_status
from .types import (
     AllocationResult,
     AllocationStatus,
     LeaseStatus,
     LedgerEntry,
     LedgerEntryType,
     LedgerSummary,
     Obligation,
     PaymentEvent,
     RentChange,
     Settlement,
     SettlementOptions,
)

__all__ = [
     "PAID_AMOUNT_TOLERANCE",
     "DUE_DAY",
     "allocate",
     "months_due",
     "needs_update",
     "generate_obligations",
     "original_rent",
     "elapsed",
     "project",
     "summarize",
     "compute_settlement",
     "ensure_can_terminate",
     "lease_display_status",
     "LedgerError",
     "LedgerValidationError",
     "LeaseTerminatedError",
     "ResourceNotFoundError",
     "SettlementTransferError",
     "StaleSettlementError",
     "AllocationResult",
     "AllocationStatus",
     "LeaseStatus",
     "LedgerEntry",
     "LedgerEntryType",
     "LedgerSummary",
     "Obligation",
     "PaymentEvent",
     "RentChange",
     "Settlement",
     "SettlementOptions",
]
