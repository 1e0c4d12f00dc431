# schemas/__init__.py
from .invoice import (
     AllocationResponse,
     RentInvoiceResponse,
)
from .lease import (
     LeaseDatesUpdate,
     LeaseDuesResponse,
     LeaseLedgerResponse,
     LeaseResponse,
     LeaseSettlementResponse,
     LedgerEntryResponse,
     LedgerSummaryResponse,
     ReconcileAllResponse,
     RegenerateResponse,
     RentAdjustmentCreate,
     RentAdjustmentResponse,
     SettlementResponse,
     TenantDuesResponse,
     TerminateRequest,
)
from .payment import (
     PaymentCreate,
     PaymentDeleteRequest,
     PaymentResponse,
)

__all__ = [
     "AllocationResponse",
     "RentInvoiceResponse",
     "LeaseDatesUpdate",
     "LeaseDuesResponse",
     "LeaseLedgerResponse",
     "LeaseResponse",
     "LeaseSettlementResponse",
     "LedgerEntryResponse",
     "LedgerSummaryResponse",
     "ReconcileAllResponse",
     "RegenerateResponse",
     "RentAdjustmentCreate",
     "RentAdjustmentResponse",
     "SettlementResponse",
     "TenantDuesResponse",
     "TerminateRequest",
     "PaymentCreate",
     "PaymentDeleteRequest",
     "PaymentResponse",
]
