# services/__init__.py
from .invoice_service import InvoiceService
from .ledger_service import (
     LeaseLedger,
     build_lease_ledger,
     compute_ledger_fingerprint,
     global_ledger_balance,
     tenant_dues,
)
from .payment_service import record_payment, soft_delete_payment
from .reconcile_service import ReconcileResult, reconcile_all, reconcile_lease
from .settlement_service import SettlementPreview, confirm_termination, preview

__all__ = [
     "InvoiceService",
     "LeaseLedger",
     "build_lease_ledger",
     "compute_ledger_fingerprint",
     "global_ledger_balance",
     "tenant_dues",
     "record_payment",
     "soft_delete_payment",
     "ReconcileResult",
     "reconcile_all",
     "reconcile_lease",
     "SettlementPreview",
     "confirm_termination",
     "preview",
]
