"""
Rent-ledger exceptions.

Every error carries a stable error code and an HTTP status so the API layer
can render a consistent body:

     {"error_code": "...", "message": "...", "details": {...}}
"""
from typing import Any, Dict, Optional

from fastapi import status


class LedgerError(Exception):
     """Base class for rent-ledger errors."""

     error_code = "ERR_LEDGER"
     status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

     def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
          self.message = message
          self.details = details or {}
          super().__init__(message)


class LedgerValidationError(LedgerError, ValueError):
     """Invalid input: negative amounts, malformed dates, empty lease term."""

     error_code = "ERR_LEDGER_VALIDATION"
     status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class SettlementTransferError(LedgerError):
     """Requested global-ledger transfer exceeds available credit or remaining due."""

     error_code = "ERR_SETTLEMENT_TRANSFER"
     status_code = status.HTTP_400_BAD_REQUEST


class LeaseTerminatedError(LedgerError):
     """Mutation attempted on a lease that has already been terminated."""

     error_code = "ERR_LEASE_TERMINATED"
     status_code = status.HTTP_409_CONFLICT

     def __init__(self, lease_id: Optional[int] = None):
          message = "Lease is terminated"
          if lease_id is not None:
               message = f"Lease with ID {lease_id} is terminated"
          super().__init__(message, details={"lease_id": lease_id})


class StaleSettlementError(LedgerError):
     """Ledger changed between settlement preview and confirmation."""

     error_code = "ERR_SETTLEMENT_STALE"
     status_code = status.HTTP_409_CONFLICT


class ResourceNotFoundError(LedgerError):
     error_code = "ERR_NOT_FOUND"
     status_code = status.HTTP_404_NOT_FOUND

     def __init__(self, resource: str, resource_id: Any = None):
          message = f"{resource} not found"
          if resource_id is not None:
               message = f"{resource} with ID {resource_id} not found"
          super().__init__(message, details={"resource": resource, "id": resource_id})
