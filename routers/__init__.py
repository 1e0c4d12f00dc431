# routers/__init__.py
from .admin import router as admin_router
from .invoices import router as invoices_router
from .leases import router as leases_router
from .payments import router as payments_router
from .tenants import router as tenants_router

__all__ = [
     "admin_router",
     "invoices_router",
     "leases_router",
     "payments_router",
     "tenants_router",
]
