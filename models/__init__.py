from .base import Base
from .owner import Owner
from .shop import Shop, ShopStatus
from .tenant import Tenant
from .lease import Lease
from .rent_adjustment import RentAdjustment
from .rent_invoice import RentInvoice
from .payment import Payment, PaymentMethod
from .deletion_log import DeletionLog
from .lease_settlement import LeaseSettlement

__all__ = [
     "Base",
     "Owner",
     "Shop",
     "ShopStatus",
     "Tenant",
     "Lease",
     "RentAdjustment",
     "RentInvoice",
     "Payment",
     "PaymentMethod",
     "DeletionLog",
     "LeaseSettlement",
]
