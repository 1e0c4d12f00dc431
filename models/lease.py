from sqlalchemy import Column, Integer, Numeric, Date, Text, DateTime, ForeignKey, Enum, func
from sqlalchemy.orm import relationship
from ledger.types import LeaseStatus
from .base import Base


class Lease(Base):
     """
     Lease model - rental agreement between a tenant and a shop.

     monthly_rent always holds the current rent; the rent in force for past
     months is recovered from rent_adjustments.
     """
     __tablename__ = "leases"

     id = Column(Integer, primary_key=True, autoincrement=True)
     tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
     shop_id = Column(Integer, ForeignKey("shops.id"), nullable=False, index=True)

     # Lease period
     start_date = Column(Date, nullable=False)
     end_date = Column(Date, nullable=False)

     # Pricing
     monthly_rent = Column(Numeric(12, 2), nullable=False)
     opening_due_balance = Column(Numeric(12, 2), default=0, nullable=False)
     security_deposit = Column(Numeric(12, 2), nullable=False)
     security_deposit_used = Column(Numeric(12, 2), default=0, nullable=False)

     status = Column(
          Enum(
               LeaseStatus,
               name="lease_status",
               values_callable=lambda e: [m.value for m in e],
          ),
          default=LeaseStatus.ACTIVE,
          nullable=False,
          index=True,
     )
     notes = Column(Text, nullable=True)
     termination_notes = Column(Text, nullable=True)

     # Timestamps
     created_at = Column(DateTime, server_default=func.now(), nullable=False)

     # Relationships
     tenant = relationship("Tenant", back_populates="leases")
     shop = relationship("Shop", back_populates="leases")
     invoices = relationship("RentInvoice", back_populates="lease", cascade="all, delete-orphan")
     rent_adjustments = relationship(
          "RentAdjustment",
          back_populates="lease",
          order_by="RentAdjustment.effective_date",
          cascade="all, delete-orphan",
     )
     payments = relationship("Payment", back_populates="lease")
     settlement = relationship("LeaseSettlement", back_populates="lease", uselist=False)

     def __repr__(self):
          return f"<Lease(id={self.id}, tenant_id={self.tenant_id}, shop_id={self.shop_id}, status='{self.status.value}')>"

     @property
     def is_terminated(self) -> bool:
          return self.status == LeaseStatus.TERMINATED

     @property
     def security_deposit_available(self):
          return (self.security_deposit or 0) - (self.security_deposit_used or 0)
