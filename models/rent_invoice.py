from sqlalchemy import Column, Integer, Numeric, Date, Boolean, DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import relationship
from ledger.types import AllocationResult, AllocationStatus, Obligation, ZERO, to_money
from .base import Base


class RentInvoice(Base):
     """
     RentInvoice model - one monthly rent obligation on a lease.

     is_paid and paid_amount are derived data: they are rewritten by FIFO
     reconciliation every time the lease's payments or invoices change.
     """
     __tablename__ = "rent_invoices"
     __table_args__ = (
          UniqueConstraint("lease_id", "year", "month", name="uq_rent_invoices_lease_month"),
     )

     id = Column(Integer, primary_key=True, autoincrement=True)

     # Foreign keys
     lease_id = Column(
          Integer,
          ForeignKey("leases.id", ondelete="CASCADE"),
          nullable=False,
          index=True
     )
     tenant_id = Column(
          Integer,
          ForeignKey("tenants.id"),
          nullable=False,
          index=True
     )

     # Invoice details
     year = Column(Integer, nullable=False)
     month = Column(Integer, nullable=False)  # 1-12
     amount = Column(Numeric(12, 2), nullable=False)
     due_date = Column(Date, nullable=False, index=True)
     is_paid = Column(Boolean, default=False, nullable=False)
     paid_amount = Column(Numeric(12, 2), default=0, nullable=False)

     # Timestamps
     created_at = Column(DateTime, server_default=func.now(), nullable=False)

     # Relationships
     lease = relationship("Lease", back_populates="invoices")

     def __repr__(self):
          return f"<RentInvoice(id={self.id}, {self.year}-{self.month:02d}, amount={self.amount}, paid={self.paid_amount})>"

     @property
     def status(self) -> AllocationStatus:
          if self.is_paid:
               return AllocationStatus.PAID
          if (self.paid_amount or 0) > 0:
               return AllocationStatus.PARTIAL
          return AllocationStatus.UNPAID

     def to_obligation(self) -> Obligation:
          return Obligation(
               amount=to_money(self.amount),
               due_date=self.due_date,
               year=self.year,
               month=self.month,
          )

     def apply_allocation(self, result: AllocationResult) -> None:
          """Store the FIFO outcome for this invoice."""
          self.is_paid = result.is_paid
          self.paid_amount = result.paid_amount

     @classmethod
     def for_obligation(cls, lease, obligation: Obligation) -> "RentInvoice":
          """A new, unpaid invoice row for one generated month."""
          return cls(
               lease_id=lease.id,
               tenant_id=lease.tenant_id,
               year=obligation.year,
               month=obligation.month,
               amount=obligation.amount,
               due_date=obligation.due_date,
               is_paid=False,
               paid_amount=ZERO,
          )
