import enum
from sqlalchemy import Column, Integer, String, Numeric, Date, Text, DateTime, ForeignKey, Enum, JSON, func
from sqlalchemy.orm import relationship
from ledger.types import PaymentEvent, to_money
from .base import Base, SoftDeleteMixin


class PaymentMethod(str, enum.Enum):
     CASH = "cash"
     BANK = "bank"
     TRANSFER = "transfer"  # settlement credit moved between leases


class Payment(SoftDeleteMixin, Base):
     """
     Payment model - immutable cash received against a lease.

     rent_months records which months the payer said the money was for.
     It is informational only; allocation pools the amounts FIFO.
     Payments are never updated or hard-deleted, only soft-deleted.
     """
     __tablename__ = "payments"

     id = Column(Integer, primary_key=True, autoincrement=True)
     tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
     lease_id = Column(Integer, ForeignKey("leases.id"), nullable=False, index=True)

     amount = Column(Numeric(12, 2), nullable=False)  # negative only for outgoing transfers
     payment_date = Column(Date, nullable=False)
     rent_months = Column(JSON, nullable=True)  # ["YYYY-MM", ...]
     receipt_number = Column(String(255), nullable=True)
     method = Column(
          Enum(
               PaymentMethod,
               name="payment_method",
               values_callable=lambda e: [m.value for m in e],
          ),
          default=PaymentMethod.CASH,
          nullable=False,
     )
     notes = Column(Text, nullable=True)

     created_at = Column(DateTime, server_default=func.now(), nullable=False)

     # Relationships
     tenant = relationship("Tenant", back_populates="payments")
     lease = relationship("Lease", back_populates="payments")

     def __repr__(self):
          return f"<Payment(id={self.id}, lease_id={self.lease_id}, amount={self.amount}, date={self.payment_date})>"

     def to_event(self) -> PaymentEvent:
          return PaymentEvent(
               amount=to_money(self.amount),
               payment_date=self.payment_date,
               applies_to_months=frozenset(self.rent_months or []),
               reference=self.receipt_number or None,
               transfer=self.method == PaymentMethod.TRANSFER,
               description=self.notes if self.method == PaymentMethod.TRANSFER else None,
          )
