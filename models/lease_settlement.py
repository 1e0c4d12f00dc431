"""
LeaseSettlement model - immutable record of a confirmed lease termination.

One row per terminated lease. It keeps the amounts the operator agreed to,
plus the ledger fingerprint they were computed from, so a settlement can be
audited later without re-deriving it from payments that may since have been
deleted.
"""
from sqlalchemy import Column, Integer, String, Numeric, Text, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from .base import Base


class LeaseSettlement(Base):
     __tablename__ = "lease_settlements"

     id = Column(Integer, primary_key=True, autoincrement=True)
     lease_id = Column(
          Integer,
          ForeignKey("leases.id", ondelete="NO ACTION"),
          nullable=False,
          unique=True,  # A lease is terminated once
          index=True
     )

     this_lease_current_due = Column(Numeric(12, 2), nullable=False)
     security_deposit_available = Column(Numeric(12, 2), nullable=False)
     security_deposit_applied = Column(Numeric(12, 2), nullable=False)
     global_ledger_balance = Column(Numeric(12, 2), nullable=False)
     global_ledger_transferred = Column(Numeric(12, 2), nullable=False)
     final_amount = Column(Numeric(12, 2), nullable=False)

     ledger_fingerprint = Column(String(64), nullable=False)  # SHA-256 hex length
     confirmed_by = Column(String(255), nullable=True)
     notes = Column(Text, nullable=True)
     confirmed_at = Column(DateTime, server_default=func.now(), nullable=False)

     lease = relationship("Lease", back_populates="settlement", uselist=False)

     def __repr__(self):
          return f"<LeaseSettlement(id={self.id}, lease_id={self.lease_id}, final_amount={self.final_amount})>"
