"""
RentAdjustment model - history of rent changes on a lease.
The invoice generator uses it to pick the rent in force for each month.
"""
from sqlalchemy import Column, Integer, Numeric, Date, Text, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from .base import Base


class RentAdjustment(Base):
     __tablename__ = "rent_adjustments"

     id = Column(Integer, primary_key=True, autoincrement=True)
     lease_id = Column(
          Integer,
          ForeignKey("leases.id", ondelete="CASCADE"),
          nullable=False,
          index=True
     )
     previous_rent = Column(Numeric(12, 2), nullable=False)
     new_rent = Column(Numeric(12, 2), nullable=False)
     adjustment_amount = Column(Numeric(12, 2), nullable=False)  # positive for increase
     effective_date = Column(Date, nullable=False)
     agreement_terms = Column(Text, nullable=True)
     notes = Column(Text, nullable=True)
     created_at = Column(DateTime, server_default=func.now(), nullable=False)

     lease = relationship("Lease", back_populates="rent_adjustments")

     def __repr__(self):
          return f"<RentAdjustment(id={self.id}, lease_id={self.lease_id}, new_rent={self.new_rent}, effective_date={self.effective_date})>"
