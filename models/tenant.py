from sqlalchemy import Column, Integer, String, Text, DateTime, func
from sqlalchemy.orm import relationship
from .base import Base, SoftDeleteMixin


class Tenant(SoftDeleteMixin, Base):
     """
     Tenant model - a person or business renting one or more shops.

     Arrears carried over from before the system are recorded per lease in
     Lease.opening_due_balance.
     """
     __tablename__ = "tenants"

     id = Column(Integer, primary_key=True, autoincrement=True)
     name = Column(String(255), nullable=False)
     phone = Column(String(50), nullable=False)
     email = Column(String(255), nullable=True)
     business_name = Column(String(255), nullable=True)
     nid_passport = Column(String(255), nullable=True)
     permanent_address = Column(Text, nullable=True)
     notes = Column(Text, nullable=True)

     created_at = Column(DateTime, server_default=func.now(), nullable=False)

     # Relationships
     leases = relationship("Lease", back_populates="tenant")
     payments = relationship("Payment", back_populates="tenant")

     def __repr__(self):
          return f"<Tenant(id={self.id}, name='{self.name}')>"
