import enum
from sqlalchemy import Column, Integer, String, Numeric, Text, ForeignKey, Enum
from sqlalchemy.orm import relationship
from .base import Base, SoftDeleteMixin


class ShopStatus(str, enum.Enum):
     VACANT = "vacant"
     OCCUPIED = "occupied"


class Shop(SoftDeleteMixin, Base):
     """
     Shop model - a leasable unit in the market building.
     A shop becomes vacant again when its lease is terminated.
     """
     __tablename__ = "shops"

     id = Column(Integer, primary_key=True, autoincrement=True)
     shop_number = Column(String(50), nullable=False)
     floor = Column(String(50), nullable=False)  # ground, first, second, subedari
     square_feet = Column(Numeric(10, 2), nullable=True)
     status = Column(
          Enum(
               ShopStatus,
               name="shop_status",
               values_callable=lambda e: [m.value for m in e],
          ),
          default=ShopStatus.VACANT,
          nullable=False,
     )
     owner_id = Column(Integer, ForeignKey("owners.id"), nullable=True)  # null if common ownership
     description = Column(Text, nullable=True)

     # Relationships
     owner = relationship("Owner", back_populates="shops")
     leases = relationship("Lease", back_populates="shop")

     def __repr__(self):
          return f"<Shop(id={self.id}, shop_number='{self.shop_number}', status='{self.status.value}')>"
