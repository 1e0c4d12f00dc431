"""
Owner model - a landlord profile that shops are registered to.
"""
from sqlalchemy import Column, Integer, String, Text
from sqlalchemy.orm import relationship
from .base import Base


class Owner(Base):
     __tablename__ = "owners"

     id = Column(Integer, primary_key=True, autoincrement=True)
     name = Column(String(255), nullable=False)
     phone = Column(String(255), nullable=True)
     email = Column(String(255), nullable=True)
     address = Column(Text, nullable=True)

     # Bank account deposits are made to
     bank_name = Column(String(255), nullable=True)
     bank_account_number = Column(String(255), nullable=True)
     bank_branch = Column(String(255), nullable=True)

     shops = relationship("Shop", back_populates="owner")

     def __repr__(self):
          return f"<Owner(id={self.id}, name='{self.name}')>"
