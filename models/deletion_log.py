"""
DeletionLog model - audit trail for soft-deleted records.

A snapshot of the record is stored as it was before deletion so the
history survives even if the row is later purged.
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, JSON, func
from .base import Base


class DeletionLog(Base):
     __tablename__ = "deletion_logs"

     id = Column(Integer, primary_key=True, autoincrement=True)
     record_type = Column(String(50), nullable=False, index=True)  # payment, tenant, shop, lease
     record_id = Column(Integer, nullable=False)
     record_details = Column(JSON, nullable=False)
     reason = Column(Text, nullable=False)
     deleted_by = Column(String(255), nullable=True)
     deleted_at = Column(DateTime, server_default=func.now(), nullable=False)

     def __repr__(self):
          return f"<DeletionLog(id={self.id}, {self.record_type}#{self.record_id})>"
