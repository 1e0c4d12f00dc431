from sqlalchemy.orm import DeclarativeBase, declared_attr
from sqlalchemy import Column, Boolean, DateTime, String, Text


class Base(DeclarativeBase):
     """
     Base class for all SQLAlchemy models.
     Provides common configuration and mixins.
     """

     @declared_attr.directive
     def __tablename__(cls) -> str:
          """
          Automatically generate table name from class name.
          Example: RentInvoice -> rent_invoices
          """
          import re
          name = re.sub(r'(?<!^)(?=[A-Z])', '_', cls.__name__).lower()
          # Pluralize (simple version)
          if name.endswith('y'):
               return name[:-1] + 'ies'
          elif name.endswith('s'):
               return name + 'es'
          return name + 's'


class SoftDeleteMixin:
     """
     Soft-delete columns shared by records that must keep their history.
     Deleted rows stay in the table and are filtered out by callers.
     """
     is_deleted = Column(Boolean, default=False, nullable=False)
     deleted_at = Column(DateTime, nullable=True)
     deletion_reason = Column(Text, nullable=True)
     deleted_by = Column(String(255), nullable=True)
