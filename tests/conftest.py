"""
Centralized Test Configuration.

Every test runs against a fresh in-memory SQLite database. DATABASE_URL is
set before the application is imported so database.py builds a SQLite
engine (StaticPool, one shared connection) instead of MS SQL.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from database import SessionLocal, engine
from models import Base, Lease, Shop, ShopStatus, Tenant
from services import InvoiceService


@pytest.fixture
def db():
     Base.metadata.create_all(bind=engine)
     session = SessionLocal()
     try:
          yield session
     finally:
          session.close()
          Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
     from main import app
     with TestClient(app) as test_client:
          yield test_client


@pytest.fixture
def tenant(db):
     tenant = Tenant(name="Rahim Traders", phone="01700000000", business_name="Rahim Traders")
     db.add(tenant)
     db.commit()
     return tenant


def _next_shop_number(db) -> str:
     return f"G-{db.query(Shop).count() + 1:02d}"


@pytest.fixture
def make_lease(db, tenant):
     """
     Factory: create a lease with its invoices generated through `as_of`.

     Usage:
          lease = make_lease(start=date(2025, 1, 1), rent="10000", as_of=date(2025, 3, 20))
     """
     def _make(
          start: date = date(2025, 1, 1),
          end: date = date(2025, 12, 31),
          rent="10000",
          opening="0",
          deposit="0",
          as_of: date = date(2025, 3, 20),
          owner_tenant: Tenant = None,
     ) -> Lease:
          shop = Shop(shop_number=_next_shop_number(db), floor="ground", status=ShopStatus.OCCUPIED)
          db.add(shop)
          db.flush()
          lease = Lease(
               tenant_id=(owner_tenant or tenant).id,
               shop_id=shop.id,
               start_date=start,
               end_date=end,
               monthly_rent=Decimal(rent),
               opening_due_balance=Decimal(opening),
               security_deposit=Decimal(deposit),
               security_deposit_used=Decimal("0"),
          )
          db.add(lease)
          db.commit()
          InvoiceService.regenerate_lease_invoices(db, lease.id, today=as_of)
          return lease

     return _make
