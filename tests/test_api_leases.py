"""
API tests for lease ledger, rent adjustment, tenant dues and termination.
"""
from datetime import date
from decimal import Decimal

from ledger import LeaseStatus
from models import Lease, LeaseSettlement, Payment, PaymentMethod, Shop, ShopStatus

AS_OF = "2025-03-20"


def _pay(client, lease_id, amount, payment_date="2025-03-01"):
     response = client.post(
          "/api/payments",
          params={"as_of": AS_OF},
          json={"lease_id": lease_id, "amount": amount, "payment_date": payment_date},
     )
     assert response.status_code == 201
     return response.json()


def _preview(client, lease_id, **params):
     params.setdefault("as_of", AS_OF)
     return client.get(f"/api/leases/{lease_id}/settlement", params=params)


class TestLeaseEndpoints:

     def test_get_lease_with_display_status(self, client, make_lease):
          lease = make_lease(end=date(2025, 4, 10))

          response = client.get(f"/api/leases/{lease.id}", params={"as_of": AS_OF})

          assert response.status_code == 200
          body = response.json()
          assert body["status"] == "active"
          assert body["display_status"] == "expiring_soon"

     def test_unknown_lease_is_404(self, client):
          for path in ("/api/leases/999", "/api/leases/999/ledger"):
               response = client.get(path)
               assert response.status_code == 404
               assert response.json()["error_code"] == "ERR_NOT_FOUND"

     def test_patch_lease_end_date(self, client, make_lease):
          lease = make_lease(as_of=date(2025, 6, 1))

          response = client.patch(
               f"/api/leases/{lease.id}", params={"as_of": "2025-06-01"}, json={"end_date": "2025-04-30"},
          )

          assert response.status_code == 200
          assert response.json()["end_date"] == "2025-04-30"
          invoices = client.get(f"/api/leases/{lease.id}/ledger", params={"as_of": "2025-06-01"}).json()["invoices"]
          assert len(invoices) == 4

     def test_patch_lease_end_before_start_is_422(self, client, make_lease):
          lease = make_lease()

          response = client.patch(f"/api/leases/{lease.id}", params={"as_of": AS_OF}, json={"end_date": "2024-12-31"})

          assert response.status_code == 422
          assert response.json()["error_code"] == "ERR_LEDGER_VALIDATION"

     def test_ledger_summary_and_entries(self, client, make_lease):
          lease = make_lease(opening="5000")
          _pay(client, lease.id, "12000", "2025-01-10")

          body = client.get(f"/api/leases/{lease.id}/ledger", params={"as_of": AS_OF}).json()

          summary = body["summary"]
          assert Decimal(summary["total_due"]) == Decimal("35000")
          assert Decimal(summary["total_paid"]) == Decimal("12000")
          assert Decimal(summary["current_due"]) == Decimal("23000")
          assert summary["months_due_count"] == 3
          assert body["entries"][0]["entry_type"] == "opening"
          assert Decimal(body["entries"][-1]["running_balance"]) == Decimal("23000")
          assert [a["key"] for a in body["allocations"]] == ["opening", "2025-01", "2025-02", "2025-03"]
          assert body["allocations"][1]["status"] == "partial"
          assert len(body["fingerprint"]) == 64

     def test_rent_adjustment_rebills(self, client, make_lease):
          lease = make_lease(as_of=date(2025, 4, 10))

          response = client.post(
               f"/api/leases/{lease.id}/rent-adjustments",
               params={"as_of": "2025-04-10"},
               json={"new_rent": "12000", "effective_date": "2025-03-01", "agreement_terms": "Clause 4"},
          )

          assert response.status_code == 201
          assert Decimal(response.json()["previous_rent"]) == Decimal("10000")
          invoices = client.get(f"/api/leases/{lease.id}/ledger", params={"as_of": "2025-04-10"}).json()["invoices"]
          assert [Decimal(inv["amount"]) for inv in invoices] == [
               Decimal("10000"), Decimal("10000"), Decimal("12000"), Decimal("12000"),
          ]

     def test_regenerate_invoices(self, client, make_lease):
          lease = make_lease()

          response = client.post(f"/api/leases/{lease.id}/regenerate-invoices", params={"as_of": "2025-05-02"})

          assert response.status_code == 200
          assert response.json()["invoices_checked"] == 5


class TestTenantDues:

     def test_dues_per_lease_and_total(self, client, tenant, make_lease):
          first = make_lease()
          second = make_lease(rent="5000")
          _pay(client, first.id, "35000")

          response = client.get(f"/api/tenants/{tenant.id}/dues", params={"as_of": AS_OF})

          assert response.status_code == 200
          body = response.json()
          dues = {row["lease_id"]: Decimal(row["summary"]["current_due"]) for row in body["leases"]}
          assert dues == {first.id: Decimal("-5000"), second.id: Decimal("15000")}
          assert Decimal(body["total_due"]) == Decimal("10000")

     def test_unknown_tenant_is_404(self, client):
          response = client.get("/api/tenants/999/dues")

          assert response.status_code == 404
          assert response.json()["error_code"] == "ERR_NOT_FOUND"
          assert response.json()["details"]["id"] == 999


class TestSettlement:

     def test_preview_with_deposit_and_transfer(self, client, make_lease):
          # 8,000 due here, 3,000 deposit, 4,000 credit on another lease
          lease = make_lease(deposit="3000")
          _pay(client, lease.id, "22000")
          other = make_lease(rent="5000")
          _pay(client, other.id, "19000")

          response = _preview(client, lease.id, use_security_deposit=True, global_ledger_amount="4000")

          assert response.status_code == 200
          body = response.json()
          assert Decimal(body["this_lease_current_due"]) == Decimal("8000")
          assert Decimal(body["security_deposit_applied"]) == Decimal("3000")
          assert Decimal(body["global_ledger_balance"]) == Decimal("-4000")
          assert Decimal(body["final_amount"]) == Decimal("1000")
          assert body["outcome"] == "owes"

     def test_over_transfer_rejected(self, client, make_lease):
          lease = make_lease(deposit="3000")
          _pay(client, lease.id, "22000")
          other = make_lease(rent="5000")
          _pay(client, other.id, "19000")

          response = _preview(client, lease.id, use_security_deposit=True, global_ledger_amount="4500")

          assert response.status_code == 400
          assert response.json()["error_code"] == "ERR_SETTLEMENT_TRANSFER"

     def test_terminate_moves_credit_and_frees_shop(self, client, db, make_lease):
          lease = make_lease(deposit="3000")
          _pay(client, lease.id, "22000")
          other = make_lease(rent="5000")
          _pay(client, other.id, "19000")
          fingerprint = _preview(client, lease.id, use_security_deposit=True, global_ledger_amount="4000").json()["fingerprint"]

          response = client.patch(
               f"/api/leases/{lease.id}/terminate",
               params={"as_of": AS_OF},
               json={
                    "fingerprint": fingerprint,
                    "use_security_deposit": True,
                    "global_ledger_amount": "4000",
                    "termination_notes": "Moved out",
                    "confirmed_by": "office",
               },
          )

          assert response.status_code == 200
          assert Decimal(response.json()["final_amount"]) == Decimal("1000")

          db.expire_all()
          closed = db.get(Lease, lease.id)
          assert closed.status == LeaseStatus.TERMINATED
          assert closed.termination_notes == "Moved out"
          assert closed.security_deposit_used == Decimal("3000")
          assert db.get(Shop, closed.shop_id).status == ShopStatus.VACANT
          assert db.query(LeaseSettlement).filter_by(lease_id=lease.id).one().ledger_fingerprint == fingerprint

          transfers = db.query(Payment).filter_by(method=PaymentMethod.TRANSFER).order_by(Payment.id).all()
          assert [(p.lease_id, p.amount) for p in transfers] == [
               (other.id, Decimal("-4000.00")),
               (lease.id, Decimal("4000.00")),
          ]
          other_dues = client.get(f"/api/leases/{other.id}/ledger", params={"as_of": AS_OF}).json()["summary"]
          assert Decimal(other_dues["current_due"]) == Decimal("0")

     def test_stale_fingerprint_rejected(self, client, make_lease):
          lease = make_lease()
          fingerprint = _preview(client, lease.id).json()["fingerprint"]
          _pay(client, lease.id, "1000")

          response = client.patch(
               f"/api/leases/{lease.id}/terminate",
               params={"as_of": AS_OF},
               json={"fingerprint": fingerprint},
          )

          assert response.status_code == 409
          assert response.json()["error_code"] == "ERR_SETTLEMENT_STALE"
          assert client.get(f"/api/leases/{lease.id}").json()["status"] == "active"

     def test_terminated_lease_is_final(self, client, make_lease):
          lease = make_lease()
          fingerprint = _preview(client, lease.id).json()["fingerprint"]
          first = client.patch(f"/api/leases/{lease.id}/terminate", params={"as_of": AS_OF}, json={"fingerprint": fingerprint})

          second = client.patch(f"/api/leases/{lease.id}/terminate", params={"as_of": AS_OF}, json={"fingerprint": fingerprint})

          assert first.status_code == 200
          assert second.status_code == 409
          assert client.get(f"/api/leases/{lease.id}").json()["display_status"] == "terminated"
          assert client.post(f"/api/leases/{lease.id}/regenerate-invoices").status_code == 409


def test_admin_recalculate_fifo(client, make_lease):
     make_lease()
     make_lease()

     response = client.post("/api/admin/recalculate-fifo", params={"as_of": AS_OF})

     assert response.status_code == 200
     body = response.json()
     assert body["leases_processed"] == 2
     assert body["invoices_updated"] == 0


def test_generate_monthly_bills_new_months_once(client, make_lease):
     lease = make_lease()
     make_lease(rent="5000")

     first = client.post("/api/invoices/generate-monthly", params={"as_of": "2025-06-20"})
     second = client.post("/api/invoices/generate-monthly", params={"as_of": "2025-06-20"})

     assert first.status_code == 200
     assert first.json()["leases_processed"] == 2
     assert first.json()["invoices_billed"] == 6
     assert second.json()["invoices_billed"] == 0
     body = client.get(f"/api/leases/{lease.id}/ledger", params={"as_of": "2025-06-20"}).json()
     assert len(body["invoices"]) == 6
     assert Decimal(body["summary"]["total_due"]) == Decimal("60000")
