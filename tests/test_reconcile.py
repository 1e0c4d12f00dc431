"""
Tests for stored-invoice reconciliation and the services that trigger it.
"""
from datetime import date
from decimal import Decimal

import pytest

from ledger import AllocationStatus, LeaseStatus, LeaseTerminatedError, LedgerValidationError, ResourceNotFoundError
from models import DeletionLog, Payment, RentInvoice
from scripts.recalc_fifo_all import main as recalc_main
from services import InvoiceService, record_payment, reconcile_all, reconcile_lease, soft_delete_payment
from services.ledger_service import build_lease_ledger, compute_ledger_fingerprint, lease_invoices
from services.reconcile_service import bill_missing_months

AS_OF = date(2025, 3, 20)


def _invoice_state(db, lease_id):
     db.expire_all()
     return [
          (f"{inv.year}-{inv.month:02d}", inv.status, inv.paid_amount)
          for inv in lease_invoices(db, lease_id)
     ]


def test_lease_starts_with_unpaid_invoices(db, make_lease):
     lease = make_lease()

     state = _invoice_state(db, lease.id)

     assert [key for key, _, _ in state] == ["2025-01", "2025-02", "2025-03"]
     assert all(status == AllocationStatus.UNPAID for _, status, _ in state)


def test_payment_marks_oldest_months_paid(db, make_lease):
     lease = make_lease()

     record_payment(db, lease.id, Decimal("15000"), date(2025, 3, 1), rent_months=["2025-03"], as_of=AS_OF)

     assert _invoice_state(db, lease.id) == [
          ("2025-01", AllocationStatus.PAID, Decimal("10000.00")),
          ("2025-02", AllocationStatus.PARTIAL, Decimal("5000.00")),
          ("2025-03", AllocationStatus.UNPAID, Decimal("0.00")),
     ]


def test_opening_balance_absorbs_payment_first(db, make_lease):
     lease = make_lease(opening="5000")

     record_payment(db, lease.id, Decimal("12000"), date(2025, 1, 10), as_of=AS_OF)

     state = _invoice_state(db, lease.id)
     assert state[0] == ("2025-01", AllocationStatus.PARTIAL, Decimal("7000.00"))


def test_soft_delete_reopens_invoices(db, make_lease):
     lease = make_lease()
     payment = record_payment(db, lease.id, Decimal("20000"), date(2025, 2, 1), as_of=AS_OF)

     soft_delete_payment(db, payment.id, reason="Entered twice", deleted_by="office", as_of=AS_OF)

     assert all(status == AllocationStatus.UNPAID for _, status, _ in _invoice_state(db, lease.id))
     log = db.query(DeletionLog).one()
     assert log.record_type == "payment"
     assert log.record_id == payment.id
     assert log.record_details["amount"] == "20000.00"
     assert log.reason == "Entered twice"
     db.refresh(payment)
     assert payment.is_deleted is True
     assert payment.deletion_reason == "Entered twice"
     assert payment.deleted_at is not None


def test_soft_delete_requires_reason(db, make_lease):
     lease = make_lease()
     payment = record_payment(db, lease.id, Decimal("1000"), date(2025, 2, 1), as_of=AS_OF)

     with pytest.raises(LedgerValidationError):
          soft_delete_payment(db, payment.id, reason="  ")


def test_soft_delete_twice_is_not_found(db, make_lease):
     lease = make_lease()
     payment = record_payment(db, lease.id, Decimal("1000"), date(2025, 2, 1), as_of=AS_OF)
     soft_delete_payment(db, payment.id, reason="mistake", as_of=AS_OF)

     with pytest.raises(ResourceNotFoundError):
          soft_delete_payment(db, payment.id, reason="again", as_of=AS_OF)


def test_payment_rejects_bad_input(db, make_lease):
     lease = make_lease()

     with pytest.raises(LedgerValidationError):
          record_payment(db, lease.id, Decimal("0"), date(2025, 2, 1))
     with pytest.raises(LedgerValidationError):
          record_payment(db, lease.id, Decimal("100"), date(2025, 2, 1), rent_months=["March"])
     with pytest.raises(ResourceNotFoundError):
          record_payment(db, 999, Decimal("100"), date(2025, 2, 1))


def test_payment_on_terminated_lease_rejected(db, make_lease):
     lease = make_lease()
     lease.status = LeaseStatus.TERMINATED
     db.commit()

     with pytest.raises(LeaseTerminatedError):
          record_payment(db, lease.id, Decimal("100"), date(2025, 2, 1))
     assert db.query(Payment).count() == 0


def test_reconcile_repairs_drifted_rows_and_is_idempotent(db, make_lease):
     lease = make_lease()
     record_payment(db, lease.id, Decimal("10000"), date(2025, 1, 10), as_of=AS_OF)
     march = db.query(RentInvoice).filter_by(lease_id=lease.id, month=3).one()
     march.is_paid = True
     march.paid_amount = Decimal("10000")
     db.commit()

     first = reconcile_lease(db, lease.id, as_of=AS_OF)
     second = reconcile_lease(db, lease.id, as_of=AS_OF)

     assert first.invoices_updated == 1
     assert second.invoices_updated == 0
     assert _invoice_state(db, lease.id)[2] == ("2025-03", AllocationStatus.UNPAID, Decimal("0.00"))


def test_reconcile_warns_on_paid_above_amount(db, make_lease):
     lease = make_lease()
     january = db.query(RentInvoice).filter_by(lease_id=lease.id, month=1).one()
     january.paid_amount = Decimal("12000")
     db.commit()

     result = reconcile_lease(db, lease.id, as_of=AS_OF)

     assert len(result.warnings) == 1
     assert "exceeds amount" in result.warnings[0]
     assert _invoice_state(db, lease.id)[0][2] == Decimal("0.00")


def test_dry_run_reports_without_writing(db, make_lease):
     lease = make_lease()
     february = db.query(RentInvoice).filter_by(lease_id=lease.id, month=2).one()
     february.is_paid = True
     february.paid_amount = Decimal("10000")
     db.commit()

     result = reconcile_lease(db, lease.id, as_of=AS_OF, dry_run=True)

     assert result.invoices_updated == 1
     assert _invoice_state(db, lease.id)[1][1] == AllocationStatus.PAID


def test_future_invoices_stay_unpaid(db, make_lease):
     lease = make_lease(as_of=date(2025, 5, 1))

     record_payment(db, lease.id, Decimal("50000"), date(2025, 3, 1), as_of=AS_OF)

     state = _invoice_state(db, lease.id)
     assert [s for _, s, _ in state] == [
          AllocationStatus.PAID, AllocationStatus.PAID, AllocationStatus.PAID,
          AllocationStatus.UNPAID, AllocationStatus.UNPAID,
     ]


def test_reconcile_all_skips_terminated_leases(db, make_lease):
     open_lease = make_lease()
     closed_lease = make_lease()
     closed_lease.status = LeaseStatus.TERMINATED
     db.commit()

     results = reconcile_all(db, as_of=AS_OF)

     assert [r.lease_id for r in results] == [open_lease.id]


def test_repair_script_runs_reconcile(db, make_lease):
     lease = make_lease()
     february = db.query(RentInvoice).filter_by(lease_id=lease.id, month=2).one()
     february.is_paid = True
     db.commit()

     assert recalc_main(["--lease-id", str(lease.id), "--as-of", "2025-03-20"]) == 0
     assert _invoice_state(db, lease.id)[1][1] == AllocationStatus.UNPAID


def test_repair_script_reports_missing_lease(db):
     assert recalc_main(["--lease-id", "404"]) == 1


class TestRegeneration:

     def test_rent_adjustment_rebills_from_effective_month(self, db, make_lease):
          lease = make_lease(as_of=date(2025, 4, 10))

          adjustment = InvoiceService.adjust_rent(
               db, lease.id, Decimal("12000"), date(2025, 3, 1), today=date(2025, 4, 10)
          )

          db.expire_all()
          amounts = [inv.amount for inv in lease_invoices(db, lease.id)]
          assert amounts == [Decimal("10000.00"), Decimal("10000.00"), Decimal("12000.00"), Decimal("12000.00")]
          assert adjustment.previous_rent == Decimal("10000.00")
          assert adjustment.adjustment_amount == Decimal("2000.00")
          assert db.get(type(lease), lease.id).monthly_rent == Decimal("12000.00")

     def test_second_adjustment_keeps_original_rent(self, db, make_lease):
          lease = make_lease(as_of=date(2025, 6, 10))
          InvoiceService.adjust_rent(db, lease.id, Decimal("12000"), date(2025, 3, 1), today=date(2025, 6, 10))
          second = InvoiceService.adjust_rent(db, lease.id, Decimal("15000"), date(2025, 5, 1), today=date(2025, 6, 10))

          db.expire_all()
          amounts = [inv.amount for inv in lease_invoices(db, lease.id)]
          assert amounts == [
               Decimal("10000.00"), Decimal("10000.00"), Decimal("12000.00"),
               Decimal("12000.00"), Decimal("15000.00"), Decimal("15000.00"),
          ]
          assert second.previous_rent == Decimal("12000.00")

     def test_regeneration_keeps_payments_applied(self, db, make_lease):
          lease = make_lease()
          record_payment(db, lease.id, Decimal("20000"), date(2025, 2, 1), as_of=AS_OF)

          InvoiceService.regenerate_lease_invoices(db, lease.id, today=AS_OF)

          assert [s for _, s, _ in _invoice_state(db, lease.id)] == [
               AllocationStatus.PAID, AllocationStatus.PAID, AllocationStatus.UNPAID,
          ]

     def test_adjustment_before_lease_start_rejected(self, db, make_lease):
          lease = make_lease()

          with pytest.raises(LedgerValidationError):
               InvoiceService.adjust_rent(db, lease.id, Decimal("12000"), date(2024, 12, 1), today=AS_OF)

     def test_terminated_lease_not_regenerated(self, db, make_lease):
          lease = make_lease()
          lease.status = LeaseStatus.TERMINATED
          db.commit()

          with pytest.raises(LeaseTerminatedError):
               InvoiceService.regenerate_lease_invoices(db, lease.id, today=AS_OF)


def test_fingerprint_changes_with_payments(db, make_lease):
     lease = make_lease()
     before = compute_ledger_fingerprint(lease, lease_invoices(db, lease.id), [])

     payment = record_payment(db, lease.id, Decimal("100"), date(2025, 2, 1), as_of=AS_OF)

     after = compute_ledger_fingerprint(lease, lease_invoices(db, lease.id), [payment])
     assert before != after
     assert len(after) == 64


class TestMonthlyBilling:

     def test_ledger_counts_months_not_yet_billed(self, db, make_lease):
          lease = make_lease()

          ledger = build_lease_ledger(db, lease, as_of=date(2025, 6, 20))

          assert ledger.summary.total_due == Decimal("60000.00")
          assert [r.obligation.key for r in ledger.allocations] == [
               "2025-01", "2025-02", "2025-03", "2025-04", "2025-05", "2025-06",
          ]

     def test_reconcile_bills_new_months_once(self, db, make_lease):
          lease = make_lease()
          record_payment(db, lease.id, Decimal("45000"), date(2025, 3, 1), as_of=AS_OF)

          first = reconcile_lease(db, lease.id, as_of=date(2025, 6, 20))
          second = reconcile_lease(db, lease.id, as_of=date(2025, 6, 20))

          assert first.invoices_billed == 3
          assert second.invoices_billed == 0
          assert second.invoices_updated == 0
          assert _invoice_state(db, lease.id)[3:] == [
               ("2025-04", AllocationStatus.PAID, Decimal("10000.00")),
               ("2025-05", AllocationStatus.PARTIAL, Decimal("5000.00")),
               ("2025-06", AllocationStatus.UNPAID, Decimal("0.00")),
          ]

     def test_dry_run_counts_unbilled_months_without_writing(self, db, make_lease):
          lease = make_lease()

          result = reconcile_lease(db, lease.id, as_of=date(2025, 5, 1), dry_run=True)

          assert result.invoices_billed == 2
          assert len(_invoice_state(db, lease.id)) == 3

     def test_billing_stops_at_lease_end(self, db, make_lease):
          lease = make_lease(end=date(2025, 4, 10))

          reconcile_lease(db, lease.id, as_of=date(2025, 8, 1))

          assert [key for key, _, _ in _invoice_state(db, lease.id)][-1] == "2025-04"

     def test_new_months_use_adjusted_rent(self, db, make_lease):
          lease = make_lease()
          InvoiceService.adjust_rent(db, lease.id, Decimal("12000"), date(2025, 3, 1), today=AS_OF)

          reconcile_lease(db, lease.id, as_of=date(2025, 5, 20))

          db.expire_all()
          amounts = [inv.amount for inv in lease_invoices(db, lease.id)]
          assert amounts == [
               Decimal("10000.00"), Decimal("10000.00"), Decimal("12000.00"),
               Decimal("12000.00"), Decimal("12000.00"),
          ]

     def test_terminated_lease_is_not_billed(self, db, make_lease):
          lease = make_lease()
          lease.status = LeaseStatus.TERMINATED
          db.commit()

          assert bill_missing_months(db, lease, date(2025, 9, 1)) == []
          assert build_lease_ledger(db, lease, as_of=date(2025, 9, 1)).summary.total_due == Decimal("30000.00")


class TestLeaseDates:

     def test_shorter_term_drops_later_invoices(self, db, make_lease):
          lease = make_lease(as_of=date(2025, 6, 1))

          InvoiceService.update_lease_dates(db, lease.id, end_date=date(2025, 4, 30), today=date(2025, 6, 1))

          assert [key for key, _, _ in _invoice_state(db, lease.id)] == ["2025-01", "2025-02", "2025-03", "2025-04"]

     def test_later_start_rebills_from_new_start(self, db, make_lease):
          lease = make_lease()
          record_payment(db, lease.id, Decimal("10000"), date(2025, 2, 1), as_of=AS_OF)

          InvoiceService.update_lease_dates(db, lease.id, start_date=date(2025, 2, 15), today=AS_OF)

          assert _invoice_state(db, lease.id) == [
               ("2025-02", AllocationStatus.PAID, Decimal("10000.00")),
               ("2025-03", AllocationStatus.UNPAID, Decimal("0.00")),
          ]

     def test_end_before_start_rejected(self, db, make_lease):
          lease = make_lease()

          with pytest.raises(LedgerValidationError):
               InvoiceService.update_lease_dates(db, lease.id, end_date=date(2024, 12, 31), today=AS_OF)
          assert len(_invoice_state(db, lease.id)) == 3

     def test_start_after_rent_adjustment_rejected(self, db, make_lease):
          lease = make_lease()
          InvoiceService.adjust_rent(db, lease.id, Decimal("12000"), date(2025, 2, 1), today=AS_OF)

          with pytest.raises(LedgerValidationError):
               InvoiceService.update_lease_dates(db, lease.id, start_date=date(2025, 3, 1), today=AS_OF)
