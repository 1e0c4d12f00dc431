"""
Tests for monthly obligation generation.
"""
from datetime import date, datetime
from decimal import Decimal

import pytest

from ledger import LedgerValidationError, RentChange, generate_obligations, original_rent
from ledger.invoices import rent_for_month


def test_one_obligation_per_month_through_current_month():
     obligations = generate_obligations(date(2025, 1, 1), "10000", through=date(2025, 3, 20))

     assert [o.key for o in obligations] == ["2025-01", "2025-02", "2025-03"]
     assert all(o.amount == Decimal("10000.00") for o in obligations)


def test_due_date_is_fifth_of_month():
     obligations = generate_obligations(date(2025, 1, 1), "10000", through=date(2025, 2, 1))

     assert [o.due_date for o in obligations] == [date(2025, 1, 5), date(2025, 2, 5)]


def test_mid_month_start_bills_full_first_month():
     obligations = generate_obligations(date(2025, 1, 15), "10000", through=date(2025, 3, 1))

     assert len(obligations) == 3
     assert obligations[0].key == "2025-01"
     assert obligations[0].amount == Decimal("10000.00")


def test_crosses_year_boundary():
     obligations = generate_obligations(date(2024, 11, 1), "5000", through=date(2025, 2, 10))

     assert [o.key for o in obligations] == ["2024-11", "2024-12", "2025-01", "2025-02"]


def test_stops_at_lease_end_month():
     obligations = generate_obligations(
          date(2025, 1, 1), "10000", through=date(2025, 12, 1), lease_end=date(2025, 4, 30)
     )

     assert obligations[-1].key == "2025-04"
     assert len(obligations) == 4


def test_through_before_start_yields_nothing():
     assert generate_obligations(date(2025, 6, 1), "10000", through=date(2025, 5, 31)) == []


def test_lease_end_before_start_rejected():
     with pytest.raises(LedgerValidationError):
          generate_obligations(date(2025, 6, 1), "10000", through=date(2025, 8, 1), lease_end=date(2025, 5, 1))


def test_negative_rent_rejected():
     with pytest.raises(LedgerValidationError):
          generate_obligations(date(2025, 1, 1), "-1", through=date(2025, 2, 1))


def test_non_date_start_rejected():
     with pytest.raises(LedgerValidationError):
          generate_obligations("2025-01-01", "10000", through=date(2025, 2, 1))


def test_datetime_accepted_as_date():
     obligations = generate_obligations(datetime(2025, 1, 1, 9, 30), "10000", through=datetime(2025, 1, 31, 23, 0))

     assert [o.key for o in obligations] == ["2025-01"]


def test_adjustment_applies_from_effective_month():
     adjustments = [RentChange(effective_date=date(2025, 3, 1), new_rent=Decimal("12000"), previous_rent=Decimal("10000"))]

     obligations = generate_obligations(date(2025, 1, 1), "10000", adjustments, through=date(2025, 4, 1))

     assert [o.amount for o in obligations] == [
          Decimal("10000.00"), Decimal("10000.00"), Decimal("12000.00"), Decimal("12000.00"),
     ]


def test_mid_month_adjustment_takes_effect_next_month():
     adjustments = [RentChange(effective_date=date(2025, 2, 10), new_rent=Decimal("12000"))]

     obligations = generate_obligations(date(2025, 1, 1), "10000", adjustments, through=date(2025, 3, 1))

     assert [o.amount for o in obligations] == [
          Decimal("10000.00"), Decimal("10000.00"), Decimal("12000.00"),
     ]


def test_latest_applicable_adjustment_wins_regardless_of_input_order():
     adjustments = [
          RentChange(effective_date=date(2025, 4, 1), new_rent=Decimal("14000")),
          RentChange(effective_date=date(2025, 2, 1), new_rent=Decimal("12000")),
     ]

     obligations = generate_obligations(date(2025, 1, 1), "10000", adjustments, through=date(2025, 5, 1))

     assert [o.amount for o in obligations] == [
          Decimal("10000.00"), Decimal("12000.00"), Decimal("12000.00"),
          Decimal("14000.00"), Decimal("14000.00"),
     ]


def test_original_rent_prefers_first_adjustment_previous_rent():
     adjustments = [
          RentChange(effective_date=date(2025, 6, 1), new_rent=Decimal("15000"), previous_rent=Decimal("12000")),
          RentChange(effective_date=date(2025, 3, 1), new_rent=Decimal("12000"), previous_rent=Decimal("10000")),
     ]

     assert original_rent(Decimal("15000"), adjustments) == Decimal("10000.00")
     assert original_rent(Decimal("15000"), []) == Decimal("15000.00")


def test_rent_for_month_falls_back_to_base():
     adjustments = [RentChange(effective_date=date(2025, 3, 1), new_rent=Decimal("12000"))]

     assert rent_for_month(Decimal("10000"), adjustments, date(2025, 2, 1)) == Decimal("10000")
     assert rent_for_month(Decimal("10000"), adjustments, date(2025, 3, 1)) == Decimal("12000.00")
