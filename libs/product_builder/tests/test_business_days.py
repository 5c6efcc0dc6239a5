"""Tests jours ouvrés + montants en won."""
import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from datetime import date, datetime

from product_builder import business_date, format_business_date, is_business_day
from product_builder.money import apply_percent, div, mul, round_to_unit, with_vat, won


# ── Jours ouvrés ────────────────────────────────────────────────────────────

class TestBusinessDays:
    def test_weekend_and_holidays(self):
        assert is_business_day(date(2026, 10, 19))
        assert not is_business_day(date(2026, 10, 17))
        assert not is_business_day(date(2026, 10, 9))
        assert is_business_day(date(2026, 10, 9), holidays=[])

    def test_same_day_before_cutoff(self):
        assert business_date(0, datetime(2026, 10, 19, 10, 0)) == date(2026, 10, 19)

    def test_after_cutoff_starts_next_day(self):
        assert business_date(0, datetime(2026, 10, 19, 14, 0)) == date(2026, 10, 20)

    def test_friday_evening_rolls_to_monday(self):
        assert business_date(0, datetime(2026, 10, 16, 15, 0)) == date(2026, 10, 19)

    def test_skips_holiday(self):
        assert business_date(1, datetime(2026, 10, 8, 10, 0)) == date(2026, 10, 12)

    def test_weekend_order(self):
        assert business_date(2, datetime(2026, 10, 18, 9, 0)) == date(2026, 10, 21)

    def test_format(self):
        assert format_business_date(date(2026, 3, 5)) == "3/5(목)"
        assert format_business_date(date(2026, 10, 19)) == "10/19(월)"


# ── Montants ────────────────────────────────────────────────────────────────

class TestMoney:
    def test_half_up(self):
        assert won(1234.5) == 1235
        assert won(1234.49) == 1234
        assert won(0.45 * 100) == 45

    def test_single_rounding(self):
        assert mul(28, 1.2, 50) == 1680
        assert mul(0.5, 3) == 2

    def test_div(self):
        assert div(25080, 100) == 251
        assert div(100, 0) == 0

    def test_percent(self):
        assert apply_percent(1000, 30) == 1300
        assert apply_percent(1000, -5) == 950
        assert with_vat(25100) == 27610

    def test_round_to_unit(self):
        assert round_to_unit(27610, 1000) == 27000
        assert round_to_unit(27610, 1000, "ceil") == 28000
        assert round_to_unit(27610, 100, "round") == 27600
        assert round_to_unit(0, 100) == 0
