from datetime import date

import pytest

from entities import RecurringPeriod
from recurrence import add_months, calculate_next_due_date


class TestCalculateNextDueDate:

    def test_none_has_no_due_date(self):
        assert calculate_next_due_date(date(2024, 1, 15), RecurringPeriod.NONE) is None

    @pytest.mark.parametrize(
        "period, expected",
        [
            (RecurringPeriod.WEEKLY, date(2024, 1, 22)),
            (RecurringPeriod.MONTHLY, date(2024, 2, 15)),
            (RecurringPeriod.QUARTERLY, date(2024, 4, 15)),
            (RecurringPeriod.BIANNUALLY, date(2024, 7, 15)),
            (RecurringPeriod.ANNUALLY, date(2025, 1, 15)),
        ],
    )
    def test_periods(self, period, expected):
        assert calculate_next_due_date(date(2024, 1, 15), period) == expected

    def test_accepts_plain_strings(self):
        assert calculate_next_due_date(date(2024, 1, 15), "monthly") == date(2024, 2, 15)

    def test_unknown_period_has_no_due_date(self):
        assert calculate_next_due_date(date(2024, 1, 15), "fortnightly") is None

    def test_weekly_crosses_year_boundary(self):
        assert calculate_next_due_date(date(2023, 12, 28), "weekly") == date(2024, 1, 4)

    def test_quarterly_crosses_year_boundary(self):
        assert calculate_next_due_date(date(2023, 11, 30), "quarterly") == date(2024, 2, 29)


class TestMonthEndClamping:

    def test_jan_31_plus_one_month_in_leap_year(self):
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)

    def test_jan_31_plus_one_month_in_common_year(self):
        assert add_months(date(2023, 1, 31), 1) == date(2023, 2, 28)

    def test_leap_day_plus_one_year(self):
        assert calculate_next_due_date(date(2024, 2, 29), "annually") == date(2025, 2, 28)

    def test_aug_31_plus_six_months(self):
        assert calculate_next_due_date(date(2024, 8, 31), "biannually") == date(2025, 2, 28)

    def test_day_that_fits_is_kept(self):
        assert add_months(date(2024, 3, 30), 1) == date(2024, 4, 30)
