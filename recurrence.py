# recurrence.py
import calendar
from datetime import date, timedelta
from typing import Optional

from entities import RecurringPeriod

MONTHS_BY_PERIOD = {
    RecurringPeriod.MONTHLY: 1,
    RecurringPeriod.QUARTERLY: 3,
    RecurringPeriod.BIANNUALLY: 6,
    RecurringPeriod.ANNUALLY: 12,
}


def add_months(base: date, months: int) -> date:
    """
    Calendar month arithmetic. The day of month is clamped to the last
    day of the target month:
      2024-01-31 + 1 month  -> 2024-02-29
      2023-01-31 + 1 month  -> 2023-02-28
      2024-02-29 + 12 months -> 2025-02-28
    """
    month_index = base.month - 1 + months
    year = base.year + month_index // 12
    month = month_index % 12 + 1
    day = min(base.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def calculate_next_due_date(base_date: date, period) -> Optional[date]:
    try:
        period = RecurringPeriod(period)
    except ValueError:
        return None

    if period == RecurringPeriod.NONE:
        return None
    if period == RecurringPeriod.WEEKLY:
        return base_date + timedelta(weeks=1)
    return add_months(base_date, MONTHS_BY_PERIOD[period])
