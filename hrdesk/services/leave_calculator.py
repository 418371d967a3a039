from datetime import date, timedelta

HALF_DAY = 0.5


def count_leave_days(from_date: date, to_date: date, half_day: bool = False) -> float:
    """
    Number of chargeable leave days in the inclusive range [from_date, to_date].

    A half-day request is always worth 0.5, whatever the range. Otherwise every
    Monday-Friday in the range counts as one day and weekends are free, so a range
    lying entirely on a weekend yields 0. Callers guarantee from_date <= to_date.
    """
    if half_day:
        return HALF_DAY

    days = 0
    for offset in range((to_date - from_date).days + 1):
        if (from_date + timedelta(days=offset)).isoweekday() <= 5:
            days += 1
    return float(days)
