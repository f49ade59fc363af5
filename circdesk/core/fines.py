import datetime


def _as_date(value):
    return value.date() if isinstance(value, datetime.datetime) else value


def overdue_days(due_date, return_date) -> int:
    """Whole calendar days between the due date and the return date;
    any part of a day late counts as a full day."""
    days = (_as_date(return_date) - _as_date(due_date)).days
    return max(0, days)


def compute_fine(due_date, return_date, daily_rate: float) -> float:
    """Overdue fine: late calendar days times the daily rate, 0 if on time."""
    days = overdue_days(due_date, return_date)
    if not days:
        return 0.0
    return float(days * daily_rate)
