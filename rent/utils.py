import calendar
from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from dateutil.relativedelta import relativedelta
from django.conf import settings

PAISE = Decimal('0.01')


def to_money(value):
    """Coerce a number or numeric string to a 2-place Decimal (rupees.paise)."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(PAISE, rounding=ROUND_HALF_UP)


def next_month(today):
    """Return (month, year) of the calendar month after `today`."""
    following = today + relativedelta(months=1)
    return following.month, following.year


def rent_due_date(year, month, due_day=None):
    """
    Due date of a rent cycle. RENT_DUE_DAY is clamped to the month length
    so a due day of 31 lands on the 28th/29th/30th in shorter months.
    """
    if due_day is None:
        due_day = getattr(settings, 'RENT_DUE_DAY', 5)
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(max(int(due_day), 1), last_day))


def format_inr(amount):
    amount = to_money(amount)
    if amount == amount.to_integral_value():
        return f"₹{int(amount):,}"
    return f"₹{amount:,.2f}"


def late_fee_start_date(due_date, grace_days=None):
    """First day a late fee may be charged: the day after the grace period ends."""
    if grace_days is None:
        grace_days = getattr(settings, 'RENT_LATE_FEE_GRACE_DAYS', 0)
    return due_date + relativedelta(days=int(grace_days) + 1)


def late_fee_enabled():
    return getattr(settings, 'RENT_LATE_FEE_AMOUNT', Decimal('0')) > 0
