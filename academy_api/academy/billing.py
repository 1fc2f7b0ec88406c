"""
Calendar arithmetic for recurring fee definitions and subscription periods.

Every function here is pure: callers pass the reference date in, so the
cadence rules can be exercised without a live clock or a database.
"""

import calendar
from datetime import date

from .models import FeeDefinition, Subscription

# Length of one billing period, in months
PERIOD_MONTHS = {
    FeeDefinition.ONCE: 1,
    FeeDefinition.MONTHLY: 1,
    FeeDefinition.BIMONTHLY: 2,
    FeeDefinition.QUARTERLY: 3,
    FeeDefinition.HALF_YEARLY: 6,
    FeeDefinition.YEARLY: 12,
}


def period_months(fee_type):
    try:
        return PERIOD_MONTHS[fee_type]
    except KeyError:
        raise ValueError(f"Unknown fee type: {fee_type!r}")


def add_months(day, months):
    """Shift a date or datetime by whole months, clamping the day to the target month."""
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return day.replace(year=year, month=month, day=min(day.day, last_day))


def anchor_day(year, month, generation_day):
    """The generation day inside a given month, clamped to the month's length."""
    last_day = calendar.monthrange(year, month)[1]
    return min(generation_day, last_day)


def months_since_start(start_date, today):
    return (today.year - start_date.year) * 12 + (today.month - start_date.month)


def is_generation_day(generation_day, today):
    return today.day == anchor_day(today.year, today.month, generation_day)


def should_generate_fee(definition, today, has_existing_fee=False):
    """
    Decide whether a fee must be materialized for ``definition`` on ``today``.

    ``has_existing_fee`` only matters for ONCE definitions, which generate a
    single fee over their whole lifetime.
    """
    if definition.start_date > today:
        return False

    if definition.end_date and definition.end_date < today:
        return False

    if definition.fee_type == FeeDefinition.ONCE:
        return not has_existing_fee

    if not is_generation_day(definition.generation_day, today):
        return False

    elapsed = months_since_start(definition.start_date, today)
    return elapsed >= 0 and elapsed % period_months(definition.fee_type) == 0


def compute_due_date(definition, today):
    """
    Due date for a fee generated on ``today``.

    Anchored to the generation day of the current month. Once that day has
    passed the due date moves forward by one billing period, so a freshly
    generated fee never starts out overdue.
    """
    due_date = date(
        today.year,
        today.month,
        anchor_day(today.year, today.month, definition.generation_day)
    )
    if today.day > due_date.day:
        due_date = add_months(due_date, period_months(definition.fee_type))
        # Re-anchor in case the previous month clamped the day
        due_date = due_date.replace(
            day=anchor_day(due_date.year, due_date.month, definition.generation_day)
        )
    return due_date


def plan_end_date(plan, base):
    """End of a subscription period starting at ``base``; None for lifetime plans."""
    if plan == Subscription.MONTHLY:
        return add_months(base, 1)
    if plan == Subscription.YEARLY:
        return add_months(base, 12)
    if plan == Subscription.LIFETIME:
        return None
    raise ValueError(f"Unknown subscription plan: {plan!r}")
