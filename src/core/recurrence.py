"""Recurrence Expander - Follow-up dates of a recurring appointment."""

import calendar
from collections.abc import Iterator
from datetime import date, timedelta

from src.contracts.appointment import RecurrenceFrequency

# Fixed steps; monthly is calendar based and handled by add_months
FIXED_STEPS: dict[RecurrenceFrequency, timedelta] = {
    RecurrenceFrequency.WEEKLY: timedelta(days=7),
    RecurrenceFrequency.BIWEEKLY: timedelta(days=14),
}


def add_months(start: date, months: int) -> date:
    """Add calendar months, clamping the day to the target month's length.

    Args:
        start: Base date.
        months: Number of months to add (may be negative).

    Returns:
        Shifted date, e.g. 2025-01-31 + 1 month -> 2025-02-28.
    """
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(start.day, last_day))


def expand(
    start_date: date,
    end_date: date,
    frequency: RecurrenceFrequency,
) -> Iterator[date]:
    """Generate the follow-up occurrence dates of a recurring appointment.

    The base date itself is never yielded. Monthly occurrences are computed
    from the anchor (start + k months) so a clamped month does not shift the
    day of later occurrences.

    Args:
        start_date: Date of the base appointment.
        end_date: Last allowed date (inclusive).
        frequency: Recurrence frequency.

    Yields:
        Each follow-up date up to and including end_date.
    """
    if frequency == RecurrenceFrequency.NONE:
        return

    step = 1
    while True:
        if frequency == RecurrenceFrequency.MONTHLY:
            current = add_months(start_date, step)
        else:
            current = start_date + FIXED_STEPS[frequency] * step
        if current > end_date:
            return
        yield current
        step += 1
