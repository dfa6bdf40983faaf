"""Calendar arithmetic for contract terms and recurrence cycles."""

import calendar as cal
from datetime import date, timedelta

from contract_events.schemas.contract_terms import DurationUnit, LineCycle

FORTNIGHT_DAYS = 14


def _add_months(d: date, months: int) -> date:
    """Add months to a date, clamping to last day of month."""
    month = d.month - 1 + months
    year = d.year + month // 12
    month = month % 12 + 1
    max_day = cal.monthrange(year, month)[1]
    day = min(d.day, max_day)
    return d.replace(year=year, month=month, day=day)


def add_duration(start: date, value: int, unit: DurationUnit | str) -> date:
    """Return ``start`` moved forward by ``value`` units.

    Month and year steps clamp to the end of the target month, so
    2025-01-31 + 1 month is 2025-02-28 rather than an error.
    """
    unit_value = unit.value if isinstance(unit, DurationUnit) else unit
    if unit_value == DurationUnit.DAYS.value:
        return start + timedelta(days=value)
    elif unit_value == DurationUnit.MONTHS.value:
        return _add_months(start, value)
    elif unit_value == DurationUnit.YEARS.value:
        return _add_months(start, value * 12)
    raise ValueError(f"Unknown duration unit: {unit_value}")


def recurrence_date(
    start: date,
    cycle: LineCycle | str,
    index: int,
    custom_cycle_days: int | None = None,
) -> date | None:
    """Date of the ``index``-th (0-based) occurrence of a recurring cycle.

    Offsets are always computed from ``start`` so month clamping never
    accumulates (Jan 31, Feb 28, Mar 31, ...). Returns None for cycles
    that carry no recurrence (prepaid/postpaid).
    """
    cycle_value = cycle.value if isinstance(cycle, LineCycle) else cycle
    if cycle_value == LineCycle.MONTHLY.value:
        return _add_months(start, index)
    elif cycle_value == LineCycle.QUARTERLY.value:
        return _add_months(start, 3 * index)
    elif cycle_value == LineCycle.FORTNIGHTLY.value:
        return start + timedelta(days=FORTNIGHT_DAYS * index)
    elif cycle_value == LineCycle.CUSTOM.value:
        if not custom_cycle_days or custom_cycle_days <= 0:
            raise ValueError("Custom cycle requires a positive number of days")
        return start + timedelta(days=custom_cycle_days * index)
    elif cycle_value in (LineCycle.PREPAID.value, LineCycle.POSTPAID.value):
        return None
    raise ValueError(f"Unknown cycle: {cycle_value}")


def distribute_evenly(start: date, end: date, count: int) -> list[date]:
    """Spread ``count`` dates across ``[start, end]`` inclusive.

    One occurrence lands on ``start``; more than one puts the first on
    ``start`` and the last on ``end`` with whole-day offsets in between.
    """
    if count <= 0:
        return []
    if count == 1:
        return [start]
    span = (end - start).days
    return [start + timedelta(days=(i * span) // (count - 1)) for i in range(count)]


def inclusive_day_span(first: date, last: date) -> int:
    """Number of calendar days from ``first`` to ``last``, both counted."""
    return (last - first).days + 1
