"""Read-side projections over an event list: summaries and grouped views.

All functions are pure and recompute derived flags (``all_completed``,
overdue) from the statuses they are given on every call.
"""

from collections.abc import Iterable, Sequence
from datetime import date, timedelta
from decimal import Decimal

from contract_events.models.contract_event import TERMINAL_STATUSES, EventType
from contract_events.schemas.contract_event import (
    ContractEvent,
    DateBucket,
    DateBuckets,
    DateGroup,
    EventSummary,
    LineGroup,
)
from contract_events.services.contract_dates import inclusive_day_span
from contract_events.services.event_generator import sort_events

DELIVERABLE_TYPES = frozenset({EventType.SERVICE, EventType.SPARE_PART})


def is_terminal(status: str) -> bool:
    return status in TERMINAL_STATUSES


def is_overdue(event: ContractEvent, today: date) -> bool:
    """Past its scheduled date and not yet completed or cancelled."""
    return event.scheduled_date < today and not is_terminal(event.status)


def _billing_amount(events: Iterable[ContractEvent]) -> Decimal:
    return sum(
        (e.amount for e in events if e.event_type == EventType.BILLING and e.amount is not None),
        Decimal("0"),
    )


def summarize(events: Sequence[ContractEvent]) -> EventSummary:
    """Counts per event type, billed total and the inclusive date span."""
    counts = {event_type: 0 for event_type in EventType}
    for event in events:
        counts[event.event_type] += 1

    first = min((e.scheduled_date for e in events), default=None)
    last = max((e.scheduled_date for e in events), default=None)
    span_days = inclusive_day_span(first, last) if first and last else 0

    return EventSummary(
        total_events=len(events),
        service_count=counts[EventType.SERVICE],
        spare_part_count=counts[EventType.SPARE_PART],
        billing_count=counts[EventType.BILLING],
        total_billing_amount=_billing_amount(events),
        first_event_date=first,
        last_event_date=last,
        span_days=span_days,
    )


def group_by_date(events: Iterable[ContractEvent]) -> list[DateGroup]:
    """Group events per scheduled date, ascending.

    Deliverables (service, then spare part) and billing keep the global
    event ordering. ``all_completed`` is true when every event of the day
    is completed or cancelled.
    """
    by_date: dict[date, list[ContractEvent]] = {}
    for event in sort_events(events):
        by_date.setdefault(event.scheduled_date, []).append(event)

    groups = []
    for day, day_events in by_date.items():
        groups.append(
            DateGroup(
                date=day,
                deliverables=[e for e in day_events if e.event_type in DELIVERABLE_TYPES],
                billing=[e for e in day_events if e.event_type == EventType.BILLING],
                all_completed=all(is_terminal(e.status) for e in day_events),
            )
        )
    return groups


def group_by_line(events: Iterable[ContractEvent]) -> list[LineGroup]:
    """Group events per line id, in first-seen order."""
    by_line: dict[str, list[ContractEvent]] = {}
    for event in events:
        by_line.setdefault(event.line_id, []).append(event)
    return [LineGroup(line_id=line_id, events=members) for line_id, members in by_line.items()]


def _bucket_name(event: ContractEvent, today: date) -> str | None:
    if is_overdue(event, today):
        return "overdue"
    day = event.scheduled_date
    if day < today:
        return None
    end_of_week = today + timedelta(days=6 - today.weekday())
    if day == today:
        return "today"
    if day == today + timedelta(days=1):
        return "tomorrow"
    if day <= end_of_week:
        return "this_week"
    if day <= end_of_week + timedelta(days=7):
        return "next_week"
    return "later"


def date_buckets(events: Sequence[ContractEvent], today: date) -> DateBuckets:
    """Sort events into operational buckets relative to ``today``.

    Weeks end on Sunday. Past events that are already completed or
    cancelled fall in no bucket but still count toward the totals.
    """
    buckets = DateBuckets()
    for event in events:
        name = _bucket_name(event, today)
        if name is None:
            continue
        bucket: DateBucket = getattr(buckets, name)
        bucket.count += 1
        if event.event_type == EventType.SERVICE:
            bucket.service_count += 1
        elif event.event_type == EventType.SPARE_PART:
            bucket.spare_part_count += 1
        else:
            bucket.billing_count += 1
            bucket.billing_amount += event.amount or Decimal("0")
        bucket.by_status[event.status] = bucket.by_status.get(event.status, 0) + 1

    buckets.totals.total_events = len(events)
    buckets.totals.total_billing_amount = _billing_amount(events)
    return buckets
