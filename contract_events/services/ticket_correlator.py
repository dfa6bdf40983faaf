"""Joins completed date groups with externally recorded service tickets."""

import logging
import warnings
from collections.abc import Iterable, Sequence
from datetime import UTC, date, datetime
from typing import Protocol
from uuid import UUID

from contract_events.core.exceptions import CorrelationAmbiguity
from contract_events.schemas.contract_event import DateGroup
from contract_events.schemas.service_ticket import TicketCorrelation, TicketDisplayInfo

logger = logging.getLogger(__name__)

UNASSIGNED_LABEL = "Unassigned"


class TicketLike(Protocol):
    id: UUID
    ticket_number: str
    assigned_to_name: str | None
    evidence_count: int
    completed_at: datetime | None
    event_count: int


def completion_day(completed_at: datetime) -> date:
    """Day a ticket was completed, in UTC for timezone-aware timestamps."""
    if completed_at.tzinfo is not None:
        completed_at = completed_at.astimezone(UTC)
    return completed_at.date()


def _display_info(ticket: TicketLike, day: date) -> TicketDisplayInfo:
    return TicketDisplayInfo(
        id=ticket.id,
        ticket_number=ticket.ticket_number,
        assigned_to=ticket.assigned_to_name or UNASSIGNED_LABEL,
        evidence_count=ticket.evidence_count,
        completed_at=day,
        event_count=ticket.event_count,
    )


def tickets_by_day(tickets: Iterable[TicketLike]) -> dict[date, TicketDisplayInfo]:
    """Index tickets by completion day; the first ticket of a day wins.

    A day with several tickets is ambiguous: a ``CorrelationAmbiguity``
    warning is issued and logged, and the first ticket is kept.
    """
    index: dict[date, TicketDisplayInfo] = {}
    seen: dict[date, list[str]] = {}
    for ticket in tickets:
        if ticket.completed_at is None:
            continue
        day = completion_day(ticket.completed_at)
        seen.setdefault(day, []).append(str(ticket.id))
        if day not in index:
            index[day] = _display_info(ticket, day)

    for day, ticket_ids in seen.items():
        if len(ticket_ids) > 1:
            logger.warning(
                "Ambiguous ticket correlation on %s: %d tickets, using %s",
                day,
                len(ticket_ids),
                ticket_ids[0],
            )
            warnings.warn(CorrelationAmbiguity(day, ticket_ids), stacklevel=3)
    return index


def is_ticket_eligible(group: DateGroup) -> bool:
    """A day collapses into a ticket summary once every event is resolved."""
    return group.all_completed and len(group.deliverables) > 0


def correlate(
    date_groups: Sequence[DateGroup],
    tickets: Iterable[TicketLike],
) -> dict[date, TicketDisplayInfo | None]:
    """Map each fully resolved date group to its completion ticket.

    Only groups with ``all_completed`` and at least one deliverable appear
    in the result. A group with no ticket on its date maps to None and is
    shown as a generic completed summary.
    """
    index = tickets_by_day(tickets)
    return {
        group.date: index.get(group.date)
        for group in date_groups
        if is_ticket_eligible(group)
    }


def correlation_rows(
    date_groups: Sequence[DateGroup],
    tickets: Iterable[TicketLike],
) -> list[TicketCorrelation]:
    """``correlate`` flattened into response rows, ordered by date."""
    correlated = correlate(date_groups, tickets)
    return [
        TicketCorrelation(
            date=group.date,
            deliverable_count=len(group.deliverables),
            billing_count=len(group.billing),
            ticket=correlated[group.date],
        )
        for group in date_groups
        if group.date in correlated
    ]
