"""User reschedules applied on top of generated events.

An override replaces ``scheduled_date`` only; ``original_date`` is never
touched, so a reset restores the as-generated date exactly. Overrides are
kept as a sparse ``event id -> date`` map and projected onto the event
list, so regenerating a schedule is never needed to honour them.
"""

from collections.abc import Iterable, Mapping
from datetime import date
from uuid import UUID

from contract_events.core.exceptions import EventNotFoundError
from contract_events.schemas.contract_event import ContractEvent
from contract_events.services.event_generator import sort_events


def _replace_scheduled_date(
    events: list[ContractEvent],
    event_id: UUID,
    scheduled_date: date | None,
) -> list[ContractEvent]:
    result = []
    found = False
    for event in events:
        if event.id == event_id:
            found = True
            new_date = scheduled_date if scheduled_date is not None else event.original_date
            event = event.model_copy(update={"scheduled_date": new_date})
        result.append(event)
    if not found:
        raise EventNotFoundError(event_id)
    return result


def apply_override(events: list[ContractEvent], event_id: UUID, new_date: date) -> list[ContractEvent]:
    """Return a copy of ``events`` with one event rescheduled.

    Order is preserved; callers re-sort with ``sort_events`` since a new
    date can move the event.
    """
    return _replace_scheduled_date(events, event_id, new_date)


def reset_override(events: list[ContractEvent], event_id: UUID) -> list[ContractEvent]:
    """Return a copy of ``events`` with one event back on its original date."""
    return _replace_scheduled_date(events, event_id, None)


class ScheduleOverrides:
    """Sparse map of rescheduled events, projected after generation or load."""

    def __init__(self, overrides: Mapping[UUID, date] | None = None):
        self._overrides: dict[UUID, date] = dict(overrides or {})

    def __len__(self) -> int:
        return len(self._overrides)

    def __contains__(self, event_id: object) -> bool:
        return event_id in self._overrides

    def get(self, event_id: UUID) -> date | None:
        return self._overrides.get(event_id)

    def set(self, event_id: UUID, new_date: date) -> None:
        self._overrides[event_id] = new_date

    def reset(self, event_id: UUID) -> None:
        self._overrides.pop(event_id, None)

    def as_dict(self) -> dict[UUID, date]:
        return dict(self._overrides)

    def apply(self, events: Iterable[ContractEvent]) -> list[ContractEvent]:
        """Project the overrides onto ``events`` and return them sorted.

        Events without an entry are put back on their original date.
        """
        projected = []
        for event in events:
            scheduled = self._overrides.get(event.id, event.original_date)
            if scheduled != event.scheduled_date:
                event = event.model_copy(update={"scheduled_date": scheduled})
            projected.append(event)
        return sort_events(projected)
