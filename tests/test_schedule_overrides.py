"""Tests for rescheduling generated events."""

import uuid
from datetime import date

import pytest

from contract_events.core.exceptions import EventNotFoundError
from contract_events.models.contract_event import EventType
from contract_events.services.event_generator import generate_events, sort_events
from contract_events.services.schedule_overrides import (
    ScheduleOverrides,
    apply_override,
    reset_override,
)


@pytest.fixture
def events(monthly_service_terms):
    return generate_events(monthly_service_terms)


def _by_id(events, event_id):
    return next(e for e in events if e.id == event_id)


class TestApplyOverride:
    def test_changes_scheduled_date_only(self, events):
        target = events[0]
        result = apply_override(events, target.id, date(2025, 2, 20))
        moved = _by_id(result, target.id)
        assert moved.scheduled_date == date(2025, 2, 20)
        assert moved.original_date == target.original_date
        assert moved.is_overridden

    def test_other_events_untouched(self, events):
        result = apply_override(events, events[0].id, date(2025, 2, 20))
        assert result[1:] == events[1:]

    def test_preserves_input_order(self, events):
        last_service = [e for e in events if e.event_type == EventType.SERVICE][-1]
        result = apply_override(events, last_service.id, date(2025, 1, 1))
        assert [e.id for e in result] == [e.id for e in events]
        # Re-sorting moves it to the front
        assert sort_events(result)[0].id == last_service.id

    def test_does_not_mutate_input(self, events):
        before = list(events)
        apply_override(events, events[0].id, date(2025, 2, 20))
        assert events == before

    def test_unknown_event(self, events):
        with pytest.raises(EventNotFoundError):
            apply_override(events, uuid.uuid4(), date(2025, 2, 20))


class TestResetOverride:
    @pytest.mark.parametrize(
        "new_date",
        [date(2024, 12, 31), date(2025, 2, 5), date(2025, 2, 28), date(2030, 6, 1)],
    )
    def test_reset_restores_original_date(self, events, new_date):
        target = events[1]
        moved = apply_override(events, target.id, new_date)
        restored = _by_id(reset_override(moved, target.id), target.id)
        assert restored.scheduled_date == restored.original_date
        assert restored == target

    def test_reset_without_override_is_noop(self, events):
        assert reset_override(events, events[0].id) == events

    def test_unknown_event(self, events):
        with pytest.raises(EventNotFoundError):
            reset_override(events, uuid.uuid4())


class TestScheduleOverrides:
    def test_apply_projects_and_sorts(self, events):
        last = events[-1]
        overrides = ScheduleOverrides()
        overrides.set(last.id, date(2025, 1, 1))
        projected = overrides.apply(events)
        assert projected[0].id == last.id
        assert projected[0].scheduled_date == date(2025, 1, 1)
        assert projected[0].original_date == last.original_date

    def test_reset_removes_entry(self, events):
        overrides = ScheduleOverrides({events[0].id: date(2025, 3, 1)})
        assert events[0].id in overrides
        overrides.reset(events[0].id)
        assert len(overrides) == 0
        assert overrides.get(events[0].id) is None
        assert overrides.apply(events) == events

    def test_reset_missing_entry_is_ignored(self, events):
        overrides = ScheduleOverrides()
        overrides.reset(events[0].id)
        assert overrides.as_dict() == {}

    def test_entries_without_override_return_to_original(self, events):
        moved = apply_override(events, events[0].id, date(2025, 3, 1))
        assert ScheduleOverrides().apply(moved) == events

    def test_as_dict_is_a_copy(self, events):
        overrides = ScheduleOverrides()
        overrides.set(events[0].id, date(2025, 3, 1))
        snapshot = overrides.as_dict()
        snapshot.clear()
        assert len(overrides) == 1
