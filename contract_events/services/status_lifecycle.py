"""Status changes on stored contract events, guarded by optimistic concurrency."""

import logging
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from contract_events.core.exceptions import (
    ConflictError,
    EventNotFoundError,
    InvalidTransitionError,
)
from contract_events.models.contract_event import TERMINAL_STATUSES, ContractEventRecord
from contract_events.repositories.contract_event_repository import ContractEventRepository
from contract_events.schemas.contract_event import ContractEvent
from contract_events.services.status_config import StatusConfigService, StatusRegistry

logger = logging.getLogger(__name__)

_UNSET: Any = object()


@dataclass(frozen=True)
class TransitionResult:
    event: ContractEvent
    new_version: int


class EventLifecycleService:
    """Validates and applies status transitions against the configured edges.

    Checks run in a fixed order: the version first, then the edge. A stale
    caller therefore always sees ``ConflictError`` and refetches, even when
    the transition it asked for would be illegal. Nothing is retried here.
    """

    def __init__(self, db: Session, registry: StatusRegistry | None = None):
        self.db = db
        self.repo = ContractEventRepository(db)
        self._registry = registry

    @property
    def registry(self) -> StatusRegistry:
        if self._registry is None:
            self._registry = StatusConfigService(self.db).load_registry()
        return self._registry

    def _load(self, event_id: UUID, expected_version: int) -> ContractEventRecord:
        record = self.repo.get_by_id(event_id)
        if record is None:
            raise EventNotFoundError(event_id)
        if record.version != expected_version:
            logger.warning(
                "Version conflict on event %s: expected %d, current %d",
                event_id,
                expected_version,
                record.version,
            )
            raise ConflictError(event_id, expected_version, int(record.version))
        return record

    def _write(
        self,
        event_id: UUID,
        expected_version: int,
        values: dict[str, Any],
        expected_status: str | None = None,
    ) -> ContractEvent:
        if not self.repo.compare_and_set(event_id, expected_version, values, expected_status):
            # Another writer got in between the read and the conditional update
            current = self.repo.get_by_id(event_id)
            current_version = int(current.version) if current is not None else None
            logger.warning(
                "Lost update race on event %s at version %d", event_id, expected_version
            )
            raise ConflictError(event_id, expected_version, current_version)
        updated = self.repo.get_by_id(event_id)
        if updated is None:
            raise EventNotFoundError(event_id)
        return ContractEvent.model_validate(updated)

    def transition(self, event_id: UUID, expected_version: int, to_status: str) -> TransitionResult:
        """Move an event to ``to_status``.

        Raises:
            EventNotFoundError: No such event.
            ConflictError: ``expected_version`` is not the stored version.
            InvalidTransitionError: No edge from the current status to
                ``to_status`` for the event's type.
            ConfigurationError: The store has no statuses for the event's
                type.
        """
        record = self._load(event_id, expected_version)
        event_type = str(record.event_type)
        current_status = str(record.status)

        if not self.registry.allows(event_type, current_status, to_status):
            logger.warning(
                "Rejected %s transition on event %s: %s -> %s",
                event_type,
                event_id,
                current_status,
                to_status,
            )
            raise InvalidTransitionError(event_type, current_status, to_status)

        values: dict[str, Any] = {"status": to_status}
        if to_status in TERMINAL_STATUSES:
            values["is_overdue"] = False
        event = self._write(event_id, expected_version, values, expected_status=current_status)
        logger.info(
            "Event %s moved %s -> %s (version %d)",
            event_id,
            current_status,
            to_status,
            event.version,
        )
        return TransitionResult(event=event, new_version=event.version)

    def update_details(
        self,
        event_id: UUID,
        expected_version: int,
        assigned_to: str | None = _UNSET,
        notes: str | None = _UNSET,
    ) -> ContractEvent:
        """Change the assignee and/or notes, version-guarded like a transition.

        Omitted arguments are left untouched; passing None clears the field.
        """
        self._load(event_id, expected_version)
        values: dict[str, Any] = {}
        if assigned_to is not _UNSET:
            values["assigned_to"] = assigned_to
        if notes is not _UNSET:
            values["notes"] = notes
        return self._write(event_id, expected_version, values)
