"""Persists generated schedules and serves the read-side views of a contract."""

import logging
from datetime import date
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from contract_events.core.exceptions import EventNotFoundError, ScheduleAlreadyGeneratedError
from contract_events.models.shared import utc_today
from contract_events.repositories.contract_event_repository import ContractEventRepository
from contract_events.repositories.service_ticket_repository import ServiceTicketRepository
from contract_events.schemas.contract_event import (
    ContractEvent,
    DateBuckets,
    DateGroup,
    EventSummary,
)
from contract_events.schemas.contract_terms import ContractTerms
from contract_events.schemas.service_ticket import TicketCorrelation
from contract_events.services import schedule_projector, ticket_correlator
from contract_events.services.event_generator import generate_events

logger = logging.getLogger(__name__)


class ContractEventService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = ContractEventRepository(db)
        self.ticket_repo = ServiceTicketRepository(db)

    def generate_for_contract(self, contract_id: UUID, terms: ContractTerms) -> list[ContractEvent]:
        """Generate a contract's events and bulk-insert them.

        Runs once per contract. Event ids are derived from the contract id,
        so a concurrent second insert collides on the primary key and is
        reported the same way as a sequential one.

        Raises:
            ConfigurationError: The terms are malformed; nothing is stored.
            ScheduleAlreadyGeneratedError: The contract already has events.
        """
        if self.repo.exists_for_contract(contract_id):
            raise ScheduleAlreadyGeneratedError(contract_id)

        events = generate_events(terms, contract_id=contract_id)
        try:
            self.repo.bulk_create(events)
        except IntegrityError as exc:
            self.db.rollback()
            raise ScheduleAlreadyGeneratedError(contract_id) from exc

        logger.info("Stored %d events for contract %s", len(events), contract_id)
        return events

    def get_event(self, event_id: UUID) -> ContractEvent:
        record = self.repo.get_by_id(event_id)
        if record is None:
            raise EventNotFoundError(event_id)
        return ContractEvent.model_validate(record)

    def list_for_contract(
        self,
        contract_id: UUID,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> list[ContractEvent]:
        records = self.repo.get_by_contract_id(contract_id, date_from=date_from, date_to=date_to)
        return [ContractEvent.model_validate(record) for record in records]

    def override_date(self, event_id: UUID, new_date: date) -> ContractEvent:
        """Reschedule one event; its original date is kept."""
        if not self.repo.set_override_date(event_id, new_date):
            raise EventNotFoundError(event_id)
        event = self.get_event(event_id)
        logger.info(
            "Event %s rescheduled from %s to %s", event_id, event.original_date, new_date
        )
        return event

    def reset_date(self, event_id: UUID) -> ContractEvent:
        """Put an event back on its original date."""
        if not self.repo.set_override_date(event_id, None):
            raise EventNotFoundError(event_id)
        event = self.get_event(event_id)
        logger.info("Event %s reset to %s", event_id, event.original_date)
        return event

    def summary(self, contract_id: UUID) -> EventSummary:
        return schedule_projector.summarize(self.list_for_contract(contract_id))

    def date_groups(self, contract_id: UUID) -> list[DateGroup]:
        return schedule_projector.group_by_date(self.list_for_contract(contract_id))

    def date_buckets(self, contract_id: UUID, today: date | None = None) -> DateBuckets:
        return schedule_projector.date_buckets(
            self.list_for_contract(contract_id), today or utc_today()
        )

    def ticket_correlation(self, contract_id: UUID) -> list[TicketCorrelation]:
        """Completed days of a contract joined with its service tickets."""
        groups = self.date_groups(contract_id)
        tickets = self.ticket_repo.get_by_contract_id(contract_id)
        return ticket_correlator.correlation_rows(groups, tickets)

    def refresh_overdue_flags(self, today: date | None = None) -> int:
        return self.repo.refresh_overdue_flags(today or utc_today())
