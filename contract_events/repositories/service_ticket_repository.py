from uuid import UUID

from sqlalchemy.orm import Session

from contract_events.models.service_ticket import ServiceTicket
from contract_events.schemas.service_ticket import ServiceTicketCreate


class ServiceTicketRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_contract_id(self, contract_id: UUID) -> list[ServiceTicket]:
        """Tickets of a contract, earliest completion first."""
        return (
            self.db.query(ServiceTicket)
            .filter(ServiceTicket.contract_id == contract_id)
            .order_by(ServiceTicket.completed_at, ServiceTicket.created_at, ServiceTicket.id)
            .all()
        )

    def create(self, contract_id: UUID, data: ServiceTicketCreate) -> ServiceTicket:
        ticket = ServiceTicket(
            contract_id=contract_id,
            ticket_number=data.ticket_number,
            assigned_to_name=data.assigned_to_name,
            evidence_count=data.evidence_count,
            completed_at=data.completed_at,
            event_count=data.event_count,
        )
        self.db.add(ticket)
        self.db.commit()
        self.db.refresh(ticket)
        return ticket
