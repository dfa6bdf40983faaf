from sqlalchemy import Column, DateTime, Integer, String, func

from contract_events.core.database import Base
from contract_events.models.shared import UUIDType, generate_uuid


class ServiceTicket(Base):
    """Completed field-work record, written by the service execution flow."""

    __tablename__ = "service_tickets"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    contract_id = Column(UUIDType, nullable=False, index=True)
    ticket_number = Column(String(50), nullable=False)
    assigned_to_name = Column(String(255), nullable=True)
    evidence_count = Column(Integer, nullable=False, default=0)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    event_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
