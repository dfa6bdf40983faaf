import datetime as dt
from uuid import UUID

from pydantic import BaseModel, Field


class ServiceTicketCreate(BaseModel):
    ticket_number: str = Field(..., min_length=1, max_length=50)
    assigned_to_name: str | None = None
    evidence_count: int = Field(default=0, ge=0)
    completed_at: dt.datetime | None = None
    event_count: int = Field(default=0, ge=0)


class TicketDisplayInfo(BaseModel):
    """Ticket fields shown on a collapsed completed-day summary."""

    id: UUID
    ticket_number: str
    assigned_to: str
    evidence_count: int
    completed_at: dt.date
    event_count: int


class TicketCorrelation(BaseModel):
    date: dt.date
    deliverable_count: int
    billing_count: int
    ticket: TicketDisplayInfo | None = None
