from sqlalchemy import Column, DateTime, Integer, String, UniqueConstraint, func

from contract_events.core.database import Base
from contract_events.models.shared import UUIDType, generate_uuid


class EventStatusDefinition(Base):
    """One status in an event type's vocabulary."""

    __tablename__ = "event_status_definitions"
    __table_args__ = (
        UniqueConstraint("event_type", "code", name="uq_event_status_definitions_type_code"),
    )

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    event_type = Column(String(20), nullable=False, index=True)
    code = Column(String(30), nullable=False)
    label = Column(String(100), nullable=False)
    display_order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class EventStatusTransition(Base):
    """A directed edge ``from_status -> to_status`` legal for an event type."""

    __tablename__ = "event_status_transitions"
    __table_args__ = (
        UniqueConstraint(
            "event_type",
            "from_status",
            "to_status",
            name="uq_event_status_transitions_edge",
        ),
    )

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    event_type = Column(String(20), nullable=False, index=True)
    from_status = Column(String(30), nullable=False)
    to_status = Column(String(30), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
