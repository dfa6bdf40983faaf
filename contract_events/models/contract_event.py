from datetime import date
from enum import Enum

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Integer,
    Numeric,
    String,
    Text,
    case,
    func,
)
from sqlalchemy.ext.hybrid import hybrid_property

from contract_events.core.database import Base
from contract_events.models.shared import UUIDType, generate_uuid


class EventType(str, Enum):
    SERVICE = "service"
    SPARE_PART = "spare_part"
    BILLING = "billing"


class BillingSubType(str, Enum):
    UPFRONT = "upfront"
    EMI = "emi"
    ON_COMPLETION = "on_completion"
    COMBINED = "combined"


# Same-day ordering: deliverables first, service before spare parts.
EVENT_TYPE_RANK: dict[str, int] = {
    EventType.SERVICE.value: 0,
    EventType.SPARE_PART.value: 1,
    EventType.BILLING.value: 2,
}

DEFAULT_EVENT_STATUS = "scheduled"
COMPLETED_STATUS = "completed"
CANCELLED_STATUS = "cancelled"
TERMINAL_STATUSES = frozenset({COMPLETED_STATUS, CANCELLED_STATUS})

# Display-only flag, never a stored status or a transition target.
OVERDUE_FLAG = "overdue"


class ContractEventRecord(Base):
    __tablename__ = "contract_events"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    contract_id = Column(UUIDType, nullable=False, index=True)
    line_id = Column(String(255), nullable=False)
    event_type = Column(String(20), nullable=False, index=True)
    billing_sub_type = Column(String(20), nullable=True)
    label = Column(String(255), nullable=True)
    sequence_number = Column(Integer, nullable=False)
    total_occurrences = Column(Integer, nullable=False, default=1)

    # original_date is written once; override_date holds a user reschedule
    original_date = Column(Date, nullable=False)
    override_date = Column(Date, nullable=True)

    amount = Column(Numeric(12, 4), nullable=True)
    currency = Column(String(3), nullable=True)

    status = Column(String(30), nullable=False, default=DEFAULT_EVENT_STATUS, index=True)
    version = Column(Integer, nullable=False, default=1)
    assigned_to = Column(String(255), nullable=True, index=True)
    notes = Column(Text, nullable=True)

    # Refreshed by the worker; reads can always derive it instead
    is_overdue = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    @hybrid_property
    def scheduled_date(self) -> date:
        if self.override_date is not None:
            return self.override_date  # type: ignore[return-value]
        return self.original_date  # type: ignore[return-value]

    @scheduled_date.expression  # type: ignore[no-redef]
    def scheduled_date(cls):  # noqa: N805
        return func.coalesce(cls.override_date, cls.original_date)

    @hybrid_property
    def type_rank(self) -> int:
        return EVENT_TYPE_RANK.get(str(self.event_type), len(EVENT_TYPE_RANK))

    @type_rank.expression  # type: ignore[no-redef]
    def type_rank(cls):  # noqa: N805
        return case(EVENT_TYPE_RANK, value=cls.event_type, else_=len(EVENT_TYPE_RANK))
