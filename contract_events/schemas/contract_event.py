import datetime as dt
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field

from contract_events.models.contract_event import (
    DEFAULT_EVENT_STATUS,
    BillingSubType,
    EventType,
)
from contract_events.schemas.contract_terms import ContractLine


class ContractEvent(BaseModel):
    """A single dated obligation derived from a contract."""

    model_config = {"from_attributes": True, "frozen": True}

    id: UUID
    contract_id: UUID | None = None
    line_id: str
    event_type: EventType
    billing_sub_type: BillingSubType | None = None
    label: str | None = None
    sequence_number: int
    # 0 means an open-ended series with no fixed total
    total_occurrences: int
    scheduled_date: dt.date
    original_date: dt.date
    amount: Decimal | None = None
    currency: str | None = None
    status: str = DEFAULT_EVENT_STATUS
    version: int = 1
    assigned_to: str | None = None
    notes: str | None = None

    @property
    def is_overridden(self) -> bool:
        return self.scheduled_date != self.original_date


class ContractEventResponse(ContractEvent):
    is_overdue: bool = False
    created_at: dt.datetime | None = None
    updated_at: dt.datetime | None = None


class StatusTransitionRequest(BaseModel):
    expected_version: int = Field(..., ge=1)
    to_status: str = Field(..., min_length=1, max_length=30)


class StatusTransitionResponse(BaseModel):
    event: ContractEventResponse
    new_version: int


class ContractEventDetailsUpdate(BaseModel):
    expected_version: int = Field(..., ge=1)
    assigned_to: str | None = Field(default=None, max_length=255)
    notes: str | None = None


class ScheduleOverrideRequest(BaseModel):
    scheduled_date: dt.date


class EventSummary(BaseModel):
    total_events: int
    service_count: int
    spare_part_count: int
    billing_count: int
    total_billing_amount: Decimal
    first_event_date: dt.date | None = None
    last_event_date: dt.date | None = None
    span_days: int


class DateGroup(BaseModel):
    """Events sharing one calendar date, split into deliverables and billing."""

    date: dt.date
    deliverables: list[ContractEvent]
    billing: list[ContractEvent]
    all_completed: bool


class LineGroup(BaseModel):
    line_id: str
    events: list[ContractEvent]


class DateBucket(BaseModel):
    count: int = 0
    service_count: int = 0
    spare_part_count: int = 0
    billing_count: int = 0
    billing_amount: Decimal = Decimal("0")
    by_status: dict[str, int] = Field(default_factory=dict)


class DateBucketTotals(BaseModel):
    total_events: int = 0
    total_billing_amount: Decimal = Decimal("0")


class DateBuckets(BaseModel):
    overdue: DateBucket = Field(default_factory=DateBucket)
    today: DateBucket = Field(default_factory=DateBucket)
    tomorrow: DateBucket = Field(default_factory=DateBucket)
    this_week: DateBucket = Field(default_factory=DateBucket)
    next_week: DateBucket = Field(default_factory=DateBucket)
    later: DateBucket = Field(default_factory=DateBucket)
    totals: DateBucketTotals = Field(default_factory=DateBucketTotals)


class SchedulePreviewResponse(BaseModel):
    events: list[ContractEvent]
    summary: EventSummary
    continuous_lines: list[ContractLine]


class ScheduleGenerateResponse(BaseModel):
    contract_id: UUID
    events: list[ContractEventResponse]
    summary: EventSummary
