from contract_events.schemas.contract_event import (
    ContractEvent,
    ContractEventDetailsUpdate,
    ContractEventResponse,
    DateBucket,
    DateBuckets,
    DateGroup,
    EventSummary,
    LineGroup,
    ScheduleOverrideRequest,
    StatusTransitionRequest,
    StatusTransitionResponse,
)
from contract_events.schemas.contract_terms import (
    BillingCycleMode,
    ContractLine,
    ContractTerms,
    DurationUnit,
    LineCycle,
    LineKind,
    LinePaymentType,
    PaymentMode,
)
from contract_events.schemas.service_ticket import (
    ServiceTicketCreate,
    TicketCorrelation,
    TicketDisplayInfo,
)

__all__ = [
    "BillingCycleMode",
    "ContractEvent",
    "ContractEventDetailsUpdate",
    "ContractEventResponse",
    "ContractLine",
    "ContractTerms",
    "DateBucket",
    "DateBuckets",
    "DateGroup",
    "DurationUnit",
    "EventSummary",
    "LineCycle",
    "LineGroup",
    "LineKind",
    "LinePaymentType",
    "PaymentMode",
    "ScheduleOverrideRequest",
    "ServiceTicketCreate",
    "StatusTransitionRequest",
    "StatusTransitionResponse",
    "TicketCorrelation",
    "TicketDisplayInfo",
]
