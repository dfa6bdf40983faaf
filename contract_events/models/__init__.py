from contract_events.models.contract_event import (
    EVENT_TYPE_RANK,
    TERMINAL_STATUSES,
    BillingSubType,
    ContractEventRecord,
    EventType,
)
from contract_events.models.event_status_config import (
    EventStatusDefinition,
    EventStatusTransition,
)
from contract_events.models.service_ticket import ServiceTicket

__all__ = [
    "BillingSubType",
    "ContractEventRecord",
    "EVENT_TYPE_RANK",
    "EventStatusDefinition",
    "EventStatusTransition",
    "EventType",
    "ServiceTicket",
    "TERMINAL_STATUSES",
]
