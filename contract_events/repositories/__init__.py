from contract_events.repositories.contract_event_repository import ContractEventRepository
from contract_events.repositories.event_status_config_repository import (
    EventStatusConfigRepository,
)
from contract_events.repositories.service_ticket_repository import ServiceTicketRepository

__all__ = [
    "ContractEventRepository",
    "EventStatusConfigRepository",
    "ServiceTicketRepository",
]
