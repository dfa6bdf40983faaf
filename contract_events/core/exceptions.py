"""Error taxonomy for event generation and the status lifecycle.

Every error derives from ``ValueError`` so callers that only care about
"the request was rejected" can catch one type, while routers map each
subclass to its own HTTP status.
"""

from datetime import date
from uuid import UUID


class ConfigurationError(ValueError):
    """Contract terms or status configuration are malformed.

    Raised before anything is emitted: generation is all-or-nothing.
    """


class EventNotFoundError(ValueError):
    """No contract event exists with the given id."""

    def __init__(self, event_id: UUID | str):
        self.event_id = event_id
        super().__init__(f"Contract event {event_id} not found")


class ConflictError(ValueError):
    """The caller's ``expected_version`` is stale.

    Recoverable by reloading the event and retrying; never retried here.
    """

    def __init__(
        self,
        event_id: UUID | str,
        expected_version: int,
        current_version: int | None = None,
    ):
        self.event_id = event_id
        self.expected_version = expected_version
        self.current_version = current_version
        message = f"Version conflict on contract event {event_id}: expected {expected_version}"
        if current_version is not None:
            message += f", current is {current_version}"
        super().__init__(message)


class InvalidTransitionError(ValueError):
    """The requested status change is not an edge for the event's type."""

    def __init__(self, event_type: str, current_status: str, attempted_status: str):
        self.event_type = event_type
        self.current_status = current_status
        self.attempted_status = attempted_status
        super().__init__(
            f"Invalid transition for {event_type} event: "
            f"{current_status!r} -> {attempted_status!r}"
        )


class ScheduleAlreadyGeneratedError(ValueError):
    """Events for the contract were already bulk-created."""

    def __init__(self, contract_id: UUID):
        self.contract_id = contract_id
        super().__init__(f"Events for contract {contract_id} were already generated")


class CorrelationAmbiguity(UserWarning):  # noqa: N818
    """More than one completion ticket falls on the same date.

    Non-fatal: the first ticket in input order is used.
    """

    def __init__(self, day: date, ticket_ids: list[str]):
        self.day = day
        self.ticket_ids = ticket_ids
        super().__init__(
            f"{len(ticket_ids)} tickets completed on {day.isoformat()}; "
            f"using {ticket_ids[0]}"
        )
