from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from contract_events.core.database import get_db
from contract_events.core.exceptions import ConfigurationError
from contract_events.models.contract_event import EventType
from contract_events.repositories.event_status_config_repository import (
    EventStatusConfigRepository,
)
from contract_events.schemas.event_status_config import (
    EventTypeStatusesResponse,
    EventTypeTransitionsResponse,
    StatusDefinitionSchema,
    TransitionEdgeSchema,
    TransitionEdgesUpdate,
)
from contract_events.services.status_config import EventTypeConfig, StatusConfigService

router = APIRouter()


def _transitions_response(config: EventTypeConfig, event_type: EventType) -> EventTypeTransitionsResponse:
    return EventTypeTransitionsResponse(
        event_type=event_type,
        transitions=[
            TransitionEdgeSchema(from_status=from_status, to_status=to_status)
            for from_status, to_status in sorted(config.edges)
        ],
    )


@router.get(
    "/{event_type}/statuses",
    response_model=EventTypeStatusesResponse,
    summary="List statuses for an event type",
)
async def list_statuses(
    event_type: EventType,
    db: Session = Depends(get_db),
) -> EventTypeStatusesResponse:
    StatusConfigService(db).ensure_seeded()
    statuses = EventStatusConfigRepository(db).get_statuses(event_type.value)
    return EventTypeStatusesResponse(
        event_type=event_type,
        statuses=[StatusDefinitionSchema.model_validate(s) for s in statuses],
    )


@router.get(
    "/{event_type}/transitions",
    response_model=EventTypeTransitionsResponse,
    summary="List transitions for an event type",
)
async def list_transitions(
    event_type: EventType,
    from_status: str | None = None,
    db: Session = Depends(get_db),
) -> EventTypeTransitionsResponse:
    """List the configured edges, or only those leaving ``from_status``."""
    StatusConfigService(db).ensure_seeded()
    edges = EventStatusConfigRepository(db).get_transitions(
        event_type.value, from_status=from_status
    )
    return EventTypeTransitionsResponse(
        event_type=event_type,
        transitions=[TransitionEdgeSchema.model_validate(e) for e in edges],
    )


@router.put(
    "/{event_type}/transitions",
    response_model=EventTypeTransitionsResponse,
    summary="Add transitions to an event type",
    responses={422: {"description": "Edge references an unknown status or is a self-loop"}},
)
async def add_transitions(
    event_type: EventType,
    data: TransitionEdgesUpdate,
    db: Session = Depends(get_db),
) -> EventTypeTransitionsResponse:
    service = StatusConfigService(db)
    try:
        config = service.add_transitions(
            event_type, [(edge.from_status, edge.to_status) for edge in data.transitions]
        )
    except ConfigurationError as exc:
        raise HTTPException(
            status_code=422,
            detail={"code": "INVALID_STATUS_CONFIGURATION", "message": str(exc)},
        ) from exc
    return _transitions_response(config, event_type)


@router.delete(
    "/{event_type}/transitions",
    response_model=EventTypeTransitionsResponse,
    summary="Remove transitions from an event type",
)
async def remove_transitions(
    event_type: EventType,
    data: TransitionEdgesUpdate,
    db: Session = Depends(get_db),
) -> EventTypeTransitionsResponse:
    config = StatusConfigService(db).remove_transitions(
        event_type, [(edge.from_status, edge.to_status) for edge in data.transitions]
    )
    return _transitions_response(config, event_type)
