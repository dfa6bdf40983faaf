from datetime import date
from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from sqlalchemy.orm import Session

from contract_events.core.coalescing import request_coalescer
from contract_events.core.database import get_db
from contract_events.core.exceptions import (
    ConfigurationError,
    ConflictError,
    EventNotFoundError,
    InvalidTransitionError,
    ScheduleAlreadyGeneratedError,
)
from contract_events.models.contract_event import ContractEventRecord, EventType
from contract_events.models.shared import utc_today
from contract_events.repositories.contract_event_repository import ContractEventRepository
from contract_events.schemas.contract_event import (
    ContractEvent,
    ContractEventDetailsUpdate,
    ContractEventResponse,
    DateBuckets,
    DateGroup,
    EventSummary,
    ScheduleGenerateResponse,
    SchedulePreviewResponse,
    ScheduleOverrideRequest,
    StatusTransitionRequest,
    StatusTransitionResponse,
)
from contract_events.schemas.contract_terms import ContractTerms
from contract_events.schemas.service_ticket import TicketCorrelation
from contract_events.services import schedule_projector
from contract_events.services.contract_event_service import ContractEventService
from contract_events.services.event_generator import continuous_service_lines, generate_events
from contract_events.services.status_lifecycle import EventLifecycleService

router = APIRouter()


def _to_response(event: ContractEvent | ContractEventRecord, today: date) -> ContractEventResponse:
    response = ContractEventResponse.model_validate(event)
    return response.model_copy(
        update={"is_overdue": schedule_projector.is_overdue(response, today)}
    )


def _error_detail(code: str, exc: Exception, **extra: Any) -> dict[str, Any]:
    return {"code": code, "message": str(exc), **extra}


@router.post(
    "/preview",
    response_model=SchedulePreviewResponse,
    summary="Preview generated events",
    responses={422: {"description": "Invalid contract terms"}},
)
async def preview_events(terms: ContractTerms) -> SchedulePreviewResponse:
    """Run the event generator on contract terms without storing anything."""
    try:
        events = generate_events(terms)
    except ConfigurationError as exc:
        raise HTTPException(
            status_code=422, detail=_error_detail("INVALID_CONTRACT_TERMS", exc)
        ) from exc
    return SchedulePreviewResponse(
        events=events,
        summary=schedule_projector.summarize(events),
        continuous_lines=continuous_service_lines(terms),
    )


@router.post(
    "/contracts/{contract_id}",
    response_model=ScheduleGenerateResponse,
    status_code=201,
    summary="Generate and store a contract's events",
    responses={
        409: {"description": "Events for this contract were already generated"},
        422: {"description": "Invalid contract terms"},
    },
)
def generate_contract_events(
    contract_id: UUID,
    terms: ContractTerms,
    request: Request,
    db: Session = Depends(get_db),
) -> ScheduleGenerateResponse:
    """Generate a contract's events once, at activation time.

    Duplicate requests that arrive while the first is still running share
    its outcome. Requests are coalesced per contract, and further by the
    ``Idempotency-Key`` header when one is sent.
    """
    key = f"generate:{contract_id}"
    idempotency_key = request.headers.get("Idempotency-Key")
    if idempotency_key:
        key = f"{key}:{idempotency_key}"
    service = ContractEventService(db)
    try:
        events = request_coalescer.run(key, service.generate_for_contract, contract_id, terms)
    except ConfigurationError as exc:
        raise HTTPException(
            status_code=422, detail=_error_detail("INVALID_CONTRACT_TERMS", exc)
        ) from exc
    except ScheduleAlreadyGeneratedError as exc:
        raise HTTPException(
            status_code=409, detail=_error_detail("ALREADY_GENERATED", exc)
        ) from exc

    today = utc_today()
    return ScheduleGenerateResponse(
        contract_id=contract_id,
        events=[_to_response(event, today) for event in events],
        summary=schedule_projector.summarize(events),
    )


@router.get(
    "/",
    response_model=list[ContractEventResponse],
    summary="List contract events",
)
async def list_contract_events(
    response: Response,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    contract_id: UUID | None = None,
    event_type: EventType | None = None,
    status: str | None = None,
    assigned_to: str | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    overdue: bool | None = None,
    order_by: str | None = None,
    db: Session = Depends(get_db),
) -> list[ContractEventResponse]:
    """List events with optional filters, ordered by scheduled date by default."""
    repo = ContractEventRepository(db)
    filters: dict[str, Any] = {
        "contract_id": contract_id,
        "event_type": event_type.value if event_type else None,
        "status": status,
        "assigned_to": assigned_to,
        "date_from": date_from,
        "date_to": date_to,
        "overdue": overdue,
    }
    response.headers["X-Total-Count"] = str(repo.count(**filters))
    today = utc_today()
    records = repo.get_all(skip=skip, limit=limit, order_by=order_by, **filters)
    return [_to_response(record, today) for record in records]


@router.get(
    "/{event_id}",
    response_model=ContractEventResponse,
    summary="Get contract event",
    responses={404: {"description": "Contract event not found"}},
)
async def get_contract_event(
    event_id: UUID,
    db: Session = Depends(get_db),
) -> ContractEventResponse:
    repo = ContractEventRepository(db)
    record = repo.get_by_id(event_id)
    if not record:
        raise HTTPException(status_code=404, detail="Contract event not found")
    return _to_response(record, utc_today())


@router.patch(
    "/{event_id}/status",
    response_model=StatusTransitionResponse,
    summary="Change event status",
    responses={
        404: {"description": "Contract event not found"},
        409: {"description": "Stale expected_version; reload and retry"},
        422: {
            "description": "Transition not allowed, or no statuses configured for the type"
        },
    },
)
async def transition_contract_event(
    event_id: UUID,
    data: StatusTransitionRequest,
    db: Session = Depends(get_db),
) -> StatusTransitionResponse:
    service = EventLifecycleService(db)
    try:
        result = service.transition(event_id, data.expected_version, data.to_status)
    except EventNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Contract event not found") from exc
    except ConflictError as exc:
        raise HTTPException(
            status_code=409,
            detail=_error_detail(
                "VERSION_CONFLICT", exc, current_version=exc.current_version
            ),
        ) from exc
    except InvalidTransitionError as exc:
        raise HTTPException(
            status_code=422,
            detail=_error_detail(
                "INVALID_TRANSITION",
                exc,
                current_status=exc.current_status,
                attempted_status=exc.attempted_status,
            ),
        ) from exc
    except ConfigurationError as exc:
        raise HTTPException(
            status_code=422, detail=_error_detail("INVALID_STATUS_CONFIGURATION", exc)
        ) from exc
    return StatusTransitionResponse(
        event=_to_response(result.event, utc_today()),
        new_version=result.new_version,
    )


@router.patch(
    "/{event_id}",
    response_model=ContractEventResponse,
    summary="Update event assignee or notes",
    responses={
        404: {"description": "Contract event not found"},
        409: {"description": "Stale expected_version; reload and retry"},
    },
)
async def update_contract_event(
    event_id: UUID,
    data: ContractEventDetailsUpdate,
    db: Session = Depends(get_db),
) -> ContractEventResponse:
    service = EventLifecycleService(db)
    changes = data.model_dump(exclude_unset=True, exclude={"expected_version"})
    try:
        event = service.update_details(event_id, data.expected_version, **changes)
    except EventNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Contract event not found") from exc
    except ConflictError as exc:
        raise HTTPException(
            status_code=409,
            detail=_error_detail(
                "VERSION_CONFLICT", exc, current_version=exc.current_version
            ),
        ) from exc
    return _to_response(event, utc_today())


@router.put(
    "/{event_id}/schedule",
    response_model=ContractEventResponse,
    summary="Reschedule an event",
    responses={404: {"description": "Contract event not found"}},
)
async def override_event_date(
    event_id: UUID,
    data: ScheduleOverrideRequest,
    db: Session = Depends(get_db),
) -> ContractEventResponse:
    service = ContractEventService(db)
    try:
        event = service.override_date(event_id, data.scheduled_date)
    except EventNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Contract event not found") from exc
    return _to_response(event, utc_today())


@router.delete(
    "/{event_id}/schedule",
    response_model=ContractEventResponse,
    summary="Reset an event to its original date",
    responses={404: {"description": "Contract event not found"}},
)
async def reset_event_date(
    event_id: UUID,
    db: Session = Depends(get_db),
) -> ContractEventResponse:
    service = ContractEventService(db)
    try:
        event = service.reset_date(event_id)
    except EventNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Contract event not found") from exc
    return _to_response(event, utc_today())


@router.get(
    "/contracts/{contract_id}/summary",
    response_model=EventSummary,
    summary="Contract schedule summary",
)
async def get_contract_summary(
    contract_id: UUID,
    db: Session = Depends(get_db),
) -> EventSummary:
    return ContractEventService(db).summary(contract_id)


@router.get(
    "/contracts/{contract_id}/date_groups",
    response_model=list[DateGroup],
    summary="Contract events grouped by date",
)
async def get_contract_date_groups(
    contract_id: UUID,
    db: Session = Depends(get_db),
) -> list[DateGroup]:
    return ContractEventService(db).date_groups(contract_id)


@router.get(
    "/contracts/{contract_id}/date_buckets",
    response_model=DateBuckets,
    summary="Contract events bucketed by due date",
)
async def get_contract_date_buckets(
    contract_id: UUID,
    today: date | None = None,
    db: Session = Depends(get_db),
) -> DateBuckets:
    return ContractEventService(db).date_buckets(contract_id, today)


@router.get(
    "/contracts/{contract_id}/tickets",
    response_model=list[TicketCorrelation],
    summary="Completed days with their service tickets",
)
async def get_contract_ticket_correlation(
    contract_id: UUID,
    db: Session = Depends(get_db),
) -> list[TicketCorrelation]:
    return ContractEventService(db).ticket_correlation(contract_id)
