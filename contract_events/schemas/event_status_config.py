from pydantic import BaseModel, Field

from contract_events.models.contract_event import EventType


class StatusDefinitionSchema(BaseModel):
    code: str = Field(..., min_length=1, max_length=30)
    label: str = Field(..., min_length=1, max_length=100)
    display_order: int = 0

    model_config = {"from_attributes": True}


class TransitionEdgeSchema(BaseModel):
    from_status: str = Field(..., min_length=1, max_length=30)
    to_status: str = Field(..., min_length=1, max_length=30)

    model_config = {"from_attributes": True}


class EventTypeStatusesResponse(BaseModel):
    event_type: EventType
    statuses: list[StatusDefinitionSchema]


class EventTypeTransitionsResponse(BaseModel):
    event_type: EventType
    transitions: list[TransitionEdgeSchema]


class TransitionEdgesUpdate(BaseModel):
    transitions: list[TransitionEdgeSchema] = Field(..., min_length=1)
