from sqlalchemy.orm import Session

from contract_events.models.event_status_config import EventStatusDefinition, EventStatusTransition


class EventStatusConfigRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_statuses(self, event_type: str) -> list[EventStatusDefinition]:
        return (
            self.db.query(EventStatusDefinition)
            .filter(EventStatusDefinition.event_type == event_type)
            .order_by(EventStatusDefinition.display_order, EventStatusDefinition.code)
            .all()
        )

    def get_transitions(
        self,
        event_type: str,
        from_status: str | None = None,
    ) -> list[EventStatusTransition]:
        query = self.db.query(EventStatusTransition).filter(
            EventStatusTransition.event_type == event_type
        )
        if from_status is not None:
            query = query.filter(EventStatusTransition.from_status == from_status)
        return query.order_by(
            EventStatusTransition.from_status, EventStatusTransition.to_status
        ).all()

    def has_statuses(self, event_type: str) -> bool:
        query = self.db.query(EventStatusDefinition).filter(
            EventStatusDefinition.event_type == event_type
        )
        return query.first() is not None

    def get_transition(
        self,
        event_type: str,
        from_status: str,
        to_status: str,
    ) -> EventStatusTransition | None:
        return (
            self.db.query(EventStatusTransition)
            .filter(
                EventStatusTransition.event_type == event_type,
                EventStatusTransition.from_status == from_status,
                EventStatusTransition.to_status == to_status,
            )
            .first()
        )

    def add_transition(
        self,
        event_type: str,
        from_status: str,
        to_status: str,
    ) -> EventStatusTransition:
        """Add an edge; adding an existing edge returns it unchanged."""
        existing = self.get_transition(event_type, from_status, to_status)
        if existing is not None:
            return existing
        transition = EventStatusTransition(
            event_type=event_type,
            from_status=from_status,
            to_status=to_status,
        )
        self.db.add(transition)
        self.db.commit()
        self.db.refresh(transition)
        return transition

    def delete_transition(self, event_type: str, from_status: str, to_status: str) -> bool:
        transition = self.get_transition(event_type, from_status, to_status)
        if not transition:
            return False
        self.db.delete(transition)
        self.db.commit()
        return True

    def seed(
        self,
        event_type: str,
        statuses: list[tuple[str, str]],
        edges: list[tuple[str, str]],
    ) -> None:
        """Write a full vocabulary and edge set for an event type in one commit."""
        for order, (code, label) in enumerate(statuses):
            self.db.add(
                EventStatusDefinition(
                    event_type=event_type,
                    code=code,
                    label=label,
                    display_order=order,
                )
            )
        for from_status, to_status in edges:
            self.db.add(
                EventStatusTransition(
                    event_type=event_type,
                    from_status=from_status,
                    to_status=to_status,
                )
            )
        self.db.commit()
