from collections.abc import Iterable
from datetime import date
from typing import Any
from uuid import UUID

from sqlalchemy import and_, or_, update
from sqlalchemy.orm import Query, Session

from contract_events.core.sorting import apply_order_by
from contract_events.models.contract_event import TERMINAL_STATUSES, ContractEventRecord
from contract_events.schemas.contract_event import ContractEvent


class ContractEventRepository:
    def __init__(self, db: Session):
        self.db = db

    def _filtered(
        self,
        contract_id: UUID | None = None,
        event_type: str | None = None,
        status: str | None = None,
        assigned_to: str | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        overdue: bool | None = None,
    ) -> Query:  # type: ignore[type-arg]
        query = self.db.query(ContractEventRecord)
        if contract_id is not None:
            query = query.filter(ContractEventRecord.contract_id == contract_id)
        if event_type is not None:
            query = query.filter(ContractEventRecord.event_type == event_type)
        if status is not None:
            query = query.filter(ContractEventRecord.status == status)
        if assigned_to is not None:
            query = query.filter(ContractEventRecord.assigned_to == assigned_to)
        if date_from is not None:
            query = query.filter(ContractEventRecord.scheduled_date >= date_from)
        if date_to is not None:
            query = query.filter(ContractEventRecord.scheduled_date <= date_to)
        if overdue is not None:
            query = query.filter(ContractEventRecord.is_overdue.is_(overdue))
        return query

    def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
        order_by: str | None = None,
        **filters: Any,
    ) -> list[ContractEventRecord]:
        query = self._filtered(**filters)
        query = apply_order_by(
            query,
            ContractEventRecord,
            order_by,
            default_field="scheduled_date",
            default_direction="asc",
            tie_breakers=(
                ContractEventRecord.type_rank,
                ContractEventRecord.line_id,
                ContractEventRecord.sequence_number,
            ),
        )
        return query.offset(skip).limit(limit).all()

    def count(self, **filters: Any) -> int:
        return self._filtered(**filters).count()

    def get_by_id(self, event_id: UUID) -> ContractEventRecord | None:
        return self.db.query(ContractEventRecord).filter(ContractEventRecord.id == event_id).first()

    def get_by_contract_id(
        self,
        contract_id: UUID,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> list[ContractEventRecord]:
        """All events of a contract, optionally limited to a date window."""
        query = self._filtered(contract_id=contract_id, date_from=date_from, date_to=date_to)
        return query.order_by(
            ContractEventRecord.scheduled_date,
            ContractEventRecord.type_rank,
            ContractEventRecord.line_id,
            ContractEventRecord.sequence_number,
        ).all()

    def exists_for_contract(self, contract_id: UUID) -> bool:
        query = self.db.query(ContractEventRecord).filter(
            ContractEventRecord.contract_id == contract_id
        )
        return query.first() is not None

    def bulk_create(self, events: Iterable[ContractEvent]) -> list[ContractEventRecord]:
        records = [
            ContractEventRecord(
                id=event.id,
                contract_id=event.contract_id,
                line_id=event.line_id,
                event_type=event.event_type.value,
                billing_sub_type=(
                    event.billing_sub_type.value if event.billing_sub_type else None
                ),
                label=event.label,
                sequence_number=event.sequence_number,
                total_occurrences=event.total_occurrences,
                original_date=event.original_date,
                override_date=(
                    event.scheduled_date if event.scheduled_date != event.original_date else None
                ),
                amount=event.amount,
                currency=event.currency,
                status=event.status,
                version=event.version,
                assigned_to=event.assigned_to,
                notes=event.notes,
            )
            for event in events
        ]
        self.db.add_all(records)
        self.db.commit()
        return records

    def compare_and_set(
        self,
        event_id: UUID,
        expected_version: int,
        values: dict[str, Any],
        expected_status: str | None = None,
    ) -> bool:
        """Apply ``values`` and bump the version only if the row still has
        ``expected_version`` (and ``expected_status``, when given).

        Runs as one conditional UPDATE, so of two writers holding the same
        version exactly one succeeds. Returns whether the row changed.
        """
        conditions = [
            ContractEventRecord.id == event_id,
            ContractEventRecord.version == expected_version,
        ]
        if expected_status is not None:
            conditions.append(ContractEventRecord.status == expected_status)
        stmt = (
            update(ContractEventRecord)
            .where(*conditions)
            .values(**values, version=expected_version + 1)
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(stmt)
        self.db.commit()
        return result.rowcount == 1  # type: ignore[attr-defined]

    def set_override_date(self, event_id: UUID, override_date: date | None) -> bool:
        """Set (or clear, with None) the reschedule of an event."""
        stmt = (
            update(ContractEventRecord)
            .where(ContractEventRecord.id == event_id)
            .values(
                override_date=override_date,
                version=ContractEventRecord.version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(stmt)
        self.db.commit()
        return result.rowcount == 1  # type: ignore[attr-defined]

    def refresh_overdue_flags(self, today: date) -> int:
        """Recompute the ``is_overdue`` cache. Returns the number of rows flipped."""
        open_and_late = and_(
            ContractEventRecord.scheduled_date < today,
            ContractEventRecord.status.not_in(sorted(TERMINAL_STATUSES)),
        )
        flagged = self.db.execute(
            update(ContractEventRecord)
            .where(open_and_late, ContractEventRecord.is_overdue.is_(False))
            .values(is_overdue=True)
            .execution_options(synchronize_session=False)
        )
        cleared = self.db.execute(
            update(ContractEventRecord)
            .where(
                or_(
                    ContractEventRecord.scheduled_date >= today,
                    ContractEventRecord.status.in_(sorted(TERMINAL_STATUSES)),
                ),
                ContractEventRecord.is_overdue.is_(True),
            )
            .values(is_overdue=False)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        return flagged.rowcount + cleared.rowcount  # type: ignore[attr-defined]
