"""Expands contract terms into an ordered list of dated contract events.

Generation is a pure computation: the same terms (and contract id) always
produce the same events, including their ids. Nothing is persisted here;
``ContractEventService`` stores the result.
"""

import logging
import uuid
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_DOWN, Decimal
from uuid import UUID

from contract_events.core.exceptions import ConfigurationError
from contract_events.models.contract_event import (
    EVENT_TYPE_RANK,
    BillingSubType,
    EventType,
)
from contract_events.schemas.contract_event import ContractEvent
from contract_events.schemas.contract_terms import (
    BillingCycleMode,
    ContractLine,
    ContractTerms,
    LineCycle,
    LineKind,
    LinePaymentType,
    PaymentMode,
)
from contract_events.services.contract_dates import (
    add_duration,
    distribute_evenly,
    recurrence_date,
)

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")

# Synthetic line ids for contract-level billing
CONTRACT_BILLING_LINE_ID = "_contract"
EMI_BILLING_LINE_ID = "_emi"
UNIFIED_BILLING_LINE_ID = "_unified"

EVENT_ID_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_URL, "contract-events/contract-event")

_DELIVERABLE_KINDS: dict[str, EventType] = {
    LineKind.SERVICE.value: EventType.SERVICE,
    LineKind.SPARE_PART.value: EventType.SPARE_PART,
}


@dataclass
class _Draft:
    line_id: str
    event_type: EventType
    scheduled_date: date
    label_prefix: str
    amount: Decimal | None = None
    currency: str | None = None
    billing_sub_type: BillingSubType | None = None


def event_type_rank(event_type: EventType | str) -> int:
    value = event_type.value if isinstance(event_type, EventType) else event_type
    return EVENT_TYPE_RANK.get(value, len(EVENT_TYPE_RANK))


def sort_events(events: Iterable[ContractEvent]) -> list[ContractEvent]:
    """Order events by scheduled date, then service < spare part < billing.

    The sort is stable, so sorting an already sorted list is a no-op.
    """
    return sorted(events, key=lambda e: (e.scheduled_date, event_type_rank(e.event_type)))


def continuous_service_lines(terms: ContractTerms) -> list[ContractLine]:
    """Unlimited lines: continuous obligations that never become dated events."""
    return [line for line in terms.selected_lines if line.unlimited]


def contract_end_date(terms: ContractTerms) -> date:
    if terms.duration_value <= 0:
        raise ConfigurationError(
            f"Contract duration must be positive, got {terms.duration_value}"
        )
    return add_duration(terms.start_date, terms.duration_value, terms.duration_unit)


def _deliverable_lines(terms: ContractTerms) -> list[ContractLine]:
    return [
        line
        for line in terms.selected_lines
        if not line.unlimited and line.kind.value in _DELIVERABLE_KINDS
    ]


def _validate(terms: ContractTerms) -> None:
    if terms.payment_mode == PaymentMode.EMI and terms.emi_installment_count <= 0:
        raise ConfigurationError(
            f"EMI payment mode needs a positive installment count, "
            f"got {terms.emi_installment_count}"
        )
    seen: set[str] = set()
    for line in terms.selected_lines:
        if line.id in seen:
            raise ConfigurationError(f"Line id {line.id} appears more than once")
        seen.add(line.id)
        if line.cycle == LineCycle.CUSTOM and (
            line.custom_cycle_days is None or line.custom_cycle_days <= 0
        ):
            raise ConfigurationError(f"Line {line.id} uses a custom cycle without cycle days")
    for line in _deliverable_lines(terms):
        if line.quantity < 1:
            raise ConfigurationError(
                f"Line {line.id} needs a quantity of at least 1, got {line.quantity}"
            )


def _deliverable_dates(line: ContractLine, start: date, end: date) -> list[date]:
    dates = [
        recurrence_date(start, line.cycle, index, line.custom_cycle_days)
        for index in range(line.quantity)
    ]
    if any(occurrence is None for occurrence in dates):
        # prepaid/postpaid are billing hints only
        return distribute_evenly(start, end, line.quantity)
    return [occurrence for occurrence in dates if occurrence is not None]


def _line_payment_type(terms: ContractTerms, line: ContractLine) -> LinePaymentType:
    explicit = terms.per_line_payment_type.get(line.id)
    if explicit is not None:
        return explicit
    if line.cycle == LineCycle.POSTPAID:
        return LinePaymentType.POSTPAID
    return LinePaymentType.PREPAID


def _split_installments(total: Decimal, count: int) -> list[Decimal]:
    """Split ``total`` into ``count`` cent amounts; the last one takes the remainder."""
    base = (total / count).quantize(CENT, rounding=ROUND_DOWN)
    return [base] * (count - 1) + [total - base * (count - 1)]


def _billing_drafts(
    terms: ContractTerms,
    deliverable_dates: dict[str, list[date]],
) -> list[_Draft]:
    start = terms.start_date
    currency = terms.currency

    if terms.payment_mode == PaymentMode.PREPAID:
        return [
            _Draft(
                line_id=CONTRACT_BILLING_LINE_ID,
                event_type=EventType.BILLING,
                scheduled_date=start,
                label_prefix="Upfront",
                amount=terms.grand_total,
                currency=currency,
                billing_sub_type=BillingSubType.UPFRONT,
            )
        ]

    if terms.payment_mode == PaymentMode.EMI:
        count = terms.emi_installment_count
        return [
            _Draft(
                line_id=EMI_BILLING_LINE_ID,
                event_type=EventType.BILLING,
                scheduled_date=add_duration(start, index, "months"),
                label_prefix="EMI",
                amount=amount,
                currency=currency,
                billing_sub_type=BillingSubType.EMI,
            )
            for index, amount in enumerate(_split_installments(terms.grand_total, count))
        ]

    drafts: list[_Draft] = []
    for line in _deliverable_lines(terms):
        if _line_payment_type(terms, line) == LinePaymentType.PREPAID:
            drafts.append(
                _Draft(
                    line_id=line.id,
                    event_type=EventType.BILLING,
                    scheduled_date=start,
                    label_prefix="Prepaid",
                    amount=line.total_price,
                    currency=currency,
                    billing_sub_type=BillingSubType.UPFRONT,
                )
            )
            continue
        for occurrence in deliverable_dates[line.id]:
            drafts.append(
                _Draft(
                    line_id=line.id,
                    event_type=EventType.BILLING,
                    scheduled_date=occurrence,
                    label_prefix="Postpaid",
                    amount=line.unit_price,
                    currency=currency,
                    billing_sub_type=BillingSubType.ON_COMPLETION,
                )
            )

    if terms.billing_cycle_mode == BillingCycleMode.UNIFIED:
        return _combine_by_date(drafts, currency)
    return drafts


def _combine_by_date(drafts: list[_Draft], currency: str) -> list[_Draft]:
    """Collapse billing drafts that share a date into one combined draft."""
    totals: dict[date, Decimal] = {}
    for draft in drafts:
        totals[draft.scheduled_date] = totals.get(draft.scheduled_date, Decimal("0")) + (
            draft.amount or Decimal("0")
        )
    return [
        _Draft(
            line_id=UNIFIED_BILLING_LINE_ID,
            event_type=EventType.BILLING,
            scheduled_date=day,
            label_prefix="Combined billing",
            amount=amount,
            currency=currency,
            billing_sub_type=BillingSubType.COMBINED,
        )
        for day, amount in sorted(totals.items())
    ]


def _event_id(contract_id: UUID | None, line_id: str, event_type: EventType, seq: int) -> UUID:
    scope = str(contract_id) if contract_id is not None else "preview"
    return uuid.uuid5(EVENT_ID_NAMESPACE, f"{scope}:{line_id}:{event_type.value}:{seq}")


def _finalize(drafts: list[_Draft], contract_id: UUID | None) -> list[ContractEvent]:
    groups: dict[tuple[str, EventType], list[_Draft]] = defaultdict(list)
    for draft in drafts:
        groups[(draft.line_id, draft.event_type)].append(draft)

    events: list[ContractEvent] = []
    for (line_id, event_type), members in groups.items():
        members.sort(key=lambda d: d.scheduled_date)
        total = len(members)
        for seq, draft in enumerate(members, start=1):
            label = draft.label_prefix if total == 1 else f"{draft.label_prefix} {seq}/{total}"
            events.append(
                ContractEvent(
                    id=_event_id(contract_id, line_id, event_type, seq),
                    contract_id=contract_id,
                    line_id=line_id,
                    event_type=event_type,
                    billing_sub_type=draft.billing_sub_type,
                    label=label,
                    sequence_number=seq,
                    total_occurrences=total,
                    scheduled_date=draft.scheduled_date,
                    original_date=draft.scheduled_date,
                    amount=draft.amount,
                    currency=draft.currency,
                )
            )
    return events


def generate_events(terms: ContractTerms, contract_id: UUID | None = None) -> list[ContractEvent]:
    """Expand contract terms into deliverable and billing events.

    Args:
        terms: The contract's commercial terms.
        contract_id: Contract the events belong to. Also scopes the
            deterministic event ids; None produces preview ids.

    Returns:
        Events ordered by scheduled date, ties broken service, spare part,
        billing.

    Raises:
        ConfigurationError: The terms are malformed. No events are returned.
    """
    end = contract_end_date(terms)
    _validate(terms)

    drafts: list[_Draft] = []
    deliverable_dates: dict[str, list[date]] = {}
    for line in _deliverable_lines(terms):
        dates = _deliverable_dates(line, terms.start_date, end)
        deliverable_dates[line.id] = dates
        event_type = _DELIVERABLE_KINDS[line.kind.value]
        drafts.extend(
            _Draft(
                line_id=line.id,
                event_type=event_type,
                scheduled_date=occurrence,
                label_prefix=line.name or line.id,
            )
            for occurrence in dates
        )

    drafts.extend(_billing_drafts(terms, deliverable_dates))
    events = sort_events(_finalize(drafts, contract_id))
    logger.debug(
        "Generated %d events for contract %s (%s to %s)",
        len(events),
        contract_id,
        terms.start_date,
        end,
    )
    return events
