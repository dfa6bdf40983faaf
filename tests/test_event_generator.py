"""Tests for expanding contract terms into contract events."""

import uuid
from datetime import date
from decimal import Decimal

import pytest

from contract_events.core.exceptions import ConfigurationError
from contract_events.models.contract_event import BillingSubType, EventType
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
from contract_events.services.event_generator import (
    CONTRACT_BILLING_LINE_ID,
    EMI_BILLING_LINE_ID,
    UNIFIED_BILLING_LINE_ID,
    _split_installments,
    continuous_service_lines,
    contract_end_date,
    event_type_rank,
    generate_events,
    sort_events,
)
from contract_events.services.schedule_projector import group_by_date

START = date(2025, 2, 5)


def _terms(**kwargs):
    defaults = {
        "start_date": START,
        "duration_value": 3,
        "duration_unit": DurationUnit.MONTHS,
        "selected_lines": [],
        "payment_mode": PaymentMode.PREPAID,
        "grand_total": Decimal("0"),
    }
    defaults.update(kwargs)
    return ContractTerms(**defaults)


def _service_line(**kwargs):
    defaults = {
        "id": "svc-1",
        "kind": LineKind.SERVICE,
        "quantity": 3,
        "cycle": LineCycle.MONTHLY,
        "unit_price": Decimal("100"),
    }
    defaults.update(kwargs)
    return ContractLine(**defaults)


def _of_type(events, event_type):
    return [e for e in events if e.event_type == event_type]


# ── Scenario tests ─────────────────────────────────────────────────


class TestPrepaidMonthlyService:
    def test_service_events_follow_monthly_cycle(self, monthly_service_terms):
        events = generate_events(monthly_service_terms)
        services = _of_type(events, EventType.SERVICE)
        assert [e.scheduled_date for e in services] == [
            date(2025, 2, 5),
            date(2025, 3, 5),
            date(2025, 4, 5),
        ]
        assert [e.sequence_number for e in services] == [1, 2, 3]
        assert all(e.total_occurrences == 3 for e in services)
        assert all(e.amount is None for e in services)

    def test_single_upfront_billing_event(self, monthly_service_terms):
        events = generate_events(monthly_service_terms)
        billing = _of_type(events, EventType.BILLING)
        assert len(billing) == 1
        assert billing[0].scheduled_date == date(2025, 2, 5)
        assert billing[0].amount == Decimal("3000")
        assert billing[0].currency == "USD"
        assert billing[0].line_id == CONTRACT_BILLING_LINE_ID
        assert billing[0].billing_sub_type == BillingSubType.UPFRONT
        assert billing[0].label == "Upfront"

    def test_first_date_group_holds_service_then_billing(self, monthly_service_terms):
        groups = group_by_date(generate_events(monthly_service_terms))
        assert len(groups) == 3
        first = groups[0]
        assert first.date == date(2025, 2, 5)
        assert [e.event_type for e in first.deliverables] == [EventType.SERVICE]
        assert [e.event_type for e in first.billing] == [EventType.BILLING]

    def test_events_start_scheduled_at_version_one(self, monthly_service_terms):
        events = generate_events(monthly_service_terms)
        assert all(e.status == "scheduled" for e in events)
        assert all(e.version == 1 for e in events)
        assert all(e.scheduled_date == e.original_date for e in events)


class TestEmiBilling:
    def test_twelve_monthly_installments(self):
        terms = _terms(
            payment_mode=PaymentMode.EMI,
            emi_installment_count=12,
            grand_total=Decimal("12000"),
            selected_lines=[_service_line()],
        )
        billing = _of_type(generate_events(terms), EventType.BILLING)
        assert len(billing) == 12
        assert billing[0].scheduled_date == date(2025, 2, 5)
        assert billing[-1].scheduled_date == date(2026, 1, 5)
        assert all(e.amount == Decimal("1000") for e in billing)
        assert all(e.line_id == EMI_BILLING_LINE_ID for e in billing)
        assert billing[0].label == "EMI 1/12"

    def test_installments_are_one_calendar_month_apart(self):
        terms = _terms(
            start_date=date(2025, 1, 31),
            payment_mode=PaymentMode.EMI,
            emi_installment_count=4,
            grand_total=Decimal("400"),
        )
        billing = _of_type(generate_events(terms), EventType.BILLING)
        assert [e.scheduled_date for e in billing] == [
            date(2025, 1, 31),
            date(2025, 2, 28),
            date(2025, 3, 31),
            date(2025, 4, 30),
        ]

    def test_remainder_goes_to_final_installment(self):
        terms = _terms(
            payment_mode=PaymentMode.EMI,
            emi_installment_count=3,
            grand_total=Decimal("100"),
        )
        amounts = [e.amount for e in _of_type(generate_events(terms), EventType.BILLING)]
        assert amounts == [Decimal("33.33"), Decimal("33.33"), Decimal("33.34")]
        assert sum(amounts) == Decimal("100")

    @pytest.mark.parametrize(
        ("total", "count"),
        [("1000.00", 7), ("99.99", 12), ("0.05", 3), ("12345.67", 9)],
    )
    def test_split_sums_to_total(self, total, count):
        parts = _split_installments(Decimal(total), count)
        assert len(parts) == count
        assert sum(parts) == Decimal(total)


class TestUnlimitedLines:
    def test_unlimited_line_emits_nothing(self):
        unlimited = _service_line(id="svc-unlimited", quantity=5, unlimited=True)
        terms = _terms(selected_lines=[unlimited], grand_total=Decimal("500"))
        events = generate_events(terms)
        assert all(e.line_id != "svc-unlimited" for e in events)
        assert _of_type(events, EventType.SERVICE) == []

    def test_unlimited_line_is_reported_as_continuous(self):
        unlimited = _service_line(id="svc-unlimited", unlimited=True)
        limited = _service_line(id="svc-limited")
        terms = _terms(selected_lines=[unlimited, limited])
        assert [line.id for line in continuous_service_lines(terms)] == ["svc-unlimited"]

    def test_unlimited_line_skips_quantity_validation(self):
        unlimited = _service_line(id="svc-unlimited", quantity=0, unlimited=True)
        assert generate_events(_terms(selected_lines=[unlimited])) != []


# ── Deliverable spacing ────────────────────────────────────────────


class TestDeliverableSpacing:
    def test_spare_parts_quarterly(self):
        line = ContractLine(
            id="sp-1",
            kind=LineKind.SPARE_PART,
            quantity=2,
            cycle=LineCycle.QUARTERLY,
        )
        events = generate_events(_terms(duration_value=6, selected_lines=[line]))
        parts = _of_type(events, EventType.SPARE_PART)
        assert [e.scheduled_date for e in parts] == [date(2025, 2, 5), date(2025, 5, 5)]

    def test_custom_cycle(self):
        line = _service_line(cycle=LineCycle.CUSTOM, custom_cycle_days=10, quantity=3)
        services = _of_type(generate_events(_terms(selected_lines=[line])), EventType.SERVICE)
        assert [e.scheduled_date for e in services] == [
            date(2025, 2, 5),
            date(2025, 2, 15),
            date(2025, 2, 25),
        ]

    def test_prepaid_cycle_distributes_across_contract(self):
        line = _service_line(cycle=LineCycle.PREPAID, quantity=3)
        terms = _terms(duration_value=10, duration_unit=DurationUnit.DAYS, selected_lines=[line])
        services = _of_type(generate_events(terms), EventType.SERVICE)
        assert [e.scheduled_date for e in services] == [
            date(2025, 2, 5),
            date(2025, 2, 10),
            date(2025, 2, 15),
        ]

    def test_text_and_document_lines_are_ignored(self):
        lines = [
            ContractLine(id="note", kind=LineKind.TEXT),
            ContractLine(id="doc", kind=LineKind.DOCUMENT),
        ]
        events = generate_events(_terms(selected_lines=lines))
        assert {e.line_id for e in events} == {CONTRACT_BILLING_LINE_ID}

    def test_labels_use_line_name(self):
        line = _service_line(name="AC service", quantity=2)
        services = _of_type(generate_events(_terms(selected_lines=[line])), EventType.SERVICE)
        assert [e.label for e in services] == ["AC service 1/2", "AC service 2/2"]


# ── Defined payment mode ───────────────────────────────────────────


class TestDefinedBilling:
    def test_prepaid_line_billed_once_at_start(self):
        line = _service_line(quantity=3, unit_price=Decimal("250"))
        terms = _terms(
            payment_mode=PaymentMode.DEFINED,
            per_line_payment_type={"svc-1": LinePaymentType.PREPAID},
            selected_lines=[line],
        )
        billing = _of_type(generate_events(terms), EventType.BILLING)
        assert len(billing) == 1
        assert billing[0].scheduled_date == START
        assert billing[0].amount == Decimal("750")
        assert billing[0].line_id == "svc-1"

    def test_postpaid_line_billed_per_occurrence(self):
        line = _service_line(quantity=3, unit_price=Decimal("250"))
        terms = _terms(
            payment_mode=PaymentMode.DEFINED,
            per_line_payment_type={"svc-1": LinePaymentType.POSTPAID},
            selected_lines=[line],
        )
        events = generate_events(terms)
        services = _of_type(events, EventType.SERVICE)
        billing = _of_type(events, EventType.BILLING)
        assert [e.scheduled_date for e in billing] == [e.scheduled_date for e in services]
        assert all(e.amount == Decimal("250") for e in billing)
        assert all(e.billing_sub_type == BillingSubType.ON_COMPLETION for e in billing)

    def test_postpaid_cycle_implies_postpaid_billing(self):
        line = _service_line(quantity=2, cycle=LineCycle.POSTPAID, unit_price=Decimal("10"))
        terms = _terms(payment_mode=PaymentMode.DEFINED, selected_lines=[line])
        billing = _of_type(generate_events(terms), EventType.BILLING)
        assert len(billing) == 2

    def test_mixed_mode_keeps_lines_separate(self):
        lines = [
            _service_line(id="a", quantity=2, unit_price=Decimal("10")),
            _service_line(id="b", quantity=2, unit_price=Decimal("20")),
        ]
        terms = _terms(
            payment_mode=PaymentMode.DEFINED,
            per_line_payment_type={"a": LinePaymentType.POSTPAID, "b": LinePaymentType.POSTPAID},
            billing_cycle_mode=BillingCycleMode.MIXED,
            selected_lines=lines,
        )
        billing = _of_type(generate_events(terms), EventType.BILLING)
        assert len(billing) == 4
        assert {e.line_id for e in billing} == {"a", "b"}

    def test_unified_mode_combines_same_date_billing(self):
        lines = [
            _service_line(id="a", quantity=2, unit_price=Decimal("10")),
            _service_line(id="b", quantity=2, unit_price=Decimal("20")),
        ]
        terms = _terms(
            payment_mode=PaymentMode.DEFINED,
            per_line_payment_type={"a": LinePaymentType.POSTPAID, "b": LinePaymentType.POSTPAID},
            billing_cycle_mode=BillingCycleMode.UNIFIED,
            selected_lines=lines,
        )
        billing = _of_type(generate_events(terms), EventType.BILLING)
        assert [(e.scheduled_date, e.amount) for e in billing] == [
            (date(2025, 2, 5), Decimal("30")),
            (date(2025, 3, 5), Decimal("30")),
        ]
        assert all(e.line_id == UNIFIED_BILLING_LINE_ID for e in billing)
        assert all(e.billing_sub_type == BillingSubType.COMBINED for e in billing)
        assert [e.sequence_number for e in billing] == [1, 2]


# ── Validation ─────────────────────────────────────────────────────


class TestValidation:
    @pytest.mark.parametrize("duration", [0, -1])
    def test_non_positive_duration(self, duration):
        with pytest.raises(ConfigurationError, match="duration"):
            generate_events(_terms(duration_value=duration))

    def test_emi_without_installments(self):
        with pytest.raises(ConfigurationError, match="installment"):
            generate_events(_terms(payment_mode=PaymentMode.EMI, emi_installment_count=0))

    def test_custom_cycle_without_days(self):
        line = _service_line(cycle=LineCycle.CUSTOM)
        with pytest.raises(ConfigurationError, match="custom cycle"):
            generate_events(_terms(selected_lines=[line]))

    @pytest.mark.parametrize(
        "line",
        [
            ContractLine(id="svc-unlimited", unlimited=True, cycle=LineCycle.CUSTOM),
            ContractLine(id="note-1", kind=LineKind.TEXT, cycle=LineCycle.CUSTOM),
            ContractLine(
                id="doc-1", kind=LineKind.DOCUMENT, cycle=LineCycle.CUSTOM, custom_cycle_days=0
            ),
        ],
    )
    def test_custom_cycle_without_days_on_non_deliverable_line(self, line):
        with pytest.raises(ConfigurationError, match="custom cycle"):
            generate_events(_terms(selected_lines=[line]))

    def test_zero_quantity_deliverable(self):
        with pytest.raises(ConfigurationError, match="quantity"):
            generate_events(_terms(selected_lines=[_service_line(quantity=0)]))

    def test_duplicate_line_ids(self):
        service = _service_line(id="x", quantity=2, unit_price=Decimal("10"))
        part = ContractLine(
            id="x",
            kind=LineKind.SPARE_PART,
            quantity=3,
            cycle=LineCycle.QUARTERLY,
            unit_price=Decimal("50"),
        )
        terms = _terms(
            selected_lines=[service, part],
            payment_mode=PaymentMode.DEFINED,
            per_line_payment_type={"x": LinePaymentType.POSTPAID},
        )
        with pytest.raises(ConfigurationError, match="more than once"):
            generate_events(terms)

    def test_duplicate_unlimited_line_id(self):
        lines = [_service_line(id="svc-1"), _service_line(id="svc-1", unlimited=True)]
        with pytest.raises(ConfigurationError, match="more than once"):
            generate_events(_terms(selected_lines=lines))

    def test_contract_end_date_rejects_zero_duration(self):
        with pytest.raises(ConfigurationError):
            contract_end_date(_terms(duration_value=0))

    def test_contract_end_date_clamps(self):
        terms = _terms(start_date=date(2025, 1, 31), duration_value=1)
        assert contract_end_date(terms) == date(2025, 2, 28)


# ── Determinism and ordering ───────────────────────────────────────


class TestDeterminism:
    def test_same_terms_same_events(self, monthly_service_terms):
        contract = uuid.uuid4()
        first = generate_events(monthly_service_terms, contract_id=contract)
        second = generate_events(monthly_service_terms, contract_id=contract)
        assert first == second

    def test_ids_are_scoped_to_contract(self, monthly_service_terms):
        first = generate_events(monthly_service_terms, contract_id=uuid.uuid4())
        second = generate_events(monthly_service_terms, contract_id=uuid.uuid4())
        assert {e.id for e in first}.isdisjoint({e.id for e in second})

    def test_ids_unique_within_schedule(self, monthly_service_terms):
        events = generate_events(monthly_service_terms)
        assert len({e.id for e in events}) == len(events)

    def test_preview_events_have_no_contract(self, monthly_service_terms):
        assert all(e.contract_id is None for e in generate_events(monthly_service_terms))

    def test_line_order_does_not_change_result(self):
        lines = [
            _service_line(id="a"),
            ContractLine(id="b", kind=LineKind.SPARE_PART, quantity=2, cycle=LineCycle.MONTHLY),
        ]
        forward = generate_events(_terms(selected_lines=lines))
        backward = generate_events(_terms(selected_lines=list(reversed(lines))))
        assert forward == backward


class TestOrdering:
    def test_rank(self):
        assert event_type_rank(EventType.SERVICE) < event_type_rank(EventType.SPARE_PART)
        assert event_type_rank(EventType.SPARE_PART) < event_type_rank(EventType.BILLING)
        assert event_type_rank("billing") == 2

    def test_same_day_order_is_service_spare_part_billing(self):
        lines = [
            ContractLine(id="sp", kind=LineKind.SPARE_PART, quantity=1, cycle=LineCycle.MONTHLY),
            _service_line(id="svc", quantity=1),
        ]
        events = generate_events(_terms(selected_lines=lines))
        assert [e.event_type for e in events] == [
            EventType.SERVICE,
            EventType.SPARE_PART,
            EventType.BILLING,
        ]

    def test_output_is_sorted_and_resort_is_noop(self, monthly_service_terms):
        events = generate_events(monthly_service_terms)
        keys = [(e.scheduled_date, event_type_rank(e.event_type)) for e in events]
        assert keys == sorted(keys)
        assert sort_events(events) == events
