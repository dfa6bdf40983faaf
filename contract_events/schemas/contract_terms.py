from datetime import date
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field

from contract_events.core.config import settings


class DurationUnit(str, Enum):
    DAYS = "days"
    MONTHS = "months"
    YEARS = "years"


class LineKind(str, Enum):
    SERVICE = "service"
    SPARE_PART = "spare_part"
    TEXT = "text"
    DOCUMENT = "document"


class LineCycle(str, Enum):
    PREPAID = "prepaid"
    POSTPAID = "postpaid"
    MONTHLY = "monthly"
    FORTNIGHTLY = "fortnightly"
    QUARTERLY = "quarterly"
    CUSTOM = "custom"


class PaymentMode(str, Enum):
    PREPAID = "prepaid"
    EMI = "emi"
    DEFINED = "defined"


class LinePaymentType(str, Enum):
    PREPAID = "prepaid"
    POSTPAID = "postpaid"


class BillingCycleMode(str, Enum):
    UNIFIED = "unified"
    MIXED = "mixed"


class ContractLine(BaseModel):
    """A configured item on a contract."""

    model_config = {"frozen": True}

    id: str = Field(..., min_length=1, max_length=255)
    name: str | None = None
    kind: LineKind = LineKind.SERVICE
    quantity: int = 1
    unlimited: bool = False
    unit_price: Decimal = Decimal("0")
    cycle: LineCycle = LineCycle.PREPAID
    custom_cycle_days: int | None = None

    @property
    def total_price(self) -> Decimal:
        return self.unit_price * self.quantity


class ContractTerms(BaseModel):
    """Commercial terms the event generator expands into dated obligations.

    Range checks (positive duration, installment count, custom cycle days)
    are left to the generator so they surface as ``ConfigurationError``.
    """

    model_config = {"frozen": True}

    start_date: date
    duration_value: int
    duration_unit: DurationUnit = DurationUnit.MONTHS
    selected_lines: list[ContractLine] = Field(default_factory=list)
    payment_mode: PaymentMode = PaymentMode.PREPAID
    emi_installment_count: int = 0
    per_line_payment_type: dict[str, LinePaymentType] = Field(default_factory=dict)
    billing_cycle_mode: BillingCycleMode = BillingCycleMode.MIXED
    grand_total: Decimal = Decimal("0")
    currency: str = Field(
        default_factory=lambda: settings.DEFAULT_CURRENCY, min_length=3, max_length=3
    )
