"""
GST invoice domain entities with Pydantic v2 validation.

Money fields are Decimal throughout. Entities are permissive containers;
business validation happens in the tax engine before anything is persisted.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

ZERO = Decimal("0")


class InvoiceStatus(str, Enum):
    """Stored invoice status. Overdue is derived, never stored."""

    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    CANCELLED = "cancelled"


# Filter/display value only
OVERDUE = "overdue"

CLOSED_STATUSES = frozenset({InvoiceStatus.PAID, InvoiceStatus.CANCELLED})


def _to_decimal(v: Any) -> Any:
    """Coerce floats and strings to Decimal via str() to avoid binary noise."""
    if v is None or isinstance(v, Decimal):
        return v
    if isinstance(v, float):
        return Decimal(str(v))
    if isinstance(v, (int, str)):
        return Decimal(str(v).strip().replace(",", "") or "0")
    return v


class LineItemInput(BaseModel):
    """A line item as supplied by the caller, before tax computation."""

    description: str = ""
    hsn_sac: str = ""
    quantity: Decimal = ZERO
    rate: Decimal = ZERO
    discount: Decimal = ZERO
    tax_rate: Decimal = ZERO
    cess_rate: Decimal = ZERO
    unit: str = "NOS"

    @field_validator("quantity", "rate", "discount", "tax_rate", "cess_rate", mode="before")
    @classmethod
    def coerce_decimal(cls, v: Any) -> Any:
        if v is None:
            return ZERO
        return _to_decimal(v)

    @field_validator("description", "hsn_sac", "unit", mode="before")
    @classmethod
    def coerce_string(cls, v: Any) -> str:
        """Ensure string fields are never None."""
        if v is None:
            return ""
        return str(v).strip()


class LineBreakdown(BaseModel):
    """Computed tax breakdown for one line, rounded to paise."""

    taxable_value: Decimal = ZERO
    cgst_amount: Decimal = ZERO
    sgst_amount: Decimal = ZERO
    igst_amount: Decimal = ZERO
    cess_amount: Decimal = ZERO
    line_total: Decimal = ZERO

    @property
    def tax_amount(self) -> Decimal:
        return self.cgst_amount + self.sgst_amount + self.igst_amount + self.cess_amount


class InvoiceLine(LineItemInput, LineBreakdown):
    """Persisted invoice line: caller input plus computed breakdown."""

    id: int | None = None
    invoice_id: int | None = None
    line_number: int = 0

    @classmethod
    def from_parts(
        cls, line_number: int, item: LineItemInput, breakdown: LineBreakdown
    ) -> "InvoiceLine":
        return cls(
            line_number=line_number,
            **item.model_dump(),
            **breakdown.model_dump(),
        )


class InvoiceTotals(BaseModel):
    """Aggregated invoice totals."""

    subtotal: Decimal = ZERO
    cgst_total: Decimal = ZERO
    sgst_total: Decimal = ZERO
    igst_total: Decimal = ZERO
    cess_total: Decimal = ZERO
    total_tax: Decimal = ZERO
    grand_total: Decimal = ZERO  # unrounded
    final_payable: int = 0  # whole rupees
    round_off: Decimal = ZERO  # final_payable - grand_total


class Invoice(BaseModel):
    """
    GST tax invoice issued by an owner to a client.

    `grand_total` is the payable amount in whole rupees. Overdue is not a
    stored status; use `is_overdue()` / `display_status()`.
    """

    id: int | None = None
    owner_id: int
    client_id: int

    # Numbering
    invoice_number: str = ""
    sequence_number: int = 0

    # Dates
    issue_date: date = Field(default_factory=date.today)
    due_date: date | None = None
    supply_date: date | None = None
    paid_date: date | None = None

    # Supply classification
    place_of_supply: str = ""
    is_inter_state: bool = False
    reverse_charge: bool = False

    lines: list[InvoiceLine] = Field(default_factory=list)

    # Totals
    subtotal: Decimal = ZERO
    cgst_total: Decimal = ZERO
    sgst_total: Decimal = ZERO
    igst_total: Decimal = ZERO
    cess_total: Decimal = ZERO
    total_tax: Decimal = ZERO
    round_off: Decimal = ZERO
    grand_total: int = 0
    amount_in_words: str = ""

    status: InvoiceStatus = InvoiceStatus.DRAFT

    # Compliance flags
    eway_bill_required: bool = False
    e_invoice_required: bool = False

    notes: str | None = None
    terms_conditions: str | None = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @field_validator(
        "subtotal",
        "cgst_total",
        "sgst_total",
        "igst_total",
        "cess_total",
        "total_tax",
        "round_off",
        mode="before",
    )
    @classmethod
    def coerce_decimal(cls, v: Any) -> Any:
        if v is None:
            return ZERO
        return _to_decimal(v)

    def apply_totals(self, totals: InvoiceTotals) -> None:
        """Copy aggregated totals onto the invoice header."""
        self.subtotal = totals.subtotal
        self.cgst_total = totals.cgst_total
        self.sgst_total = totals.sgst_total
        self.igst_total = totals.igst_total
        self.cess_total = totals.cess_total
        self.total_tax = totals.total_tax
        self.round_off = totals.round_off
        self.grand_total = totals.final_payable

    @property
    def is_closed(self) -> bool:
        """Paid and cancelled invoices can no longer be edited."""
        return self.status in CLOSED_STATUSES

    def is_overdue(self, today: date | None = None) -> bool:
        """Check if the invoice is unpaid, not cancelled and past due."""
        if self.is_closed or self.due_date is None:
            return False
        return self.due_date < (today or date.today())

    def display_status(self, today: date | None = None) -> str:
        """Status as shown to users, with overdue derived."""
        if self.is_overdue(today):
            return OVERDUE
        return self.status.value


class InvoiceCreate(BaseModel):
    """Caller input for a new invoice."""

    client_id: int
    items: list[LineItemInput] = Field(default_factory=list)
    issue_date: date | None = None
    due_date: date | None = None
    supply_date: date | None = None
    place_of_supply: str | None = None
    reverse_charge: bool = False
    notes: str | None = None
    terms_conditions: str | None = None


class InvoiceUpdate(BaseModel):
    """
    Partial invoice update. Only fields explicitly set are applied.

    Supplying `items`, `client_id` or `place_of_supply` recomputes all amounts.
    """

    client_id: int | None = None
    items: list[LineItemInput] | None = None
    issue_date: date | None = None
    due_date: date | None = None
    supply_date: date | None = None
    place_of_supply: str | None = None
    reverse_charge: bool | None = None
    notes: str | None = None
    terms_conditions: str | None = None
    status: str | None = None


class InvoiceStats(BaseModel):
    """Dashboard counters and revenue figures for one owner."""

    total: int = 0
    draft: int = 0
    sent: int = 0
    paid: int = 0
    overdue: int = 0
    cancelled: int = 0

    total_revenue: int = 0
    paid_revenue: int = 0
    unpaid_revenue: int = 0
    this_month_revenue: int = 0
    this_month_paid: int = 0
