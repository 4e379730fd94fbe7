"""Response DTOs for API endpoints.

Pydantic v2 models for API response serialization.
Money values are Decimal and serialize as strings so no precision is lost.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field

from invoiceflow.core.entities import (
    ClientProfile,
    Invoice,
    InvoiceLine,
    InvoiceStats,
    OwnerProfile,
    SettlementBreakdown,
    SettlementRecord,
)
from invoiceflow.core.services.supply_classifier import format_place_of_supply


class OwnerResponse(BaseModel):
    """Owner profile response DTO."""

    id: int
    name: str
    gstin: str | None = None
    state_code: str | None = None
    address: str | None = None
    commission_rate: Decimal
    annual_turnover: Decimal | None = None
    created_at: datetime

    @classmethod
    def from_entity(cls, owner: OwnerProfile) -> "OwnerResponse":
        return cls.model_validate(owner.model_dump())


class ClientResponse(BaseModel):
    """Client profile response DTO."""

    id: int
    owner_id: int
    name: str
    gstin: str | None = None
    state_code: str | None = None
    address: str | None = None
    email: str | None = None
    phone: str | None = None
    created_at: datetime

    @classmethod
    def from_entity(cls, client: ClientProfile) -> "ClientResponse":
        return cls.model_validate(client.model_dump())


class LineItemResponse(BaseModel):
    """Computed invoice line."""

    line_number: int = Field(..., description="1-based position")
    description: str
    hsn_sac: str
    unit: str
    quantity: Decimal
    rate: Decimal
    discount: Decimal
    tax_rate: Decimal
    cess_rate: Decimal
    taxable_value: Decimal
    cgst_amount: Decimal
    sgst_amount: Decimal
    igst_amount: Decimal
    cess_amount: Decimal
    line_total: Decimal

    @classmethod
    def from_entity(cls, line: InvoiceLine) -> "LineItemResponse":
        return cls.model_validate(line.model_dump())


class InvoiceResponse(BaseModel):
    """Invoice response DTO."""

    id: int = Field(..., description="Invoice ID")
    invoice_number: str = Field(..., description="PREFIX-YYYY-NNNNNN")
    owner_id: int
    client_id: int
    issue_date: date
    due_date: date | None = None
    supply_date: date | None = None
    paid_date: date | None = None
    place_of_supply: str = Field(..., description="State code and name, e.g. 29-Karnataka")
    is_inter_state: bool
    reverse_charge: bool
    subtotal: Decimal
    cgst_total: Decimal
    sgst_total: Decimal
    igst_total: Decimal
    cess_total: Decimal
    total_tax: Decimal
    round_off: Decimal
    grand_total: int = Field(..., description="Payable amount in whole rupees")
    amount_in_words: str
    status: str = Field(..., description="Stored status")
    display_status: str = Field(..., description="Status with overdue derived from due date")
    eway_bill_required: bool = False
    e_invoice_required: bool = False
    notes: str | None = None
    terms_conditions: str | None = None
    items: list[LineItemResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, invoice: Invoice, today: date | None = None) -> "InvoiceResponse":
        data = invoice.model_dump(exclude={"lines", "sequence_number"})
        data["status"] = invoice.status.value
        data["display_status"] = invoice.display_status(today)
        data["place_of_supply"] = format_place_of_supply(invoice.place_of_supply)
        data["items"] = [LineItemResponse.from_entity(line) for line in invoice.lines]
        return cls.model_validate(data)


class InvoiceListResponse(BaseModel):
    """Invoice list response."""

    invoices: list[InvoiceResponse]
    limit: int
    offset: int
    has_more: bool


class InvoiceStatsResponse(InvoiceStats):
    """Dashboard statistics for an owner."""

    @classmethod
    def from_entity(cls, stats: InvoiceStats) -> "InvoiceStatsResponse":
        return cls.model_validate(stats.model_dump())


class SettlementBreakdownResponse(BaseModel):
    """Settlement preview."""

    invoice_amount: Decimal
    commission_rate: Decimal
    platform_commission: Decimal
    processor_fee: Decimal
    gst_on_fee: Decimal
    total_deductions: Decimal
    net_amount: Decimal

    @classmethod
    def from_entity(cls, breakdown: SettlementBreakdown) -> "SettlementBreakdownResponse":
        return cls(total_deductions=breakdown.total_deductions, **breakdown.model_dump())


class SettlementResponse(BaseModel):
    """Settlement record response DTO."""

    id: int
    invoice_id: int
    owner_id: int
    gross_amount: Decimal
    commission_rate: Decimal
    platform_commission: Decimal
    processor_fee: Decimal
    gst_on_fee: Decimal
    net_amount: Decimal
    status: str
    transfer_reference: str | None = None
    failure_reason: str | None = None
    initiated_at: datetime | None = None
    settled_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, record: SettlementRecord) -> "SettlementResponse":
        data = record.model_dump()
        data["status"] = record.status.value
        return cls.model_validate(data)


class DatabaseHealthResponse(BaseModel):
    """Database health status."""

    available: bool
    latency_ms: float | None = None
    error: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str = "1.0.0"
    uptime_seconds: float
    database: DatabaseHealthResponse | None = None
    settlement_policy_configured: bool = False


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. INVOICE_NOT_FOUND)
    - message: human-readable description
    - hint: suggested recovery action
    - path: request path that triggered the error
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    detail: str | None = Field(default=None, description="Additional details")
    details: dict[str, Any] | None = Field(default=None, description="Structured error context")
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=datetime.now)
