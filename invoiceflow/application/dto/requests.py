"""Request DTOs for API endpoints.

Pydantic v2 models for API request validation.
These are the ONLY contracts between API and core services.
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field

from invoiceflow.core.entities import (
    ClientProfile,
    InvoiceCreate,
    InvoiceUpdate,
    LineItemInput,
    OwnerProfile,
)


class CreateOwnerRequest(BaseModel):
    """Request to register a business account that issues invoices."""

    name: str = Field(..., min_length=1, description="Business name")
    gstin: str | None = Field(
        default=None,
        description="15 character GSTIN",
        examples=["29ABCDE1234F1Z5"],
    )
    state_code: str | None = Field(
        default=None,
        description="Two-digit GST state code; derived from GSTIN when omitted",
        examples=["29"],
    )
    address: str | None = None
    commission_rate: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        le=100,
        description="Platform commission percent applied at settlement",
    )
    annual_turnover: Decimal | None = Field(
        default=None,
        ge=0,
        description="Declared annual turnover in rupees (drives the e-invoice flag)",
    )

    def to_entity(self) -> OwnerProfile:
        return OwnerProfile(**self.model_dump())


class CreateClientRequest(BaseModel):
    """Request to add a client for an owner."""

    name: str = Field(..., min_length=1, description="Client name")
    gstin: str | None = Field(default=None, examples=["27ABCDE1234F1Z5"])
    state_code: str | None = Field(default=None, examples=["27"])
    address: str | None = None
    email: str | None = None
    phone: str | None = None

    def to_entity(self, owner_id: int) -> ClientProfile:
        return ClientProfile(owner_id=owner_id, **self.model_dump())


class LineItemRequest(BaseModel):
    """One invoice line. Amount rules are enforced by the tax engine."""

    description: str = Field(..., description="Item description")
    hsn_sac: str = Field(..., description="HSN (goods) or SAC (services) code, 4-8 digits")
    quantity: Decimal = Field(..., description="Quantity, greater than 0")
    rate: Decimal = Field(..., description="Price per unit in rupees")
    discount: Decimal = Field(default=Decimal("0"), description="Discount in rupees")
    tax_rate: Decimal = Field(..., description="GST rate percent", examples=[18])
    cess_rate: Decimal = Field(default=Decimal("0"), description="Cess rate percent")
    unit: str | None = Field(default=None, description="Unit of measure (default NOS)")

    def to_entity(self) -> LineItemInput:
        return LineItemInput(**self.model_dump())


class CreateInvoiceRequest(BaseModel):
    """Request to create a draft invoice."""

    client_id: int = Field(..., description="Client to bill")
    items: list[LineItemRequest] = Field(..., description="Line items")
    issue_date: date | None = Field(default=None, description="Defaults to today")
    due_date: date | None = None
    supply_date: date | None = None
    place_of_supply: str | None = Field(
        default=None,
        description="State code, optionally with name",
        examples=["29", "29-Karnataka"],
    )
    reverse_charge: bool = False
    notes: str | None = None
    terms_conditions: str | None = None

    def to_entity(self) -> InvoiceCreate:
        data = self.model_dump(exclude={"items"})
        return InvoiceCreate(items=[i.to_entity() for i in self.items], **data)


class UpdateInvoiceRequest(BaseModel):
    """Partial invoice update. Only supplied fields are applied."""

    client_id: int | None = None
    items: list[LineItemRequest] | None = Field(
        default=None,
        description="Replaces all line items and recomputes every amount",
    )
    issue_date: date | None = None
    due_date: date | None = None
    supply_date: date | None = None
    place_of_supply: str | None = None
    reverse_charge: bool | None = None
    notes: str | None = None
    terms_conditions: str | None = None
    status: str | None = Field(default=None, examples=["sent"])

    def to_entity(self) -> InvoiceUpdate:
        data = self.model_dump(exclude_unset=True, exclude={"items"})
        if "items" in self.model_fields_set:
            data["items"] = (
                [i.to_entity() for i in self.items] if self.items is not None else None
            )
        return InvoiceUpdate(**data)


class UpdateInvoiceStatusRequest(BaseModel):
    """Request to move an invoice to a new status."""

    status: str = Field(..., examples=["sent", "paid", "cancelled"])
    paid_date: date | None = Field(
        default=None, description="Payment date when marking paid (defaults to today)"
    )


class CalculateSettlementRequest(BaseModel):
    """Request to preview a settlement breakdown."""

    invoice_amount: Decimal = Field(..., description="Amount paid by the client")
    commission_rate: Decimal = Field(default=Decimal("0"), description="Commission percent")


class UpdateSettlementStatusRequest(BaseModel):
    """Request to move a settlement through its payout lifecycle."""

    status: str = Field(..., examples=["initiated", "processed", "settled", "failed"])
    transfer_reference: str | None = Field(default=None, description="Bank transfer reference")
    failure_reason: str | None = Field(default=None, description="Required when failing")
