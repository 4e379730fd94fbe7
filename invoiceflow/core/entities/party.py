"""Owner (issuing business) and client (billed party) entities."""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field, field_validator


class OwnerProfile(BaseModel):
    """
    Business account that issues invoices.

    `commission_rate` is the platform commission percent applied at
    settlement. `annual_turnover` drives the e-invoice compliance flag.
    """

    id: int | None = None
    name: str
    gstin: str | None = None
    state_code: str | None = None
    address: str | None = None
    commission_rate: Decimal = Decimal("0")
    annual_turnover: Decimal | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @field_validator("gstin", "state_code", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip().upper()
            return v or None
        return v


class ClientProfile(BaseModel):
    """A billed party. Belongs to exactly one owner."""

    id: int | None = None
    owner_id: int
    name: str
    gstin: str | None = None
    state_code: str | None = None
    address: str | None = None
    email: str | None = None
    phone: str | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @field_validator("gstin", "state_code", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip().upper()
            return v or None
        return v
