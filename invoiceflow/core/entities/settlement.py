"""Settlement entities: fee breakdown and the per-invoice payout record."""

from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field


class SettlementStatus(str, Enum):
    """Payout lifecycle of a settlement record."""

    PENDING = "pending"
    INITIATED = "initiated"
    PROCESSED = "processed"
    SETTLED = "settled"
    FAILED = "failed"
    REVERSED = "reversed"


class SettlementBreakdown(BaseModel):
    """Deductions and net payout for an invoice amount."""

    invoice_amount: Decimal
    commission_rate: Decimal = Decimal("0")
    platform_commission: Decimal = Decimal("0")
    processor_fee: Decimal = Decimal("0")
    gst_on_fee: Decimal = Decimal("0")
    net_amount: Decimal = Decimal("0")

    @property
    def total_deductions(self) -> Decimal:
        return self.platform_commission + self.processor_fee + self.gst_on_fee


class SettlementRecord(BaseModel):
    """Settlement owed to an owner for one paid invoice."""

    id: int | None = None
    invoice_id: int
    owner_id: int
    gross_amount: Decimal
    commission_rate: Decimal = Decimal("0")
    platform_commission: Decimal = Decimal("0")
    processor_fee: Decimal = Decimal("0")
    gst_on_fee: Decimal = Decimal("0")
    net_amount: Decimal = Decimal("0")
    status: SettlementStatus = SettlementStatus.PENDING
    transfer_reference: str | None = None
    failure_reason: str | None = None
    initiated_at: datetime | None = None
    settled_at: datetime | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @classmethod
    def from_breakdown(
        cls, invoice_id: int, owner_id: int, breakdown: SettlementBreakdown
    ) -> "SettlementRecord":
        return cls(
            invoice_id=invoice_id,
            owner_id=owner_id,
            gross_amount=breakdown.invoice_amount,
            commission_rate=breakdown.commission_rate,
            platform_commission=breakdown.platform_commission,
            processor_fee=breakdown.processor_fee,
            gst_on_fee=breakdown.gst_on_fee,
            net_amount=breakdown.net_amount,
        )
