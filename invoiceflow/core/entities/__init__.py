"""Core domain entities."""

from invoiceflow.core.entities.invoice import (
    CLOSED_STATUSES,
    OVERDUE,
    Invoice,
    InvoiceCreate,
    InvoiceLine,
    InvoiceStats,
    InvoiceStatus,
    InvoiceTotals,
    InvoiceUpdate,
    LineBreakdown,
    LineItemInput,
)
from invoiceflow.core.entities.party import ClientProfile, OwnerProfile
from invoiceflow.core.entities.settlement import (
    SettlementBreakdown,
    SettlementRecord,
    SettlementStatus,
)

__all__ = [
    # Invoice entities
    "Invoice",
    "InvoiceCreate",
    "InvoiceUpdate",
    "InvoiceLine",
    "InvoiceStats",
    "InvoiceStatus",
    "InvoiceTotals",
    "LineBreakdown",
    "LineItemInput",
    "CLOSED_STATUSES",
    "OVERDUE",
    # Party entities
    "OwnerProfile",
    "ClientProfile",
    # Settlement entities
    "SettlementBreakdown",
    "SettlementRecord",
    "SettlementStatus",
]
