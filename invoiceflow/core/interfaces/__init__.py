"""Core interfaces (ports) for dependency injection."""

from invoiceflow.core.interfaces.settlement_policy import FeeQuote, ISettlementPolicy
from invoiceflow.core.interfaces.storage import (
    IInvoiceSequenceStore,
    IInvoiceStore,
    IPartyStore,
    ISettlementStore,
)

__all__ = [
    # Storage interfaces
    "IInvoiceStore",
    "IInvoiceSequenceStore",
    "IPartyStore",
    "ISettlementStore",
    # Settlement interfaces
    "ISettlementPolicy",
    "FeeQuote",
]
