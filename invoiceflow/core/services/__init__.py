"""
Core business logic services.

Layer-pure services that depend only on:
- invoiceflow/core/entities/*
- invoiceflow/core/interfaces/*
- invoiceflow/core/exceptions.py

NO infrastructure imports. All dependencies injected via constructor.
"""

from invoiceflow.core.services.amount_in_words import AmountInWordsConverter
from invoiceflow.core.services.invoice_orchestrator import InvoiceOrchestrator
from invoiceflow.core.services.invoice_sequencer import InvoiceSequencer
from invoiceflow.core.services.party_service import PartyService
from invoiceflow.core.services.settlement_calculator import (
    PercentageFeePolicy,
    SettlementCalculator,
)
from invoiceflow.core.services.settlement_service import SettlementService
from invoiceflow.core.services.tax_engine import TaxEngine

__all__ = [
    # Tax computation
    "TaxEngine",
    "AmountInWordsConverter",
    # Numbering
    "InvoiceSequencer",
    # Orchestration
    "InvoiceOrchestrator",
    "PartyService",
    # Settlement
    "SettlementCalculator",
    "PercentageFeePolicy",
    "SettlementService",
]
