"""
Service factory functions for dependency injection.

This module provides factory functions that wire infrastructure
implementations to core services. API dependencies import from here.

Clean Architecture: Application layer orchestrates DI, not core layer.
"""

from typing import TYPE_CHECKING

from invoiceflow.config import get_logger, get_settings
from invoiceflow.core.services import (
    InvoiceOrchestrator,
    InvoiceSequencer,
    PartyService,
    PercentageFeePolicy,
    SettlementCalculator,
    SettlementService,
)

if TYPE_CHECKING:
    from invoiceflow.core.interfaces import (
        IInvoiceSequenceStore,
        IInvoiceStore,
        IPartyStore,
        ISettlementStore,
    )

logger = get_logger(__name__)

# Singleton service instances
_invoice_orchestrator: InvoiceOrchestrator | None = None
_party_service: PartyService | None = None
_settlement_service: SettlementService | None = None


def get_settlement_calculator() -> SettlementCalculator:
    """
    Build a calculator from the configured fee policy.

    An unconfigured policy is still returned; it raises on use rather than
    settling with zero fees.
    """
    settings = get_settings().settlement
    policy = PercentageFeePolicy(
        processor_fee_percent=settings.processor_fee_percent,
        gst_on_fee_percent=settings.gst_on_fee_percent,
    )
    return SettlementCalculator(policy)


async def get_settlement_service(
    settlement_store: "ISettlementStore | None" = None,
) -> SettlementService:
    """
    Get or create SettlementService instance.

    Args:
        settlement_store: Optional settlement store override

    Returns:
        Configured SettlementService
    """
    global _settlement_service

    if _settlement_service is not None and settlement_store is None:
        return _settlement_service

    # Lazy import infrastructure to avoid circular imports
    from invoiceflow.infrastructure.storage.sqlite import get_settlement_store

    store = settlement_store or await get_settlement_store()
    service = SettlementService(store=store, calculator=get_settlement_calculator())

    if settlement_store is None:
        _settlement_service = service

    return service


async def get_party_service(party_store: "IPartyStore | None" = None) -> PartyService:
    """Get or create PartyService instance."""
    global _party_service

    if _party_service is not None and party_store is None:
        return _party_service

    from invoiceflow.infrastructure.storage.sqlite import get_party_store

    service = PartyService(party_store or await get_party_store())

    if party_store is None:
        _party_service = service

    return service


async def get_invoice_orchestrator(
    invoice_store: "IInvoiceStore | None" = None,
    party_store: "IPartyStore | None" = None,
    sequence_store: "IInvoiceSequenceStore | None" = None,
    settlement_service: SettlementService | None = None,
) -> InvoiceOrchestrator:
    """
    Get or create InvoiceOrchestrator instance.

    Settlement on payment is wired in only when enabled and the fee policy is
    configured; otherwise marking an invoice paid records no settlement.

    Args:
        invoice_store: Optional invoice store override
        party_store: Optional party store override
        sequence_store: Optional sequence store override
        settlement_service: Optional settlement service override

    Returns:
        Configured InvoiceOrchestrator
    """
    global _invoice_orchestrator

    overridden = any(
        dep is not None for dep in (invoice_store, party_store, sequence_store, settlement_service)
    )
    if _invoice_orchestrator is not None and not overridden:
        return _invoice_orchestrator

    from invoiceflow.infrastructure.storage.sqlite import (
        get_invoice_store,
        get_party_store,
        get_sequence_store,
    )

    settings = get_settings()

    settlements = settlement_service
    if settlements is None and settings.settlement.settle_on_paid:
        if settings.settlement.is_configured:
            settlements = await get_settlement_service()
        else:
            logger.warning(
                "settlement_on_paid_disabled",
                reason="settlement fee policy is not configured",
            )

    orchestrator = InvoiceOrchestrator(
        invoice_store=invoice_store or await get_invoice_store(),
        party_store=party_store or await get_party_store(),
        sequencer=InvoiceSequencer(
            sequence_store or await get_sequence_store(),
            prefix=settings.invoice.number_prefix,
            padding=settings.invoice.sequence_padding,
        ),
        settlement_service=settlements,
        eway_bill_threshold=settings.invoice.eway_bill_threshold,
        e_invoice_turnover_threshold=settings.invoice.e_invoice_turnover_threshold,
        default_unit=settings.invoice.default_unit,
    )

    if not overridden:
        _invoice_orchestrator = orchestrator

    return orchestrator


def reset_services() -> None:
    """Reset all singleton services (for testing)."""
    global _invoice_orchestrator, _party_service, _settlement_service
    _invoice_orchestrator = None
    _party_service = None
    _settlement_service = None
