"""
Dependency injection container for FastAPI.

Provides service instances to route handlers.
"""

from functools import lru_cache

from invoiceflow.application.services import (
    get_invoice_orchestrator,
    get_party_service,
    get_settlement_calculator,
    get_settlement_service,
)
from invoiceflow.config import Settings, get_settings
from invoiceflow.core.services import (
    InvoiceOrchestrator,
    PartyService,
    SettlementCalculator,
    SettlementService,
)


@lru_cache
def get_app_settings() -> Settings:
    """Get cached application settings."""
    return get_settings()


# Service dependencies
async def get_orchestrator() -> InvoiceOrchestrator:
    """Get invoice orchestrator."""
    return await get_invoice_orchestrator()


async def get_parties() -> PartyService:
    """Get party service."""
    return await get_party_service()


async def get_settlements() -> SettlementService:
    """Get settlement service."""
    return await get_settlement_service()


def get_calculator() -> SettlementCalculator:
    """Get settlement calculator."""
    return get_settlement_calculator()
