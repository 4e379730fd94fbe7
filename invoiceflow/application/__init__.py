"""
Application layer - DTOs and service factories.

This layer orchestrates business logic by:
1. Defining request/response DTOs for API contracts
2. Providing factory functions for dependency injection

Core services are the only entry point for API handlers.
"""

from invoiceflow.application.services import (
    get_invoice_orchestrator,
    get_party_service,
    get_settlement_calculator,
    get_settlement_service,
    reset_services,
)

__all__ = [
    # Service factories
    "get_invoice_orchestrator",
    "get_party_service",
    "get_settlement_calculator",
    "get_settlement_service",
    "reset_services",
]
