"""Data Transfer Objects for API layer.

Request DTOs: Validate and parse incoming API requests.
Response DTOs: Structure and serialize API responses.

These are the ONLY contracts between API handlers and core services.
"""

from invoiceflow.application.dto.requests import (
    CalculateSettlementRequest,
    CreateClientRequest,
    CreateInvoiceRequest,
    CreateOwnerRequest,
    LineItemRequest,
    UpdateInvoiceRequest,
    UpdateInvoiceStatusRequest,
    UpdateSettlementStatusRequest,
)
from invoiceflow.application.dto.responses import (
    ClientResponse,
    DatabaseHealthResponse,
    ErrorResponse,
    HealthResponse,
    InvoiceListResponse,
    InvoiceResponse,
    InvoiceStatsResponse,
    LineItemResponse,
    OwnerResponse,
    SettlementBreakdownResponse,
    SettlementResponse,
)

__all__ = [
    # Requests
    "CreateOwnerRequest",
    "CreateClientRequest",
    "LineItemRequest",
    "CreateInvoiceRequest",
    "UpdateInvoiceRequest",
    "UpdateInvoiceStatusRequest",
    "CalculateSettlementRequest",
    "UpdateSettlementStatusRequest",
    # Responses
    "OwnerResponse",
    "ClientResponse",
    "LineItemResponse",
    "InvoiceResponse",
    "InvoiceListResponse",
    "InvoiceStatsResponse",
    "SettlementBreakdownResponse",
    "SettlementResponse",
    "HealthResponse",
    "DatabaseHealthResponse",
    "ErrorResponse",
]
