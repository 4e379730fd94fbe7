"""
Invoice management endpoints.

All invoices are scoped to an owner; an invoice belonging to another owner
is reported as not found.
"""

from datetime import date

from fastapi import APIRouter, Depends, Query, Response, status

from invoiceflow.api.dependencies import get_orchestrator
from invoiceflow.application.dto.requests import (
    CreateInvoiceRequest,
    UpdateInvoiceRequest,
    UpdateInvoiceStatusRequest,
)
from invoiceflow.application.dto.responses import (
    ErrorResponse,
    InvoiceListResponse,
    InvoiceResponse,
    InvoiceStatsResponse,
)
from invoiceflow.core.services import InvoiceOrchestrator

router = APIRouter(prefix="/api/owners/{owner_id}/invoices", tags=["invoices"])


@router.post(
    "",
    response_model=InvoiceResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid line item or state code"},
        404: {"model": ErrorResponse, "description": "Owner or client not found"},
        500: {"model": ErrorResponse, "description": "Numbering or storage failure"},
    },
)
async def create_invoice(
    owner_id: int,
    request: CreateInvoiceRequest,
    orchestrator: InvoiceOrchestrator = Depends(get_orchestrator),
) -> InvoiceResponse:
    """
    Create a draft invoice.

    Computes per-line GST, totals, the rounded payable amount and its words,
    then allocates the next invoice number for the issue year.
    """
    invoice = await orchestrator.create(owner_id, request.to_entity())
    return InvoiceResponse.from_entity(invoice)


@router.get("", response_model=InvoiceListResponse)
async def list_invoices(
    owner_id: int,
    status_filter: str | None = Query(
        default=None,
        alias="status",
        description="draft, sent, paid, cancelled or overdue",
    ),
    client_id: int | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    orchestrator: InvoiceOrchestrator = Depends(get_orchestrator),
) -> InvoiceListResponse:
    """List invoice headers, newest first."""
    today = date.today()
    invoices = await orchestrator.list_invoices(
        owner_id,
        status=status_filter,
        client_id=client_id,
        date_from=date_from,
        date_to=date_to,
        limit=limit + 1,
        offset=offset,
        today=today,
    )
    return InvoiceListResponse(
        invoices=[InvoiceResponse.from_entity(i, today) for i in invoices[:limit]],
        limit=limit,
        offset=offset,
        has_more=len(invoices) > limit,
    )


@router.get("/stats", response_model=InvoiceStatsResponse)
async def get_invoice_stats(
    owner_id: int,
    orchestrator: InvoiceOrchestrator = Depends(get_orchestrator),
) -> InvoiceStatsResponse:
    """Invoice counts and revenue for the owner's dashboard."""
    stats = await orchestrator.get_stats(owner_id)
    return InvoiceStatsResponse.from_entity(stats)


@router.get(
    "/{invoice_id}",
    response_model=InvoiceResponse,
    responses={404: {"model": ErrorResponse, "description": "Invoice not found"}},
)
async def get_invoice(
    owner_id: int,
    invoice_id: int,
    orchestrator: InvoiceOrchestrator = Depends(get_orchestrator),
) -> InvoiceResponse:
    """Get an invoice with its line items."""
    invoice = await orchestrator.get_invoice(invoice_id, owner_id)
    return InvoiceResponse.from_entity(invoice)


@router.patch(
    "/{invoice_id}",
    response_model=InvoiceResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid field value"},
        404: {"model": ErrorResponse, "description": "Invoice not found"},
        409: {"model": ErrorResponse, "description": "Invoice is paid or cancelled"},
    },
)
async def update_invoice(
    owner_id: int,
    invoice_id: int,
    request: UpdateInvoiceRequest,
    orchestrator: InvoiceOrchestrator = Depends(get_orchestrator),
) -> InvoiceResponse:
    """
    Update an open invoice.

    Changing items, client or place of supply recomputes every amount.
    """
    invoice = await orchestrator.update(invoice_id, owner_id, request.to_entity())
    return InvoiceResponse.from_entity(invoice)


@router.post(
    "/{invoice_id}/status",
    response_model=InvoiceResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Unknown status"},
        404: {"model": ErrorResponse, "description": "Invoice not found"},
        409: {"model": ErrorResponse, "description": "Transition not allowed"},
    },
)
async def update_invoice_status(
    owner_id: int,
    invoice_id: int,
    request: UpdateInvoiceStatusRequest,
    orchestrator: InvoiceOrchestrator = Depends(get_orchestrator),
) -> InvoiceResponse:
    """Move an invoice to sent, paid or cancelled."""
    invoice = await orchestrator.update_status(
        invoice_id, owner_id, request.status, paid_date=request.paid_date
    )
    return InvoiceResponse.from_entity(invoice)


@router.delete(
    "/{invoice_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        404: {"model": ErrorResponse, "description": "Invoice not found"},
        409: {"model": ErrorResponse, "description": "Paid invoices cannot be deleted"},
    },
)
async def delete_invoice(
    owner_id: int,
    invoice_id: int,
    orchestrator: InvoiceOrchestrator = Depends(get_orchestrator),
) -> Response:
    """Delete an unpaid invoice and its lines."""
    await orchestrator.delete_invoice(invoice_id, owner_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
