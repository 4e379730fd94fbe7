"""
Settlement endpoints.

Preview a payout breakdown, inspect settlement records and move them
through their lifecycle.
"""

from fastapi import APIRouter, Depends, Query, status

from invoiceflow.api.dependencies import (
    get_calculator,
    get_orchestrator,
    get_parties,
    get_settlements,
)
from invoiceflow.application.dto.requests import (
    CalculateSettlementRequest,
    UpdateSettlementStatusRequest,
)
from invoiceflow.application.dto.responses import (
    ErrorResponse,
    SettlementBreakdownResponse,
    SettlementResponse,
)
from invoiceflow.core.entities import SettlementStatus
from invoiceflow.core.exceptions import ValidationError
from invoiceflow.core.services import (
    InvoiceOrchestrator,
    PartyService,
    SettlementCalculator,
    SettlementService,
)

router = APIRouter(tags=["settlements"])


@router.post(
    "/api/settlements/calculate",
    response_model=SettlementBreakdownResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid amount or commission rate"},
        503: {"model": ErrorResponse, "description": "Fee policy not configured"},
    },
)
async def calculate_settlement(
    request: CalculateSettlementRequest,
    calculator: SettlementCalculator = Depends(get_calculator),
) -> SettlementBreakdownResponse:
    """Preview the payout for an amount without recording anything."""
    breakdown = calculator.calculate(request.invoice_amount, request.commission_rate)
    return SettlementBreakdownResponse.from_entity(breakdown)


@router.get("/api/owners/{owner_id}/settlements", response_model=list[SettlementResponse])
async def list_settlements(
    owner_id: int,
    status_filter: str | None = Query(default=None, alias="status"),
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    service: SettlementService = Depends(get_settlements),
) -> list[SettlementResponse]:
    """List an owner's settlement records, newest first."""
    settlement_status = None
    if status_filter:
        try:
            settlement_status = SettlementStatus(status_filter.strip().lower())
        except ValueError as e:
            raise ValidationError("status", "Unknown settlement status", status_filter) from e

    records = await service.list_settlements(
        owner_id, status=settlement_status, limit=limit, offset=offset
    )
    return [SettlementResponse.from_entity(r) for r in records]


@router.get(
    "/api/owners/{owner_id}/invoices/{invoice_id}/settlement",
    response_model=SettlementResponse,
    responses={404: {"model": ErrorResponse, "description": "No settlement for invoice"}},
)
async def get_invoice_settlement(
    owner_id: int,
    invoice_id: int,
    service: SettlementService = Depends(get_settlements),
) -> SettlementResponse:
    """Get the settlement recorded for a paid invoice."""
    return SettlementResponse.from_entity(await service.get_for_invoice(invoice_id, owner_id))


@router.post(
    "/api/owners/{owner_id}/invoices/{invoice_id}/settlement",
    response_model=SettlementResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"model": ErrorResponse, "description": "Invoice not found"},
        422: {"model": ErrorResponse, "description": "Invoice is not paid"},
        503: {"model": ErrorResponse, "description": "Fee policy not configured"},
    },
)
async def record_invoice_settlement(
    owner_id: int,
    invoice_id: int,
    orchestrator: InvoiceOrchestrator = Depends(get_orchestrator),
    parties: PartyService = Depends(get_parties),
    service: SettlementService = Depends(get_settlements),
) -> SettlementResponse:
    """
    Record the settlement for a paid invoice.

    Used when the automatic settlement on payment failed or was disabled.
    Returns the existing record if one was already created.
    """
    invoice = await orchestrator.get_invoice(invoice_id, owner_id)
    owner = await parties.get_owner(owner_id)
    record = await service.record_for_invoice(invoice, owner)
    return SettlementResponse.from_entity(record)


@router.post(
    "/api/settlements/{settlement_id}/status",
    response_model=SettlementResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Unknown status or missing reason"},
        404: {"model": ErrorResponse, "description": "Settlement not found"},
        409: {"model": ErrorResponse, "description": "Transition not allowed"},
    },
)
async def update_settlement_status(
    settlement_id: int,
    request: UpdateSettlementStatusRequest,
    service: SettlementService = Depends(get_settlements),
) -> SettlementResponse:
    """Move a settlement through initiated, processed and settled, or fail it."""
    try:
        target = SettlementStatus(request.status.strip().lower())
    except ValueError as e:
        raise ValidationError("status", "Unknown settlement status", request.status) from e

    record = await service.update_status(
        settlement_id,
        target,
        transfer_reference=request.transfer_reference,
        failure_reason=request.failure_reason,
    )
    return SettlementResponse.from_entity(record)
