"""
Owner and client profile endpoints.
"""

from fastapi import APIRouter, Depends, Query, status

from invoiceflow.api.dependencies import get_parties
from invoiceflow.application.dto.requests import CreateClientRequest, CreateOwnerRequest
from invoiceflow.application.dto.responses import ClientResponse, ErrorResponse, OwnerResponse
from invoiceflow.core.services import PartyService

router = APIRouter(prefix="/api/owners", tags=["owners"])


@router.post(
    "",
    response_model=OwnerResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse, "description": "Invalid GSTIN or state code"}},
)
async def create_owner(
    request: CreateOwnerRequest,
    service: PartyService = Depends(get_parties),
) -> OwnerResponse:
    """Register a business that issues invoices."""
    owner = await service.create_owner(request.to_entity())
    return OwnerResponse.from_entity(owner)


@router.get(
    "/{owner_id}",
    response_model=OwnerResponse,
    responses={404: {"model": ErrorResponse, "description": "Owner not found"}},
)
async def get_owner(
    owner_id: int,
    service: PartyService = Depends(get_parties),
) -> OwnerResponse:
    """Get an owner profile."""
    return OwnerResponse.from_entity(await service.get_owner(owner_id))


@router.post(
    "/{owner_id}/clients",
    response_model=ClientResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid GSTIN or state code"},
        404: {"model": ErrorResponse, "description": "Owner not found"},
    },
)
async def create_client(
    owner_id: int,
    request: CreateClientRequest,
    service: PartyService = Depends(get_parties),
) -> ClientResponse:
    """Add a client for an owner."""
    client = await service.create_client(request.to_entity(owner_id))
    return ClientResponse.from_entity(client)


@router.get(
    "/{owner_id}/clients",
    response_model=list[ClientResponse],
    responses={404: {"model": ErrorResponse, "description": "Owner not found"}},
)
async def list_clients(
    owner_id: int,
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    service: PartyService = Depends(get_parties),
) -> list[ClientResponse]:
    """List an owner's clients."""
    clients = await service.list_clients(owner_id, limit=limit, offset=offset)
    return [ClientResponse.from_entity(c) for c in clients]


@router.get(
    "/{owner_id}/clients/{client_id}",
    response_model=ClientResponse,
    responses={404: {"model": ErrorResponse, "description": "Client not found"}},
)
async def get_client(
    owner_id: int,
    client_id: int,
    service: PartyService = Depends(get_parties),
) -> ClientResponse:
    """Get one of an owner's clients."""
    return ClientResponse.from_entity(await service.get_client(client_id, owner_id))
