"""
Owner and client profile service.

Validates GSTIN and state codes on the way in so invoices can always be
classified later.
"""

from invoiceflow.config import get_logger
from invoiceflow.core.entities.party import ClientProfile, OwnerProfile
from invoiceflow.core.exceptions import (
    ClientNotFoundError,
    OwnerNotFoundError,
    ValidationError,
)
from invoiceflow.core.interfaces import IPartyStore
from invoiceflow.core.services.supply_classifier import validate_gstin, validate_state_code

logger = get_logger(__name__)


def _normalize_identifiers(gstin: str | None, state_code: str | None) -> tuple[str | None, str | None]:
    """
    Validate GSTIN and state code, deriving the state code from the GSTIN.

    Raises:
        InvalidGstinError: On malformed GSTIN
        InvalidStateCodeError: On unknown state code
        ValidationError: If the state code contradicts the GSTIN
    """
    if gstin:
        gstin = validate_gstin(gstin)
    if state_code:
        state_code = validate_state_code(state_code)

    if gstin:
        derived = gstin[:2]
        if state_code and state_code != derived:
            raise ValidationError(
                "state_code",
                f"State code {state_code} does not match GSTIN state {derived}",
                state_code,
            )
        state_code = state_code or validate_state_code(derived, "gstin")
    return gstin, state_code


class PartyService:
    """Create and look up owners and clients."""

    def __init__(self, store: IPartyStore):
        self._store = store

    async def create_owner(self, owner: OwnerProfile) -> OwnerProfile:
        owner.gstin, owner.state_code = _normalize_identifiers(owner.gstin, owner.state_code)
        return await self._store.create_owner(owner)

    async def get_owner(self, owner_id: int) -> OwnerProfile:
        owner = await self._store.get_owner(owner_id)
        if not owner:
            raise OwnerNotFoundError(owner_id)
        return owner

    async def create_client(self, client: ClientProfile) -> ClientProfile:
        """Create a client under an existing owner."""
        await self.get_owner(client.owner_id)
        client.gstin, client.state_code = _normalize_identifiers(client.gstin, client.state_code)
        if not client.state_code:
            # Invoices can still fall back to the place of supply
            logger.info("client_without_state_code", owner_id=client.owner_id, name=client.name)
        return await self._store.create_client(client)

    async def get_client(self, client_id: int, owner_id: int) -> ClientProfile:
        client = await self._store.get_client(client_id, owner_id)
        if not client:
            raise ClientNotFoundError(client_id, owner_id)
        return client

    async def list_clients(
        self, owner_id: int, limit: int = 100, offset: int = 0
    ) -> list[ClientProfile]:
        await self.get_owner(owner_id)
        return await self._store.list_clients(owner_id, limit, offset)
