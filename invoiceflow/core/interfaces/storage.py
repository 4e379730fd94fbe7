"""
Abstract interfaces for storage providers.

Defines contracts for invoice, sequence, party, and settlement stores.
"""

from abc import ABC, abstractmethod
from datetime import date

from invoiceflow.core.entities.invoice import Invoice, InvoiceLine
from invoiceflow.core.entities.party import ClientProfile, OwnerProfile
from invoiceflow.core.entities.settlement import SettlementRecord, SettlementStatus


class IInvoiceSequenceStore(ABC):
    """Atomic per-owner, per-year invoice counter."""

    @abstractmethod
    async def allocate_next_sequence(self, owner_id: int, year: int) -> int:
        """
        Increment and return the counter for (owner_id, year).

        Must be a single atomic operation: concurrent callers always receive
        distinct values. The first allocation for a pair returns 1.
        """
        pass

    @abstractmethod
    async def get_current_sequence(self, owner_id: int, year: int) -> int:
        """Last allocated value for (owner_id, year), or 0 if none."""
        pass


class IInvoiceStore(ABC):
    """
    Abstract interface for invoice storage.

    Headers and line items are written separately so callers can compensate
    when the second write fails.
    """

    @abstractmethod
    async def insert_invoice(self, invoice: Invoice) -> Invoice:
        """Insert invoice header (without lines) and return it with its ID."""
        pass

    @abstractmethod
    async def insert_line_items(
        self, invoice_id: int, lines: list[InvoiceLine]
    ) -> list[InvoiceLine]:
        """Insert line items for an invoice."""
        pass

    @abstractmethod
    async def update_invoice(self, invoice: Invoice) -> Invoice:
        """Update invoice header fields."""
        pass

    @abstractmethod
    async def delete_line_items(self, invoice_id: int) -> int:
        """Delete all line items of an invoice. Returns rows deleted."""
        pass

    @abstractmethod
    async def delete_invoice(self, invoice_id: int) -> bool:
        """Delete invoice header and its line items."""
        pass

    @abstractmethod
    async def get_invoice(self, invoice_id: int, owner_id: int | None = None) -> Invoice | None:
        """Get invoice with lines, optionally scoped to an owner."""
        pass

    @abstractmethod
    async def list_invoices(
        self,
        owner_id: int,
        statuses: list[str] | None = None,
        client_id: int | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        due_before: date | None = None,
        limit: int | None = 100,
        offset: int = 0,
    ) -> list[Invoice]:
        """List invoice headers (without lines), newest first."""
        pass


class IPartyStore(ABC):
    """Owner and client profile storage."""

    @abstractmethod
    async def create_owner(self, owner: OwnerProfile) -> OwnerProfile:
        """Create owner profile."""
        pass

    @abstractmethod
    async def get_owner(self, owner_id: int) -> OwnerProfile | None:
        """Get owner by ID."""
        pass

    @abstractmethod
    async def create_client(self, client: ClientProfile) -> ClientProfile:
        """Create client profile for an owner."""
        pass

    @abstractmethod
    async def get_client(self, client_id: int, owner_id: int | None = None) -> ClientProfile | None:
        """Get client by ID, optionally scoped to an owner."""
        pass

    @abstractmethod
    async def list_clients(
        self, owner_id: int, limit: int = 100, offset: int = 0
    ) -> list[ClientProfile]:
        """List clients of an owner."""
        pass


class ISettlementStore(ABC):
    """Settlement record storage."""

    @abstractmethod
    async def create_settlement(self, record: SettlementRecord) -> SettlementRecord:
        """Create settlement record."""
        pass

    @abstractmethod
    async def get_settlement(self, settlement_id: int) -> SettlementRecord | None:
        """Get settlement by ID."""
        pass

    @abstractmethod
    async def get_settlement_by_invoice(self, invoice_id: int) -> SettlementRecord | None:
        """Get settlement for an invoice."""
        pass

    @abstractmethod
    async def list_settlements(
        self,
        owner_id: int,
        status: SettlementStatus | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[SettlementRecord]:
        """List settlements of an owner, newest first."""
        pass

    @abstractmethod
    async def update_settlement(self, record: SettlementRecord) -> SettlementRecord:
        """Update settlement status fields."""
        pass
