"""SQLite storage implementations."""

from invoiceflow.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)
from invoiceflow.infrastructure.storage.sqlite.invoice_store import SQLiteInvoiceStore
from invoiceflow.infrastructure.storage.sqlite.party_store import SQLitePartyStore
from invoiceflow.infrastructure.storage.sqlite.sequence_store import SQLiteSequenceStore
from invoiceflow.infrastructure.storage.sqlite.settlement_store import SQLiteSettlementStore

# Singleton instances
_invoice_store: SQLiteInvoiceStore | None = None
_party_store: SQLitePartyStore | None = None
_sequence_store: SQLiteSequenceStore | None = None
_settlement_store: SQLiteSettlementStore | None = None


async def get_invoice_store() -> SQLiteInvoiceStore:
    """Get singleton invoice store instance."""
    global _invoice_store
    if _invoice_store is None:
        _invoice_store = SQLiteInvoiceStore()
    return _invoice_store


async def get_party_store() -> SQLitePartyStore:
    """Get singleton party store instance."""
    global _party_store
    if _party_store is None:
        _party_store = SQLitePartyStore()
    return _party_store


async def get_sequence_store() -> SQLiteSequenceStore:
    """Get singleton sequence store instance."""
    global _sequence_store
    if _sequence_store is None:
        _sequence_store = SQLiteSequenceStore()
    return _sequence_store


async def get_settlement_store() -> SQLiteSettlementStore:
    """Get singleton settlement store instance."""
    global _settlement_store
    if _settlement_store is None:
        _settlement_store = SQLiteSettlementStore()
    return _settlement_store


__all__ = [
    # Connection
    "ConnectionPool",
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
    # Store classes
    "SQLiteInvoiceStore",
    "SQLitePartyStore",
    "SQLiteSequenceStore",
    "SQLiteSettlementStore",
    # Factory functions
    "get_invoice_store",
    "get_party_store",
    "get_sequence_store",
    "get_settlement_store",
]
