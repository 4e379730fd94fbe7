"""Storage infrastructure implementations."""

from invoiceflow.infrastructure.storage.sqlite import (
    SQLiteInvoiceStore,
    SQLitePartyStore,
    SQLiteSequenceStore,
    SQLiteSettlementStore,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)

__all__ = [
    # SQLite stores
    "SQLiteInvoiceStore",
    "SQLitePartyStore",
    "SQLiteSequenceStore",
    "SQLiteSettlementStore",
    # Connection pool
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
]
