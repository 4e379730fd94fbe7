"""
SQLite implementation of the invoice number counter.

Allocation is one INSERT ... ON CONFLICT DO UPDATE ... RETURNING statement in
its own transaction, so concurrent callers serialize on SQLite's write lock
and each receives a distinct value.
"""

from invoiceflow.core.exceptions import SequenceAllocationError
from invoiceflow.core.interfaces import IInvoiceSequenceStore
from invoiceflow.infrastructure.storage.sqlite.connection import get_connection, get_transaction

ALLOCATE_SQL = """
INSERT INTO invoice_counters (owner_id, year, current_value, updated_at)
VALUES (?, ?, 1, CURRENT_TIMESTAMP)
ON CONFLICT(owner_id, year) DO UPDATE SET
    current_value = current_value + 1,
    updated_at = CURRENT_TIMESTAMP
RETURNING current_value
"""


class SQLiteSequenceStore(IInvoiceSequenceStore):
    """SQLite implementation of the per-owner, per-year counter."""

    async def allocate_next_sequence(self, owner_id: int, year: int) -> int:
        async with get_transaction() as conn:
            cursor = await conn.execute(ALLOCATE_SQL, (owner_id, year))
            # Must be read before the transaction commits
            row = await cursor.fetchone()
            await cursor.close()

        if row is None:
            raise SequenceAllocationError(owner_id, year, "no value returned")
        return int(row[0])

    async def get_current_sequence(self, owner_id: int, year: int) -> int:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT current_value FROM invoice_counters WHERE owner_id = ? AND year = ?",
                (owner_id, year),
            )
            row = await cursor.fetchone()
            return row[0] if row else 0
