"""SQLite implementation of settlement record storage."""

from datetime import datetime

import aiosqlite

from invoiceflow.core.entities import SettlementRecord, SettlementStatus
from invoiceflow.core.interfaces import ISettlementStore
from invoiceflow.infrastructure.storage.sqlite.connection import get_connection, get_transaction


def _dt(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


class SQLiteSettlementStore(ISettlementStore):
    """SQLite implementation of settlement storage."""

    async def create_settlement(self, record: SettlementRecord) -> SettlementRecord:
        async with get_transaction() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO settlements (
                    invoice_id, owner_id, gross_amount, commission_rate,
                    platform_commission, processor_fee, gst_on_fee, net_amount,
                    status, transfer_reference, failure_reason, initiated_at,
                    settled_at, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    record.invoice_id,
                    record.owner_id,
                    str(record.gross_amount),
                    str(record.commission_rate),
                    str(record.platform_commission),
                    str(record.processor_fee),
                    str(record.gst_on_fee),
                    str(record.net_amount),
                    record.status.value,
                    record.transfer_reference,
                    record.failure_reason,
                    record.initiated_at.isoformat() if record.initiated_at else None,
                    record.settled_at.isoformat() if record.settled_at else None,
                    record.created_at.isoformat(),
                    record.updated_at.isoformat(),
                ),
            )
            record.id = cursor.lastrowid
            return record

    async def get_settlement(self, settlement_id: int) -> SettlementRecord | None:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM settlements WHERE id = ?", (settlement_id,)
            )
            row = await cursor.fetchone()
            return self._row_to_record(row) if row else None

    async def get_settlement_by_invoice(self, invoice_id: int) -> SettlementRecord | None:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM settlements WHERE invoice_id = ?", (invoice_id,)
            )
            row = await cursor.fetchone()
            return self._row_to_record(row) if row else None

    async def list_settlements(
        self,
        owner_id: int,
        status: SettlementStatus | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[SettlementRecord]:
        async with get_connection() as conn:
            if status:
                cursor = await conn.execute(
                    """
                    SELECT * FROM settlements
                    WHERE owner_id = ? AND status = ?
                    ORDER BY created_at DESC, id DESC
                    LIMIT ? OFFSET ?
                    """,
                    (owner_id, SettlementStatus(status).value, limit, offset),
                )
            else:
                cursor = await conn.execute(
                    """
                    SELECT * FROM settlements
                    WHERE owner_id = ?
                    ORDER BY created_at DESC, id DESC
                    LIMIT ? OFFSET ?
                    """,
                    (owner_id, limit, offset),
                )
            rows = await cursor.fetchall()
            return [self._row_to_record(row) for row in rows]

    async def update_settlement(self, record: SettlementRecord) -> SettlementRecord:
        """Update lifecycle fields. Amounts are immutable once recorded."""
        async with get_transaction() as conn:
            await conn.execute(
                """
                UPDATE settlements SET
                    status = ?, transfer_reference = ?, failure_reason = ?,
                    initiated_at = ?, settled_at = ?, updated_at = ?
                WHERE id = ?
                """,
                (
                    record.status.value,
                    record.transfer_reference,
                    record.failure_reason,
                    record.initiated_at.isoformat() if record.initiated_at else None,
                    record.settled_at.isoformat() if record.settled_at else None,
                    record.updated_at.isoformat(),
                    record.id,
                ),
            )
            return record

    def _row_to_record(self, row: aiosqlite.Row) -> SettlementRecord:
        """Convert database row to SettlementRecord entity."""
        return SettlementRecord(
            id=row["id"],
            invoice_id=row["invoice_id"],
            owner_id=row["owner_id"],
            gross_amount=row["gross_amount"],
            commission_rate=row["commission_rate"],
            platform_commission=row["platform_commission"],
            processor_fee=row["processor_fee"],
            gst_on_fee=row["gst_on_fee"],
            net_amount=row["net_amount"],
            status=SettlementStatus(row["status"]),
            transfer_reference=row["transfer_reference"],
            failure_reason=row["failure_reason"],
            initiated_at=_dt(row["initiated_at"]),
            settled_at=_dt(row["settled_at"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
