"""
SQLite implementation of invoice storage.

Handles invoice headers and GST line items. Money is stored as TEXT.
"""

from datetime import date, datetime

import aiosqlite

from invoiceflow.config import get_logger
from invoiceflow.core.entities import Invoice, InvoiceLine, InvoiceStatus
from invoiceflow.core.interfaces import IInvoiceStore
from invoiceflow.infrastructure.storage.sqlite.connection import get_connection, get_transaction

logger = get_logger(__name__)


def _iso(value: date | None) -> str | None:
    return value.isoformat() if value else None


class SQLiteInvoiceStore(IInvoiceStore):
    """SQLite implementation of invoice storage."""

    async def insert_invoice(self, invoice: Invoice) -> Invoice:
        """Insert invoice header. Lines are written by insert_line_items."""
        async with get_transaction() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO invoices (
                    owner_id, client_id, invoice_number, sequence_number,
                    issue_date, due_date, supply_date, paid_date,
                    place_of_supply, is_inter_state, reverse_charge,
                    subtotal, cgst_total, sgst_total, igst_total, cess_total,
                    total_tax, round_off, grand_total, amount_in_words, status,
                    eway_bill_required, e_invoice_required, notes, terms_conditions,
                    created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    invoice.owner_id,
                    invoice.client_id,
                    invoice.invoice_number,
                    invoice.sequence_number,
                    _iso(invoice.issue_date),
                    _iso(invoice.due_date),
                    _iso(invoice.supply_date),
                    _iso(invoice.paid_date),
                    invoice.place_of_supply,
                    1 if invoice.is_inter_state else 0,
                    1 if invoice.reverse_charge else 0,
                    str(invoice.subtotal),
                    str(invoice.cgst_total),
                    str(invoice.sgst_total),
                    str(invoice.igst_total),
                    str(invoice.cess_total),
                    str(invoice.total_tax),
                    str(invoice.round_off),
                    invoice.grand_total,
                    invoice.amount_in_words,
                    invoice.status.value,
                    1 if invoice.eway_bill_required else 0,
                    1 if invoice.e_invoice_required else 0,
                    invoice.notes,
                    invoice.terms_conditions,
                    invoice.created_at.isoformat(),
                    invoice.updated_at.isoformat(),
                ),
            )
            invoice.id = cursor.lastrowid
            logger.debug(
                "invoice_header_inserted",
                invoice_id=invoice.id,
                invoice_number=invoice.invoice_number,
            )
            return invoice

    async def insert_line_items(
        self, invoice_id: int, lines: list[InvoiceLine]
    ) -> list[InvoiceLine]:
        """Insert all line items in one transaction."""
        async with get_transaction() as conn:
            for line in lines:
                line.invoice_id = invoice_id
                await self._insert_line(conn, line)
            logger.debug("invoice_lines_inserted", invoice_id=invoice_id, lines=len(lines))
            return lines

    async def _insert_line(self, conn: aiosqlite.Connection, line: InvoiceLine) -> None:
        """Insert a single line item."""
        cursor = await conn.execute(
            """
            INSERT INTO invoice_items (
                invoice_id, line_number, description, hsn_sac, unit,
                quantity, rate, discount, tax_rate, cess_rate,
                taxable_value, cgst_amount, sgst_amount, igst_amount,
                cess_amount, line_total
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                line.invoice_id,
                line.line_number,
                line.description,
                line.hsn_sac,
                line.unit,
                str(line.quantity),
                str(line.rate),
                str(line.discount),
                str(line.tax_rate),
                str(line.cess_rate),
                str(line.taxable_value),
                str(line.cgst_amount),
                str(line.sgst_amount),
                str(line.igst_amount),
                str(line.cess_amount),
                str(line.line_total),
            ),
        )
        line.id = cursor.lastrowid

    async def update_invoice(self, invoice: Invoice) -> Invoice:
        """Update invoice header. Number and owner never change."""
        async with get_transaction() as conn:
            await conn.execute(
                """
                UPDATE invoices SET
                    client_id = ?, issue_date = ?, due_date = ?, supply_date = ?,
                    paid_date = ?, place_of_supply = ?, is_inter_state = ?,
                    reverse_charge = ?, subtotal = ?, cgst_total = ?, sgst_total = ?,
                    igst_total = ?, cess_total = ?, total_tax = ?, round_off = ?,
                    grand_total = ?, amount_in_words = ?, status = ?,
                    eway_bill_required = ?, e_invoice_required = ?, notes = ?,
                    terms_conditions = ?, updated_at = ?
                WHERE id = ?
                """,
                (
                    invoice.client_id,
                    _iso(invoice.issue_date),
                    _iso(invoice.due_date),
                    _iso(invoice.supply_date),
                    _iso(invoice.paid_date),
                    invoice.place_of_supply,
                    1 if invoice.is_inter_state else 0,
                    1 if invoice.reverse_charge else 0,
                    str(invoice.subtotal),
                    str(invoice.cgst_total),
                    str(invoice.sgst_total),
                    str(invoice.igst_total),
                    str(invoice.cess_total),
                    str(invoice.total_tax),
                    str(invoice.round_off),
                    invoice.grand_total,
                    invoice.amount_in_words,
                    invoice.status.value,
                    1 if invoice.eway_bill_required else 0,
                    1 if invoice.e_invoice_required else 0,
                    invoice.notes,
                    invoice.terms_conditions,
                    invoice.updated_at.isoformat(),
                    invoice.id,
                ),
            )
            return invoice

    async def delete_line_items(self, invoice_id: int) -> int:
        """Delete all line items of an invoice."""
        async with get_transaction() as conn:
            cursor = await conn.execute(
                "DELETE FROM invoice_items WHERE invoice_id = ?", (invoice_id,)
            )
            return cursor.rowcount

    async def delete_invoice(self, invoice_id: int) -> bool:
        """Delete invoice and items."""
        async with get_transaction() as conn:
            cursor = await conn.execute("SELECT id FROM invoices WHERE id = ?", (invoice_id,))
            if await cursor.fetchone() is None:
                return False

            # Delete invoice (cascades to items)
            await conn.execute("DELETE FROM invoices WHERE id = ?", (invoice_id,))
            logger.debug("invoice_row_deleted", invoice_id=invoice_id)
            return True

    async def get_invoice(self, invoice_id: int, owner_id: int | None = None) -> Invoice | None:
        """Get invoice by ID with lines."""
        async with get_connection() as conn:
            if owner_id is not None:
                cursor = await conn.execute(
                    "SELECT * FROM invoices WHERE id = ? AND owner_id = ?",
                    (invoice_id, owner_id),
                )
            else:
                cursor = await conn.execute(
                    "SELECT * FROM invoices WHERE id = ?", (invoice_id,)
                )
            row = await cursor.fetchone()
            if row is None:
                return None

            invoice = self._row_to_invoice(row)

            # Load lines
            lines_cursor = await conn.execute(
                "SELECT * FROM invoice_items WHERE invoice_id = ? ORDER BY line_number",
                (invoice_id,),
            )
            line_rows = await lines_cursor.fetchall()
            invoice.lines = [self._row_to_line(r) for r in line_rows]

            return invoice

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
        """List invoice headers, newest first."""
        clauses = ["owner_id = ?"]
        params: list = [owner_id]

        if statuses:
            clauses.append(f"status IN ({', '.join('?' for _ in statuses)})")
            params.extend(statuses)
        if client_id is not None:
            clauses.append("client_id = ?")
            params.append(client_id)
        if date_from:
            clauses.append("issue_date >= ?")
            params.append(date_from.isoformat())
        if date_to:
            clauses.append("issue_date <= ?")
            params.append(date_to.isoformat())
        if due_before:
            clauses.append("due_date IS NOT NULL AND due_date < ?")
            params.append(due_before.isoformat())

        sql = (
            f"SELECT * FROM invoices WHERE {' AND '.join(clauses)} "
            "ORDER BY issue_date DESC, id DESC"
        )
        if limit is not None:
            sql += " LIMIT ? OFFSET ?"
            params.extend([limit, offset])

        async with get_connection() as conn:
            cursor = await conn.execute(sql, params)
            rows = await cursor.fetchall()
            return [self._row_to_invoice(row) for row in rows]

    def _row_to_invoice(self, row: aiosqlite.Row) -> Invoice:
        """Convert database row to Invoice entity."""
        return Invoice(
            id=row["id"],
            owner_id=row["owner_id"],
            client_id=row["client_id"],
            invoice_number=row["invoice_number"],
            sequence_number=row["sequence_number"],
            issue_date=row["issue_date"],
            due_date=row["due_date"],
            supply_date=row["supply_date"],
            paid_date=row["paid_date"],
            place_of_supply=row["place_of_supply"],
            is_inter_state=bool(row["is_inter_state"]),
            reverse_charge=bool(row["reverse_charge"]),
            subtotal=row["subtotal"],
            cgst_total=row["cgst_total"],
            sgst_total=row["sgst_total"],
            igst_total=row["igst_total"],
            cess_total=row["cess_total"],
            total_tax=row["total_tax"],
            round_off=row["round_off"],
            grand_total=row["grand_total"],
            amount_in_words=row["amount_in_words"],
            status=InvoiceStatus(row["status"]),
            eway_bill_required=bool(row["eway_bill_required"]),
            e_invoice_required=bool(row["e_invoice_required"]),
            notes=row["notes"],
            terms_conditions=row["terms_conditions"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    def _row_to_line(self, row: aiosqlite.Row) -> InvoiceLine:
        """Convert database row to InvoiceLine entity."""
        return InvoiceLine(
            id=row["id"],
            invoice_id=row["invoice_id"],
            line_number=row["line_number"],
            description=row["description"],
            hsn_sac=row["hsn_sac"],
            unit=row["unit"],
            quantity=row["quantity"],
            rate=row["rate"],
            discount=row["discount"],
            tax_rate=row["tax_rate"],
            cess_rate=row["cess_rate"],
            taxable_value=row["taxable_value"],
            cgst_amount=row["cgst_amount"],
            sgst_amount=row["sgst_amount"],
            igst_amount=row["igst_amount"],
            cess_amount=row["cess_amount"],
            line_total=row["line_total"],
        )
