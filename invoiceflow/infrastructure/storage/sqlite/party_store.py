"""SQLite implementation of owner and client profile storage."""

from datetime import datetime

import aiosqlite

from invoiceflow.config import get_logger
from invoiceflow.core.entities import ClientProfile, OwnerProfile
from invoiceflow.core.interfaces import IPartyStore
from invoiceflow.infrastructure.storage.sqlite.connection import get_connection, get_transaction

logger = get_logger(__name__)


class SQLitePartyStore(IPartyStore):
    """SQLite implementation of party storage."""

    async def create_owner(self, owner: OwnerProfile) -> OwnerProfile:
        async with get_transaction() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO owners (
                    name, gstin, state_code, address, commission_rate,
                    annual_turnover, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    owner.name,
                    owner.gstin,
                    owner.state_code,
                    owner.address,
                    str(owner.commission_rate),
                    str(owner.annual_turnover) if owner.annual_turnover is not None else None,
                    owner.created_at.isoformat(),
                    owner.updated_at.isoformat(),
                ),
            )
            owner.id = cursor.lastrowid
            logger.info("owner_created", owner_id=owner.id)
            return owner

    async def get_owner(self, owner_id: int) -> OwnerProfile | None:
        async with get_connection() as conn:
            cursor = await conn.execute("SELECT * FROM owners WHERE id = ?", (owner_id,))
            row = await cursor.fetchone()
            return self._row_to_owner(row) if row else None

    async def create_client(self, client: ClientProfile) -> ClientProfile:
        async with get_transaction() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO clients (
                    owner_id, name, gstin, state_code, address, email, phone,
                    created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    client.owner_id,
                    client.name,
                    client.gstin,
                    client.state_code,
                    client.address,
                    client.email,
                    client.phone,
                    client.created_at.isoformat(),
                    client.updated_at.isoformat(),
                ),
            )
            client.id = cursor.lastrowid
            logger.info("client_created", client_id=client.id, owner_id=client.owner_id)
            return client

    async def get_client(self, client_id: int, owner_id: int | None = None) -> ClientProfile | None:
        async with get_connection() as conn:
            if owner_id is not None:
                cursor = await conn.execute(
                    "SELECT * FROM clients WHERE id = ? AND owner_id = ?",
                    (client_id, owner_id),
                )
            else:
                cursor = await conn.execute("SELECT * FROM clients WHERE id = ?", (client_id,))
            row = await cursor.fetchone()
            return self._row_to_client(row) if row else None

    async def list_clients(
        self, owner_id: int, limit: int = 100, offset: int = 0
    ) -> list[ClientProfile]:
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM clients
                WHERE owner_id = ?
                ORDER BY name COLLATE NOCASE, id
                LIMIT ? OFFSET ?
                """,
                (owner_id, limit, offset),
            )
            rows = await cursor.fetchall()
            return [self._row_to_client(row) for row in rows]

    def _row_to_owner(self, row: aiosqlite.Row) -> OwnerProfile:
        """Convert database row to OwnerProfile entity."""
        return OwnerProfile(
            id=row["id"],
            name=row["name"],
            gstin=row["gstin"],
            state_code=row["state_code"],
            address=row["address"],
            commission_rate=row["commission_rate"],
            annual_turnover=row["annual_turnover"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    def _row_to_client(self, row: aiosqlite.Row) -> ClientProfile:
        """Convert database row to ClientProfile entity."""
        return ClientProfile(
            id=row["id"],
            owner_id=row["owner_id"],
            name=row["name"],
            gstin=row["gstin"],
            state_code=row["state_code"],
            address=row["address"],
            email=row["email"],
            phone=row["phone"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
