"""Unit tests for SQLite connection pool."""

import asyncio
from pathlib import Path
from unittest.mock import patch

import aiosqlite
import pytest

from invoiceflow.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)


async def _owner_count(pool: ConnectionPool, name: str) -> int:
    async with pool.acquire() as conn:
        cursor = await conn.execute("SELECT COUNT(*) FROM owners WHERE name = ?", (name,))
        row = await cursor.fetchone()
        return row[0]


class TestConnectionPoolInit:
    """Tests for ConnectionPool initialization."""

    def test_defaults(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path)

        assert pool.db_path == temp_db_path
        assert pool.pool_size == 5
        assert pool.busy_timeout == 30000
        assert pool._initialized is False
        assert pool._connections == []

    async def test_initialize_creates_directory(self, tmp_path: Path):
        """Initialize creates database directory if not exists."""
        db_path = tmp_path / "subdir" / "nested" / "test.db"
        pool = ConnectionPool(db_path, pool_size=1)

        await pool.initialize()
        assert db_path.parent.exists()
        await pool.close()

    async def test_initialize_idempotent(self, temp_db_path: Path):
        """Multiple initialize calls are safe."""
        pool = ConnectionPool(temp_db_path, pool_size=2)

        await pool.initialize()
        await pool.initialize()

        assert len(pool._connections) == 2
        assert pool._pool.qsize() == 2
        await pool.close()


class TestConnectionPragmas:
    async def test_wal_foreign_keys_and_rows(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, busy_timeout=1234)
        conn = await pool._create_connection()

        cursor = await conn.execute("PRAGMA journal_mode")
        assert (await cursor.fetchone())[0].lower() == "wal"
        cursor = await conn.execute("PRAGMA foreign_keys")
        assert (await cursor.fetchone())[0] == 1
        cursor = await conn.execute("PRAGMA busy_timeout")
        assert (await cursor.fetchone())[0] == 1234
        assert conn.row_factory == aiosqlite.Row

        await conn.close()


class TestConnectionPoolAcquire:
    """Tests for ConnectionPool.acquire()."""

    async def test_acquire_auto_initializes(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, pool_size=1)

        async with pool.acquire() as conn:
            assert pool._initialized is True
            assert isinstance(conn, aiosqlite.Connection)

        await pool.close()

    async def test_acquire_returns_on_exception(self, temp_db_path: Path):
        """Connection is returned even if exception occurs."""
        pool = ConnectionPool(temp_db_path, pool_size=1)
        await pool.initialize()

        with pytest.raises(ValueError):
            async with pool.acquire() as _conn:
                raise ValueError("Test error")

        assert pool._pool.qsize() == 1
        await pool.close()

    async def test_acquire_blocks_when_pool_exhausted(self, temp_db_path: Path):
        """acquire() blocks when all connections are in use."""
        pool = ConnectionPool(temp_db_path, pool_size=1)
        await pool.initialize()

        async with pool.acquire() as _conn1:
            with pytest.raises(asyncio.TimeoutError):
                async with asyncio.timeout(0.1):
                    async with pool.acquire() as _conn2:
                        pass

        await pool.close()


class TestConnectionPoolTransaction:
    """Tests for ConnectionPool.transaction()."""

    async def test_commits_on_success(self, initialized_db: Path):
        pool = ConnectionPool(initialized_db, pool_size=1)

        async with pool.transaction() as conn:
            await conn.execute("INSERT INTO owners (name) VALUES (?)", ("Committed",))

        assert await _owner_count(pool, "Committed") == 1
        await pool.close()

    async def test_rollbacks_on_exception(self, initialized_db: Path):
        pool = ConnectionPool(initialized_db, pool_size=1)

        with pytest.raises(ValueError):
            async with pool.transaction() as conn:
                await conn.execute("INSERT INTO owners (name) VALUES (?)", ("Rolled back",))
                raise ValueError("Force rollback")

        assert await _owner_count(pool, "Rolled back") == 0
        await pool.close()

    async def test_takes_write_lock_up_front(self, initialized_db: Path):
        """A second writer cannot start while a transaction is open."""
        pool = ConnectionPool(initialized_db, pool_size=1)
        other = await aiosqlite.connect(initialized_db, timeout=0)

        async with pool.transaction() as conn:
            assert conn.in_transaction
            with pytest.raises(aiosqlite.OperationalError, match="locked"):
                await other.execute("BEGIN IMMEDIATE")

        await other.close()
        await pool.close()


class TestPing:
    async def test_returns_latency(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, pool_size=1)

        latency = await pool.ping()

        assert latency >= 0
        assert pool._pool.qsize() == 1
        await pool.close()


class TestGlobalPool:
    """Tests for the module level pool helpers."""

    async def test_get_pool_returns_same_instance(self, mock_settings):
        import invoiceflow.infrastructure.storage.sqlite.connection as conn_module

        conn_module._pool = None

        with patch.object(conn_module, "get_settings", return_value=mock_settings):
            pool1 = await get_pool()
            pool2 = await get_pool()

            assert pool1 is pool2
            assert pool1.db_path == mock_settings.storage.db_path
            assert pool1.pool_size == 2

            await close_pool()
            assert conn_module._pool is None

    async def test_close_pool_safe_when_none(self):
        import invoiceflow.infrastructure.storage.sqlite.connection as conn_module

        conn_module._pool = None
        await close_pool()

    async def test_transaction_then_connection(self, mock_settings, initialized_db: Path):
        import invoiceflow.infrastructure.storage.sqlite.connection as conn_module

        conn_module._pool = None
        mock_settings.storage.db_path = initialized_db

        with patch.object(conn_module, "get_settings", return_value=mock_settings):
            async with get_transaction() as conn:
                await conn.execute("INSERT INTO owners (name) VALUES (?)", ("Global",))

            async with get_connection() as conn:
                cursor = await conn.execute("SELECT name FROM owners WHERE name = ?", ("Global",))
                row = await cursor.fetchone()
                assert row["name"] == "Global"

            await close_pool()
