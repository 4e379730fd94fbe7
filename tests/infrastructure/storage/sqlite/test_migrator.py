"""Unit tests for database migrator."""

from pathlib import Path
from unittest.mock import patch

import aiosqlite
import pytest

from invoiceflow.infrastructure.storage.sqlite.migrations.migrator import (
    REQUIRED_TABLES,
    Migration,
    discover_migrations,
    get_applied_migrations,
    get_migration_status,
    initialize_database,
    verify_schema_integrity,
)

MIGRATOR = "invoiceflow.infrastructure.storage.sqlite.migrations.migrator"

TRACKING_TABLE_SQL = """
    CREATE TABLE IF NOT EXISTS schema_migrations (
        version TEXT PRIMARY KEY,
        name TEXT,
        checksum TEXT,
        applied_at TEXT DEFAULT (datetime('now')),
        execution_time_ms INTEGER
    );
"""


@pytest.fixture
def migrations_dir(tmp_path: Path) -> Path:
    path = tmp_path / "migrations"
    path.mkdir()
    (path / "v001_init.sql").write_text(TRACKING_TABLE_SQL)
    return path


async def _tables(db_path: Path) -> set[str]:
    async with aiosqlite.connect(db_path) as conn:
        cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
        return {row[0] for row in await cursor.fetchall()}


def _by_name(checks: list[dict]) -> dict[str, dict]:
    return {c["check"]: c for c in checks}


class TestMigration:
    def test_load_parses_filename(self, tmp_path: Path):
        migration_file = tmp_path / "v001_initial_schema.sql"
        migration_file.write_text("SELECT 1;")

        migration = Migration.load(migration_file)

        assert migration.version == "001"
        assert migration.name == "initial_schema"
        assert migration.sql == "SELECT 1;"
        assert len(migration.checksum) == 16

    def test_checksum_follows_content(self):
        assert Migration("001", "a", "SELECT 1;").checksum != Migration("001", "a", "SELECT 2;").checksum
        assert Migration("001", "a", "SELECT 1;").checksum == Migration("009", "b", "SELECT 1;").checksum

    @pytest.mark.parametrize("filename", ["invalid_migration.sql", "v1_short.sql", "v001_x.sql.bak"])
    def test_invalid_filename_raises(self, tmp_path: Path, filename: str):
        path = tmp_path / filename
        path.write_text("SELECT 1;")

        with pytest.raises(ValueError, match="Invalid migration filename"):
            Migration.load(path)


class TestDiscoverMigrations:
    def test_sorted_and_filtered(self, tmp_path: Path):
        (tmp_path / "v003_third.sql").write_text("SELECT 3;")
        (tmp_path / "v001_first.sql").write_text("SELECT 1;")
        (tmp_path / "vx_bad.sql").write_text("SELECT 2;")
        (tmp_path / "readme.txt").write_text("Not a migration")

        with patch(f"{MIGRATOR}.MIGRATIONS_DIR", tmp_path):
            result = discover_migrations()

        assert [m.version for m in result] == ["001", "003"]

    def test_ships_initial_schema(self):
        versions = [m.version for m in discover_migrations()]
        assert versions[0] == "001"


class TestInitializeDatabase:
    async def test_full_schema(self, tmp_path: Path):
        db_path = tmp_path / "nested" / "invoiceflow.db"

        results = await initialize_database(db_path)

        assert [r.version for r in results] == ["001"]
        assert all(r.success for r in results)
        assert set(REQUIRED_TABLES) <= await _tables(db_path)

        async with aiosqlite.connect(db_path) as conn:
            applied = await get_applied_migrations(conn)
        assert applied == {"001": discover_migrations()[0].checksum}

    async def test_idempotent(self, initialized_db: Path):
        assert await initialize_database(initialized_db) == []

    async def test_no_tracking_table_means_nothing_applied(self, tmp_path: Path):
        async with aiosqlite.connect(tmp_path / "empty.db") as conn:
            assert await get_applied_migrations(conn) == {}

    async def test_failed_migration_rolls_back_and_stops(
        self, tmp_path: Path, migrations_dir: Path
    ):
        # The first statement succeeds before the syntax error
        (migrations_dir / "v002_broken.sql").write_text(
            "CREATE TABLE half (id INTEGER);\nCREATE TABLE oops (;"
        )
        (migrations_dir / "v003_never.sql").write_text("CREATE TABLE never (id INTEGER);")
        db_path = tmp_path / "test.db"

        with patch(f"{MIGRATOR}.MIGRATIONS_DIR", migrations_dir):
            results = await initialize_database(db_path)
            status = await get_migration_status(db_path)

        assert [(r.version, r.success) for r in results] == [("001", True), ("002", False)]
        assert results[1].error
        tables = await _tables(db_path)
        assert "half" not in tables
        assert "never" not in tables
        assert status["current_version"] == "001"
        assert status["pending_migrations"] == ["002", "003"]

    async def test_retry_after_fix(self, tmp_path: Path, migrations_dir: Path):
        broken = migrations_dir / "v002_add.sql"
        broken.write_text("CREATE TABLE extra (;")
        db_path = tmp_path / "test.db"

        with patch(f"{MIGRATOR}.MIGRATIONS_DIR", migrations_dir):
            await initialize_database(db_path)
            broken.write_text("CREATE TABLE extra (id INTEGER);")
            results = await initialize_database(db_path)

        assert [(r.version, r.success) for r in results] == [("002", True)]
        assert "extra" in await _tables(db_path)

    async def test_modified_migration_stops_run(self, tmp_path: Path, migrations_dir: Path):
        db_path = tmp_path / "test.db"
        with patch(f"{MIGRATOR}.MIGRATIONS_DIR", migrations_dir):
            await initialize_database(db_path)
            (migrations_dir / "v001_init.sql").write_text(TRACKING_TABLE_SQL + "\n-- edited")
            (migrations_dir / "v002_next.sql").write_text("CREATE TABLE next (id INTEGER);")

            results = await initialize_database(db_path)
            status = await get_migration_status(db_path)

        assert [(r.version, r.success) for r in results] == [("001", False)]
        assert "changed" in results[0].error
        assert "next" not in await _tables(db_path)
        assert status["modified_migrations"] == ["001"]

    async def test_foreign_key_violation_rolls_back(self, tmp_path: Path, migrations_dir: Path):
        (migrations_dir / "v002_orphans.sql").write_text(
            """
            CREATE TABLE parent (id INTEGER PRIMARY KEY);
            CREATE TABLE child (id INTEGER PRIMARY KEY, parent_id INTEGER REFERENCES parent(id));
            PRAGMA defer_foreign_keys = ON;
            INSERT INTO child (id, parent_id) VALUES (1, 42);
            """
        )
        db_path = tmp_path / "test.db"

        with patch(f"{MIGRATOR}.MIGRATIONS_DIR", migrations_dir):
            results = await initialize_database(db_path)

        assert [(r.version, r.success) for r in results] == [("001", True), ("002", False)]
        assert "child" not in await _tables(db_path)


class TestStatus:
    async def test_without_database(self, tmp_path: Path):
        result = await get_migration_status(tmp_path / "missing.db")

        assert result["exists"] is False
        assert result["current_version"] is None
        assert result["pending_migrations"] == ["001"]

    async def test_after_migration(self, initialized_db: Path):
        result = await get_migration_status(initialized_db)

        assert result["exists"] is True
        assert result["current_version"] == "001"
        assert result["applied_migrations"] == ["001"]
        assert result["pending_migrations"] == []
        assert result["modified_migrations"] == []


class TestVerifySchemaIntegrity:
    async def test_shipped_schema_passes(self, initialized_db: Path):
        checks = _by_name(await verify_schema_integrity(initialized_db))

        assert set(checks) == {
            "integrity",
            "foreign_keys",
            "required_tables",
            "invoice_counters_key",
            "unique_invoice_number",
            "one_settlement_per_invoice",
            "money_columns_text",
        }
        assert all(c["status"] == "PASS" for c in checks.values())
        assert checks["invoice_counters_key"]["primary_key"] == ["owner_id", "year"]

    async def test_missing_tables_reported(self, tmp_path: Path, migrations_dir: Path):
        db_path = tmp_path / "test.db"
        with patch(f"{MIGRATOR}.MIGRATIONS_DIR", migrations_dir):
            await initialize_database(db_path)

        checks = _by_name(await verify_schema_integrity(db_path))

        assert checks["required_tables"]["status"] == "FAIL"
        assert set(checks["required_tables"]["missing"]) == set(REQUIRED_TABLES) - {
            "schema_migrations"
        }
        assert checks["invoice_counters_key"]["status"] == "FAIL"

    async def test_weakened_constraints_reported(self, tmp_path: Path):
        db_path = tmp_path / "weak.db"
        async with aiosqlite.connect(db_path) as conn:
            await conn.executescript(
                """
                CREATE TABLE invoice_counters (owner_id INTEGER, year INTEGER, current_value INTEGER);
                CREATE TABLE invoices (
                    id INTEGER PRIMARY KEY, owner_id INTEGER, invoice_number TEXT,
                    subtotal REAL, cgst_total TEXT, sgst_total TEXT, igst_total TEXT,
                    cess_total TEXT, total_tax TEXT, round_off TEXT,
                    UNIQUE (invoice_number)
                );
                CREATE TABLE settlements (id INTEGER PRIMARY KEY, invoice_id INTEGER);
                CREATE INDEX idx_settlements_invoice ON settlements(invoice_id);
                """
            )

        checks = _by_name(await verify_schema_integrity(db_path))

        assert checks["invoice_counters_key"]["status"] == "FAIL"
        assert checks["invoice_counters_key"]["primary_key"] == []
        # Unique per number alone is not unique per (owner, number)
        assert checks["unique_invoice_number"]["status"] == "FAIL"
        # A plain index does not enforce one settlement per invoice
        assert checks["one_settlement_per_invoice"]["status"] == "FAIL"
        assert checks["money_columns_text"]["status"] == "FAIL"
        assert "invoices.subtotal" in checks["money_columns_text"]["columns"]
        assert checks["integrity"]["status"] == "PASS"
