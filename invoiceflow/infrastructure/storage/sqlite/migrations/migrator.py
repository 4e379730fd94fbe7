"""
Schema migrations for the invoicing database.

Migrations are ``vNNN_name.sql`` files next to this module. Each pending file
runs in one transaction together with its ``schema_migrations`` row, so a
failing migration leaves the database at the previous version. An applied
migration whose file has since changed stops the run.
"""

import hashlib
import re
import time
from dataclasses import dataclass
from pathlib import Path

import aiosqlite

from invoiceflow.config import get_logger, get_settings

logger = get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent
FILENAME_PATTERN = re.compile(r"^v(\d{3})_(\w+)\.sql$")

REQUIRED_TABLES = [
    "owners",
    "clients",
    "invoice_counters",
    "invoices",
    "invoice_items",
    "settlements",
    "schema_migrations",
]

# Decimal amounts must be stored as TEXT to round-trip exactly
MONEY_COLUMNS = {
    "invoices": (
        "subtotal",
        "cgst_total",
        "sgst_total",
        "igst_total",
        "cess_total",
        "total_tax",
        "round_off",
    ),
    "invoice_items": (
        "quantity",
        "rate",
        "discount",
        "taxable_value",
        "cgst_amount",
        "sgst_amount",
        "igst_amount",
        "cess_amount",
        "line_total",
    ),
    "settlements": (
        "gross_amount",
        "platform_commission",
        "processor_fee",
        "gst_on_fee",
        "net_amount",
    ),
}

UNIQUE_KEYS = {
    "unique_invoice_number": ("invoices", ["owner_id", "invoice_number"]),
    "one_settlement_per_invoice": ("settlements", ["invoice_id"]),
}

COUNTER_KEY = ["owner_id", "year"]


@dataclass(frozen=True)
class Migration:
    """A migration script loaded from disk."""

    version: str
    name: str
    sql: str

    @property
    def checksum(self) -> str:
        return hashlib.sha256(self.sql.encode()).hexdigest()[:16]

    @classmethod
    def load(cls, path: Path) -> "Migration":
        match = FILENAME_PATTERN.match(path.name)
        if not match:
            raise ValueError(f"Invalid migration filename: {path.name}")
        return cls(match.group(1), match.group(2), path.read_text(encoding="utf-8"))


@dataclass
class MigrationResult:
    version: str
    name: str
    success: bool
    execution_time_ms: int
    error: str | None = None


def discover_migrations() -> list[Migration]:
    """Migration scripts in version order; misnamed files are skipped."""
    migrations = []
    for path in sorted(MIGRATIONS_DIR.glob("v*.sql")):
        try:
            migrations.append(Migration.load(path))
        except ValueError as e:
            logger.warning("skipping_invalid_migration", path=str(path), error=str(e))
    return migrations


async def get_applied_migrations(conn: aiosqlite.Connection) -> dict[str, str]:
    """Applied versions mapped to their recorded checksums."""
    try:
        cursor = await conn.execute("SELECT version, checksum FROM schema_migrations")
    except aiosqlite.OperationalError:
        return {}
    return {row[0]: row[1] for row in await cursor.fetchall()}


async def apply_migration(conn: aiosqlite.Connection, migration: Migration) -> MigrationResult:
    """
    Run one migration and record it, or roll it back entirely.

    The script is prefixed with BEGIN IMMEDIATE so its DDL, the foreign key
    check and the tracking row commit together.
    """
    logger.info("applying_migration", version=migration.version, name=migration.name)
    started = time.perf_counter()

    def elapsed_ms() -> int:
        return int((time.perf_counter() - started) * 1000)

    try:
        await conn.executescript(f"BEGIN IMMEDIATE;\n{migration.sql}")

        cursor = await conn.execute("PRAGMA foreign_key_check")
        violations = await cursor.fetchall()
        if violations:
            raise aiosqlite.IntegrityError(f"{len(violations)} foreign key violations")

        await conn.execute(
            """
            INSERT INTO schema_migrations (version, name, checksum, execution_time_ms)
            VALUES (?, ?, ?, ?)
            """,
            (migration.version, migration.name, migration.checksum, elapsed_ms()),
        )
        await conn.commit()
    except aiosqlite.Error as e:
        await conn.rollback()
        logger.error(
            "migration_failed", version=migration.version, name=migration.name, error=str(e)
        )
        return MigrationResult(migration.version, migration.name, False, elapsed_ms(), str(e))

    logger.info(
        "migration_applied",
        version=migration.version,
        name=migration.name,
        execution_time_ms=elapsed_ms(),
    )
    return MigrationResult(migration.version, migration.name, True, elapsed_ms())


async def initialize_database(db_path: Path | None = None) -> list[MigrationResult]:
    """
    Apply pending migrations in order.

    Stops at the first failure, or at an applied migration whose checksum no
    longer matches its file. Returns one result per attempted migration; an
    up-to-date database gives an empty list.
    """
    db_path = db_path or get_settings().storage.db_path
    db_path.parent.mkdir(parents=True, exist_ok=True)

    results: list[MigrationResult] = []
    async with aiosqlite.connect(db_path) as conn:
        await conn.execute("PRAGMA journal_mode=WAL")
        await conn.execute("PRAGMA foreign_keys=ON")

        applied = await get_applied_migrations(conn)
        for migration in discover_migrations():
            recorded = applied.get(migration.version)
            if recorded == migration.checksum:
                continue
            if recorded is not None:
                logger.error(
                    "migration_checksum_mismatch",
                    version=migration.version,
                    recorded=recorded,
                    current=migration.checksum,
                )
                results.append(
                    MigrationResult(
                        migration.version,
                        migration.name,
                        False,
                        0,
                        "migration file changed after it was applied",
                    )
                )
                break

            result = await apply_migration(conn, migration)
            results.append(result)
            if not result.success:
                break

    logger.info(
        "database_migrated",
        db_path=str(db_path),
        applied=sum(1 for r in results if r.success),
        failed=sum(1 for r in results if not r.success),
    )
    return results


async def get_migration_status(db_path: Path | None = None) -> dict:
    db_path = db_path or get_settings().storage.db_path
    discovered = discover_migrations()

    applied: dict[str, str] = {}
    if db_path.exists():
        async with aiosqlite.connect(db_path) as conn:
            applied = await get_applied_migrations(conn)

    return {
        "exists": db_path.exists(),
        "current_version": max(applied) if applied else None,
        "applied_migrations": sorted(applied),
        "pending_migrations": [m.version for m in discovered if m.version not in applied],
        "modified_migrations": [
            m.version for m in discovered if applied.get(m.version) not in (None, m.checksum)
        ],
    }


async def _unique_indexes(conn: aiosqlite.Connection, table: str) -> list[list[str]]:
    """Column lists of every unique index on a table."""
    cursor = await conn.execute(f'PRAGMA index_list("{table}")')
    indexes = []
    for row in await cursor.fetchall():
        if not row[2]:
            continue
        info = await conn.execute(f'PRAGMA index_info("{row[1]}")')
        indexes.append([col[2] for col in await info.fetchall()])
    return indexes


async def _column_types(conn: aiosqlite.Connection, table: str) -> dict[str, tuple[str, int]]:
    """Column name mapped to (declared type, primary key position)."""
    cursor = await conn.execute(f'PRAGMA table_info("{table}")')
    return {row[1]: (row[2].upper(), row[5]) for row in await cursor.fetchall()}


def _check(name: str, passed: bool, **details) -> dict:
    return {"check": name, "status": "PASS" if passed else "FAIL", **details}


async def verify_schema_integrity(db_path: Path | None = None) -> list[dict]:
    """
    Check the database against the invariants the stores rely on.

    Besides SQLite's own integrity and foreign key checks, this confirms the
    sequence counter key, the uniqueness constraints on invoice numbers and
    settlements, and that money columns are TEXT.
    """
    db_path = db_path or get_settings().storage.db_path
    checks = []

    async with aiosqlite.connect(db_path) as conn:
        cursor = await conn.execute("PRAGMA integrity_check")
        integrity = (await cursor.fetchone())[0]
        checks.append(_check("integrity", integrity == "ok", result=integrity))

        cursor = await conn.execute("PRAGMA foreign_key_check")
        violations = await cursor.fetchall()
        checks.append(_check("foreign_keys", not violations, violations=len(violations)))

        cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
        existing = {row[0] for row in await cursor.fetchall()}
        missing = [t for t in REQUIRED_TABLES if t not in existing]
        checks.append(_check("required_tables", not missing, missing=missing))

        counter_columns = await _column_types(conn, "invoice_counters")
        primary_key = [
            name
            for name, (_, position) in sorted(counter_columns.items(), key=lambda c: c[1][1])
            if position
        ]
        checks.append(
            _check("invoice_counters_key", primary_key == COUNTER_KEY, primary_key=primary_key)
        )

        for name, (table, columns) in UNIQUE_KEYS.items():
            indexes = await _unique_indexes(conn, table)
            checks.append(_check(name, columns in indexes, table=table, columns=columns))

        not_text = []
        for table, columns in MONEY_COLUMNS.items():
            types = await _column_types(conn, table)
            not_text.extend(
                f"{table}.{col}" for col in columns if types.get(col, ("", 0))[0] != "TEXT"
            )
        checks.append(_check("money_columns_text", not not_text, columns=not_text))

    return checks
