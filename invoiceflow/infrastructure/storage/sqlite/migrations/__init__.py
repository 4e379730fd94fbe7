"""Database migrations module."""

from invoiceflow.infrastructure.storage.sqlite.migrations.migrator import (
    REQUIRED_TABLES,
    Migration,
    MigrationResult,
    discover_migrations,
    get_migration_status,
    initialize_database,
    verify_schema_integrity,
)

__all__ = [
    "REQUIRED_TABLES",
    "Migration",
    "MigrationResult",
    "discover_migrations",
    "get_migration_status",
    "initialize_database",
    "verify_schema_integrity",
]
