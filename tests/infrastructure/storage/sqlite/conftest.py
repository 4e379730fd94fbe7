"""Pytest fixtures for SQLite storage tests."""

from collections.abc import AsyncGenerator
from datetime import date
from decimal import Decimal
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from invoiceflow.core.entities import (
    ClientProfile,
    Invoice,
    InvoiceLine,
    InvoiceStatus,
    OwnerProfile,
)
from invoiceflow.infrastructure.storage.sqlite.migrations.migrator import initialize_database


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Create a temporary database path."""
    return tmp_path / "test.db"


@pytest.fixture
async def initialized_db(temp_db_path: Path) -> Path:
    """Create a temporary database with all migrations applied."""
    results = await initialize_database(temp_db_path)
    assert all(r.success for r in results)
    return temp_db_path


@pytest.fixture
def mock_settings(temp_db_path: Path):
    """Mock settings with temp database path."""
    mock = MagicMock()
    mock.storage.db_path = temp_db_path
    mock.storage.pool_size = 2
    mock.storage.busy_timeout = 5000
    return mock


@pytest.fixture
async def db(initialized_db: Path, mock_settings) -> AsyncGenerator[Path, None]:
    """Point the global pool at the migrated temp database."""
    import invoiceflow.infrastructure.storage.sqlite.connection as conn_module

    conn_module._pool = None
    mock_settings.storage.db_path = initialized_db

    with patch.object(conn_module, "get_settings", return_value=mock_settings):
        try:
            yield initialized_db
        finally:
            await conn_module.close_pool()


@pytest.fixture
async def owner(db) -> OwnerProfile:
    """Persisted owner registered in Karnataka."""
    from invoiceflow.infrastructure.storage.sqlite.party_store import SQLitePartyStore

    return await SQLitePartyStore().create_owner(
        OwnerProfile(
            name="Acme Traders",
            gstin="29ABCDE1234F1Z5",
            state_code="29",
            commission_rate=Decimal("5"),
        )
    )


@pytest.fixture
async def client(db, owner) -> ClientProfile:
    """Persisted client of the owner in Maharashtra."""
    from invoiceflow.infrastructure.storage.sqlite.party_store import SQLitePartyStore

    return await SQLitePartyStore().create_client(
        ClientProfile(owner_id=owner.id, name="Pune Wholesale", state_code="27")
    )


def _build_invoice(
    owner_id: int,
    client_id: int,
    number: int = 1,
    issue_date: date = date(2024, 3, 15),
    status: InvoiceStatus = InvoiceStatus.DRAFT,
    grand_total: int = 1180,
    due_date: date | None = None,
) -> Invoice:
    """Build an unsaved inter-state invoice header."""
    return Invoice(
        owner_id=owner_id,
        client_id=client_id,
        invoice_number=f"INV-{issue_date.year}-{number:05d}",
        sequence_number=number,
        issue_date=issue_date,
        due_date=due_date,
        place_of_supply="27",
        is_inter_state=True,
        subtotal=Decimal("1000.00"),
        igst_total=Decimal("180.00"),
        total_tax=Decimal("180.00"),
        round_off=Decimal("0.00"),
        grand_total=grand_total,
        amount_in_words="One Thousand One Hundred Eighty Rupees Only",
        status=status,
    )


def _build_line(line_number: int = 1) -> InvoiceLine:
    """Build an unsaved 18% line of 2 x 500."""
    return InvoiceLine(
        line_number=line_number,
        description="Consulting",
        hsn_sac="998311",
        quantity=Decimal("2"),
        rate=Decimal("500.00"),
        tax_rate=Decimal("18"),
        taxable_value=Decimal("1000.00"),
        igst_amount=Decimal("180.00"),
        line_total=Decimal("1180.00"),
    )


@pytest.fixture
def invoice_factory():
    return _build_invoice


@pytest.fixture
def line_factory():
    return _build_line
