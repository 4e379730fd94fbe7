"""Pytest configuration and fixtures."""

import os
import tempfile
from collections.abc import AsyncGenerator
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient

# Keep the default database out of the working tree
os.environ.setdefault("STORAGE_DATA_DIR", tempfile.mkdtemp(prefix="invoiceflow-test-"))

from invoiceflow.core.entities import ClientProfile, LineItemInput, OwnerProfile  # noqa: E402


@pytest.fixture
def owner() -> OwnerProfile:
    """Owner registered in Karnataka."""
    return OwnerProfile(
        id=1,
        name="Acme Traders",
        gstin="29ABCDE1234F1Z5",
        state_code="29",
        commission_rate=Decimal("5"),
    )


@pytest.fixture
def intra_client() -> ClientProfile:
    """Client in the owner's state."""
    return ClientProfile(id=10, owner_id=1, name="Bengaluru Retail", state_code="29")


@pytest.fixture
def inter_client() -> ClientProfile:
    """Client in another state."""
    return ClientProfile(id=11, owner_id=1, name="Pune Wholesale", state_code="27")


@pytest.fixture
def line_item() -> LineItemInput:
    """2 x 500 at 18% GST: taxable 1000, tax 180."""
    return LineItemInput(
        description="Consulting",
        hsn_sac="998311",
        quantity=Decimal("2"),
        rate=Decimal("500"),
        tax_rate=Decimal("18"),
    )


@pytest.fixture
def sample_invoice_payload() -> dict:
    """Invoice create payload as sent by API clients."""
    return {
        "client_id": 10,
        "issue_date": "2024-03-15",
        "due_date": "2024-04-14",
        "items": [
            {
                "description": "Consulting",
                "hsn_sac": "998311",
                "quantity": "2",
                "rate": "500",
                "tax_rate": "18",
            }
        ],
    }


@pytest.fixture
async def async_client() -> AsyncGenerator[AsyncClient, None]:
    """Async client against the app without running the lifespan."""
    from invoiceflow.api.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
