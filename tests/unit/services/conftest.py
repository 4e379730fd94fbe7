"""Fixtures for core service unit tests."""

from unittest.mock import AsyncMock

import pytest

from invoiceflow.core.entities import Invoice, InvoiceLine
from invoiceflow.core.interfaces import (
    IInvoiceSequenceStore,
    IInvoiceStore,
    IPartyStore,
    ISettlementStore,
)


def _insert_invoice(invoice: Invoice) -> Invoice:
    return invoice.model_copy(update={"id": 100})


def _insert_line_items(invoice_id: int, lines: list[InvoiceLine]) -> list[InvoiceLine]:
    return [
        line.model_copy(update={"id": n, "invoice_id": invoice_id})
        for n, line in enumerate(lines, start=1)
    ]


@pytest.fixture
def invoice_store() -> AsyncMock:
    """Invoice store that echoes writes back with ids assigned."""
    store = AsyncMock(spec=IInvoiceStore)
    store.insert_invoice.side_effect = _insert_invoice
    store.insert_line_items.side_effect = _insert_line_items
    store.update_invoice.side_effect = lambda invoice: invoice.model_copy()
    store.delete_line_items.return_value = 1
    store.delete_invoice.return_value = True
    return store


@pytest.fixture
def party_store(owner, intra_client) -> AsyncMock:
    store = AsyncMock(spec=IPartyStore)
    store.get_owner.return_value = owner
    store.get_client.return_value = intra_client
    return store


@pytest.fixture
def sequence_store() -> AsyncMock:
    store = AsyncMock(spec=IInvoiceSequenceStore)
    store.allocate_next_sequence.return_value = 1
    return store


@pytest.fixture
def settlement_store() -> AsyncMock:
    store = AsyncMock(spec=ISettlementStore)
    store.get_settlement_by_invoice.return_value = None
    store.create_settlement.side_effect = lambda record: record.model_copy(update={"id": 7})
    store.update_settlement.side_effect = lambda record: record
    return store
