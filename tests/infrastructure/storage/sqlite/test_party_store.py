"""Unit tests for SQLitePartyStore."""

from decimal import Decimal

import pytest

from invoiceflow.core.entities import ClientProfile
from invoiceflow.infrastructure.storage.sqlite.party_store import SQLitePartyStore


@pytest.fixture
def store() -> SQLitePartyStore:
    return SQLitePartyStore()


class TestOwners:
    async def test_round_trip(self, store, owner):
        loaded = await store.get_owner(owner.id)

        assert loaded.name == "Acme Traders"
        assert loaded.gstin == "29ABCDE1234F1Z5"
        assert loaded.state_code == "29"
        assert loaded.commission_rate == Decimal("5")
        assert loaded.annual_turnover is None

    async def test_missing(self, store, db):
        assert await store.get_owner(404) is None


class TestClients:
    async def test_round_trip(self, store, owner, client):
        loaded = await store.get_client(client.id)

        assert loaded.owner_id == owner.id
        assert loaded.state_code == "27"
        assert loaded.gstin is None

    async def test_scoped_to_owner(self, store, owner, client):
        assert await store.get_client(client.id, owner_id=owner.id) is not None
        assert await store.get_client(client.id, owner_id=owner.id + 1) is None

    async def test_list_sorted_by_name(self, store, owner, client):
        await store.create_client(ClientProfile(owner_id=owner.id, name="bangalore retail"))
        await store.create_client(ClientProfile(owner_id=owner.id, name="Chennai Exports"))

        clients = await store.list_clients(owner.id)

        assert [c.name for c in clients] == ["bangalore retail", "Chennai Exports", "Pune Wholesale"]

    async def test_list_paginated(self, store, owner, client):
        await store.create_client(ClientProfile(owner_id=owner.id, name="Agra Mills"))

        page = await store.list_clients(owner.id, limit=1, offset=1)

        assert [c.name for c in page] == ["Pune Wholesale"]
