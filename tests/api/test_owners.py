"""API tests for owner and client endpoints."""

from unittest.mock import AsyncMock

import pytest

from invoiceflow.api.dependencies import get_parties
from invoiceflow.api.main import app
from invoiceflow.core.exceptions import ClientNotFoundError, InvalidGstinError, OwnerNotFoundError
from invoiceflow.core.services import PartyService


@pytest.fixture
def parties(owner, inter_client):
    mock = AsyncMock(spec=PartyService)
    mock.create_owner.return_value = owner
    mock.get_owner.return_value = owner
    mock.create_client.return_value = inter_client
    mock.get_client.return_value = inter_client
    mock.list_clients.return_value = [inter_client]
    app.dependency_overrides[get_parties] = lambda: mock
    return mock


async def test_create_owner(async_client, parties):
    response = await async_client.post(
        "/api/owners",
        json={"name": "Acme Traders", "gstin": "29ABCDE1234F1Z5", "commission_rate": "5"},
    )

    assert response.status_code == 201
    assert response.json()["state_code"] == "29"
    entity = parties.create_owner.await_args.args[0]
    assert entity.gstin == "29ABCDE1234F1Z5"
    assert entity.id is None


async def test_create_owner_rejects_commission_over_100(async_client, parties):
    response = await async_client.post(
        "/api/owners", json={"name": "Acme", "commission_rate": "150"}
    )

    assert response.status_code == 422
    parties.create_owner.assert_not_awaited()


async def test_create_owner_bad_gstin(async_client, parties):
    parties.create_owner.side_effect = InvalidGstinError("NOTAGSTIN")

    response = await async_client.post("/api/owners", json={"name": "Acme", "gstin": "NOTAGSTIN"})

    assert response.status_code == 400
    assert response.json()["error_code"] == "INVALID_GSTIN"


async def test_get_owner_not_found(async_client, parties):
    parties.get_owner.side_effect = OwnerNotFoundError(5)

    response = await async_client.get("/api/owners/5")

    assert response.status_code == 404
    assert response.json()["error_code"] == "OWNER_NOT_FOUND"


async def test_create_client(async_client, parties):
    response = await async_client.post(
        "/api/owners/1/clients", json={"name": "Pune Wholesale", "state_code": "27"}
    )

    assert response.status_code == 201
    entity = parties.create_client.await_args.args[0]
    assert entity.owner_id == 1
    assert entity.state_code == "27"


async def test_list_clients(async_client, parties):
    response = await async_client.get("/api/owners/1/clients", params={"limit": 10})

    assert response.status_code == 200
    assert [c["id"] for c in response.json()] == [11]
    parties.list_clients.assert_awaited_once_with(1, limit=10, offset=0)


async def test_get_client_of_other_owner(async_client, parties):
    parties.get_client.side_effect = ClientNotFoundError(11, 2)

    response = await async_client.get("/api/owners/2/clients/11")

    assert response.status_code == 404
    assert response.json()["details"] == {"client_id": 11, "owner_id": 2}
