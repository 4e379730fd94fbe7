"""Tests for owner and client entities."""

from decimal import Decimal

from invoiceflow.core.entities import ClientProfile, OwnerProfile


def test_owner_identifiers_normalized():
    owner = OwnerProfile(name="Acme", gstin=" 29abcde1234f1z5 ", state_code=" ")

    assert owner.gstin == "29ABCDE1234F1Z5"
    assert owner.state_code is None


def test_owner_defaults():
    owner = OwnerProfile(name="Acme")

    assert owner.commission_rate == Decimal("0")
    assert owner.annual_turnover is None


def test_client_blank_gstin_is_none():
    client = ClientProfile(owner_id=1, name="Walk-in", gstin="")
    assert client.gstin is None
