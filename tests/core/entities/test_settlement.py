"""Tests for settlement entities."""

from decimal import Decimal

from invoiceflow.core.entities import SettlementBreakdown, SettlementRecord, SettlementStatus


def test_total_deductions():
    breakdown = SettlementBreakdown(
        invoice_amount=Decimal("1180"),
        platform_commission=Decimal("59.00"),
        processor_fee=Decimal("23.60"),
        gst_on_fee=Decimal("4.25"),
        net_amount=Decimal("1093.15"),
    )
    assert breakdown.total_deductions == Decimal("86.85")


def test_record_from_breakdown():
    breakdown = SettlementBreakdown(
        invoice_amount=Decimal("1180"),
        commission_rate=Decimal("5"),
        platform_commission=Decimal("59.00"),
        net_amount=Decimal("1121.00"),
    )

    record = SettlementRecord.from_breakdown(100, 1, breakdown)

    assert record.id is None
    assert record.invoice_id == 100
    assert record.gross_amount == Decimal("1180")
    assert record.commission_rate == Decimal("5")
    assert record.net_amount == Decimal("1121.00")
    assert record.status == SettlementStatus.PENDING
