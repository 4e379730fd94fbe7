"""Tests for GST line computation and aggregation."""

from decimal import Decimal

import pytest

from invoiceflow.core.entities import LineBreakdown, LineItemInput
from invoiceflow.core.exceptions import (
    InvalidHsnSacError,
    InvalidLineItemError,
    ValidationError,
)
from invoiceflow.core.services.tax_engine import TaxEngine, round_paise, round_rupees


def _item(**overrides) -> LineItemInput:
    data = {
        "description": "Widget",
        "hsn_sac": "8471",
        "quantity": "1",
        "rate": "1000",
        "tax_rate": "18",
    }
    data.update(overrides)
    return LineItemInput(**data)


@pytest.fixture
def engine() -> TaxEngine:
    return TaxEngine()


class TestRounding:
    def test_round_paise_half_up(self):
        assert round_paise(Decimal("0.045")) == Decimal("0.05")
        assert round_paise(Decimal("9.0045")) == Decimal("9.00")

    def test_round_rupees_half_up(self):
        assert round_rupees(Decimal("1180.50")) == 1181
        assert round_rupees(Decimal("1180.49")) == 1180


class TestComputeLine:
    def test_intra_state_splits_evenly(self, engine, line_item):
        result = engine.compute_line(line_item, is_inter_state=False)

        assert result.taxable_value == Decimal("1000.00")
        assert result.cgst_amount == Decimal("90.00")
        assert result.sgst_amount == Decimal("90.00")
        assert result.igst_amount == Decimal("0.00")
        assert result.line_total == Decimal("1180.00")

    def test_inter_state_uses_igst(self, engine, line_item):
        result = engine.compute_line(line_item, is_inter_state=True)

        assert result.igst_amount == Decimal("180.00")
        assert result.cgst_amount == Decimal("0.00")
        assert result.sgst_amount == Decimal("0.00")
        assert result.line_total == Decimal("1180.00")

    def test_discount_reduces_taxable_value(self, engine):
        item = _item(quantity="10", rate="100", discount="50", tax_rate="12")
        result = engine.compute_line(item, is_inter_state=False)

        assert result.taxable_value == Decimal("950.00")
        assert result.cgst_amount == Decimal("57.00")
        assert result.sgst_amount == Decimal("57.00")
        assert result.line_total == Decimal("1064.00")

    def test_cess_on_taxable_value(self, engine):
        item = _item(tax_rate="28", cess_rate="12")
        result = engine.compute_line(item, is_inter_state=True)

        assert result.igst_amount == Decimal("280.00")
        assert result.cess_amount == Decimal("120.00")
        assert result.line_total == Decimal("1400.00")

    def test_cess_rate_argument_overrides_item(self, engine):
        result = engine.compute_line(_item(), is_inter_state=False, cess_rate=Decimal("5"))
        assert result.cess_amount == Decimal("50.00")

    def test_line_total_uses_unrounded_components(self, engine):
        # GST 18.009 splits into 9.0045 + 9.0045, each rounding to 9.00
        item = _item(rate="100.05")
        result = engine.compute_line(item, is_inter_state=False)

        assert result.cgst_amount == Decimal("9.00")
        assert result.sgst_amount == Decimal("9.00")
        assert result.line_total == Decimal("118.06")

    def test_half_paisa_rounds_up(self, engine):
        result = engine.compute_line(_item(rate="0.25"), is_inter_state=True)
        assert result.igst_amount == Decimal("0.05")

    def test_zero_rated_line(self, engine):
        result = engine.compute_line(_item(tax_rate="0"), is_inter_state=False)
        assert result.tax_amount == Decimal("0")
        assert result.line_total == Decimal("1000.00")

    def test_float_input_has_no_binary_noise(self, engine):
        item = LineItemInput(
            description="Cable", hsn_sac="8544", quantity=3, rate=0.1, tax_rate=18
        )
        result = engine.compute_line(item, is_inter_state=True)
        assert result.taxable_value == Decimal("0.30")
        assert result.igst_amount == Decimal("0.05")


class TestValidateLine:
    def test_empty_description(self, engine):
        with pytest.raises(InvalidLineItemError) as exc_info:
            engine.validate_line(_item(description="  "), 1)
        assert exc_info.value.details["field"] == "description"
        assert exc_info.value.details["line_number"] == 1

    @pytest.mark.parametrize("code", ["12", "123", "123456789", "ABCD", ""])
    def test_bad_hsn_sac(self, engine, code):
        with pytest.raises(InvalidHsnSacError):
            engine.validate_line(_item(hsn_sac=code))

    @pytest.mark.parametrize("code", ["8471", "998311", "84713010"])
    def test_good_hsn_sac(self, engine, code):
        engine.validate_line(_item(hsn_sac=code))

    @pytest.mark.parametrize(
        "overrides,field",
        [
            ({"quantity": "0"}, "quantity"),
            ({"quantity": "-1"}, "quantity"),
            ({"rate": "-0.01"}, "rate"),
            ({"discount": "-5"}, "discount"),
            ({"discount": "1000.01"}, "discount"),
            ({"tax_rate": "100.5"}, "tax_rate"),
            ({"tax_rate": "-1"}, "tax_rate"),
            ({"cess_rate": "101"}, "cess_rate"),
        ],
    )
    def test_out_of_range_amounts(self, engine, overrides, field):
        with pytest.raises(InvalidLineItemError) as exc_info:
            engine.validate_line(_item(**overrides), 3)
        assert exc_info.value.details["field"] == field
        assert exc_info.value.code == "INVALID_LINE_ITEM"
        assert "Item 3" in exc_info.value.message

    def test_discount_equal_to_gross_is_allowed(self, engine):
        result = engine.compute_line(_item(discount="1000"), is_inter_state=False)
        assert result.taxable_value == Decimal("0.00")
        assert result.line_total == Decimal("0.00")


class TestComputeLines:
    def test_empty_items_rejected(self, engine):
        with pytest.raises(ValidationError) as exc_info:
            engine.compute_lines([], is_inter_state=False)
        assert exc_info.value.details["field"] == "items"

    def test_lines_numbered_from_one(self, engine, line_item):
        lines = engine.compute_lines([line_item, _item()], is_inter_state=False)

        assert [line.line_number for line in lines] == [1, 2]
        assert lines[0].description == "Consulting"
        assert lines[1].taxable_value == Decimal("1000.00")

    def test_invalid_item_reports_its_position(self, engine, line_item):
        with pytest.raises(InvalidLineItemError) as exc_info:
            engine.compute_lines([line_item, _item(quantity="0")], is_inter_state=False)
        assert exc_info.value.details["line_number"] == 2


class TestAggregate:
    def test_sums_rounded_lines(self, engine, line_item):
        lines = engine.compute_lines([line_item, line_item], is_inter_state=False)
        totals = engine.aggregate(lines)

        assert totals.subtotal == Decimal("2000.00")
        assert totals.cgst_total == Decimal("180.00")
        assert totals.sgst_total == Decimal("180.00")
        assert totals.total_tax == Decimal("360.00")
        assert totals.grand_total == Decimal("2360.00")
        assert totals.final_payable == 2360
        assert totals.round_off == Decimal("0")

    def test_rounds_down_to_rupee(self, engine):
        totals = engine.aggregate(
            [
                LineBreakdown(
                    taxable_value=Decimal("999.50"),
                    cgst_amount=Decimal("89.96"),
                    sgst_amount=Decimal("89.96"),
                )
            ]
        )
        assert totals.grand_total == Decimal("1179.42")
        assert totals.final_payable == 1179
        assert totals.round_off == Decimal("-0.42")

    def test_half_rupee_rounds_up(self, engine):
        totals = engine.aggregate(
            [LineBreakdown(taxable_value=Decimal("1000.50"), igst_amount=Decimal("180.00"))]
        )
        assert totals.final_payable == 1181
        assert totals.round_off == Decimal("0.50")

    def test_empty_breakdowns(self, engine):
        totals = engine.aggregate([])
        assert totals.final_payable == 0
        assert totals.total_tax == Decimal("0")
