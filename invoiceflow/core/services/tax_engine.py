"""
GST tax engine.

Layer-pure service computing per-line tax breakdowns and invoice totals.
NO infrastructure imports - depends only on core entities and exceptions.
"""

import re
from collections.abc import Iterable, Sequence
from decimal import ROUND_HALF_UP, Decimal

from invoiceflow.core.entities.invoice import (
    InvoiceLine,
    InvoiceTotals,
    LineBreakdown,
    LineItemInput,
)
from invoiceflow.core.exceptions import (
    InvalidHsnSacError,
    InvalidLineItemError,
    ValidationError,
)

PAISE = Decimal("0.01")
RUPEE = Decimal("1")
HUNDRED = Decimal("100")
ZERO = Decimal("0")

HSN_SAC_PATTERN = re.compile(r"^\d{4,8}$")


def round_paise(value: Decimal) -> Decimal:
    return value.quantize(PAISE, rounding=ROUND_HALF_UP)


def round_rupees(value: Decimal) -> int:
    return int(value.quantize(RUPEE, rounding=ROUND_HALF_UP))


class TaxEngine:
    """
    Per-line GST computation and aggregation.

    Each line is rounded to paise independently; totals are sums of the
    rounded line values, and only the payable amount is rounded to rupees.
    """

    def validate_line(self, item: LineItemInput, line_number: int | None = None) -> None:
        """
        Reject a line before any computation.

        Raises:
            InvalidLineItemError: On empty description or out-of-range amounts
            InvalidHsnSacError: If HSN/SAC is not 4 to 8 digits
        """
        if not item.description.strip():
            raise InvalidLineItemError(line_number, "description", "Description is required")
        if not HSN_SAC_PATTERN.match(item.hsn_sac or ""):
            raise InvalidHsnSacError(line_number, item.hsn_sac)
        if item.quantity <= ZERO:
            raise InvalidLineItemError(
                line_number, "quantity", "Quantity must be greater than 0", item.quantity
            )
        if item.rate < ZERO:
            raise InvalidLineItemError(line_number, "rate", "Rate cannot be negative", item.rate)
        if item.discount < ZERO:
            raise InvalidLineItemError(
                line_number, "discount", "Discount cannot be negative", item.discount
            )
        if item.discount > item.quantity * item.rate:
            raise InvalidLineItemError(
                line_number, "discount", "Discount cannot exceed quantity x rate", item.discount
            )
        if not ZERO <= item.tax_rate <= HUNDRED:
            raise InvalidLineItemError(
                line_number, "tax_rate", "Tax rate must be between 0 and 100", item.tax_rate
            )
        if not ZERO <= item.cess_rate <= HUNDRED:
            raise InvalidLineItemError(
                line_number, "cess_rate", "Cess rate must be between 0 and 100", item.cess_rate
            )

    def compute_line(
        self,
        item: LineItemInput,
        is_inter_state: bool,
        cess_rate: Decimal | None = None,
        line_number: int | None = None,
    ) -> LineBreakdown:
        """
        Compute the tax breakdown for one line.

        Args:
            item: Line input
            is_inter_state: IGST when True, otherwise CGST + SGST split evenly
            cess_rate: Overrides item.cess_rate when given
            line_number: Used in error messages only

        Returns:
            LineBreakdown with every amount rounded half-up to paise
        """
        if cess_rate is not None:
            item = item.model_copy(update={"cess_rate": Decimal(str(cess_rate))})
        self.validate_line(item, line_number)

        gross = item.quantity * item.rate
        taxable = gross - item.discount
        gst = taxable * item.tax_rate / HUNDRED

        if is_inter_state:
            igst = gst
            cgst = sgst = ZERO
        else:
            igst = ZERO
            cgst = sgst = gst / 2

        cess = taxable * item.cess_rate / HUNDRED
        line_total = taxable + cgst + sgst + igst + cess

        return LineBreakdown(
            taxable_value=round_paise(taxable),
            cgst_amount=round_paise(cgst),
            sgst_amount=round_paise(sgst),
            igst_amount=round_paise(igst),
            cess_amount=round_paise(cess),
            line_total=round_paise(line_total),
        )

    def compute_lines(
        self, items: Sequence[LineItemInput], is_inter_state: bool
    ) -> list[InvoiceLine]:
        """
        Validate every item, then compute numbered invoice lines.

        Nothing is computed if any item is invalid.
        """
        if not items:
            raise ValidationError("items", "At least one line item is required")
        for number, item in enumerate(items, start=1):
            self.validate_line(item, number)
        return [
            InvoiceLine.from_parts(number, item, self.compute_line(item, is_inter_state))
            for number, item in enumerate(items, start=1)
        ]

    def aggregate(self, breakdowns: Iterable[LineBreakdown]) -> InvoiceTotals:
        """
        Sum rounded line values into invoice totals.

        grand_total stays unrounded; final_payable is grand_total rounded
        half-up to whole rupees and round_off is the signed difference.
        """
        totals = InvoiceTotals()
        for b in breakdowns:
            totals.subtotal += b.taxable_value
            totals.cgst_total += b.cgst_amount
            totals.sgst_total += b.sgst_amount
            totals.igst_total += b.igst_amount
            totals.cess_total += b.cess_amount

        totals.total_tax = (
            totals.cgst_total + totals.sgst_total + totals.igst_total + totals.cess_total
        )
        totals.grand_total = totals.subtotal + totals.total_tax
        totals.final_payable = round_rupees(totals.grand_total)
        totals.round_off = Decimal(totals.final_payable) - totals.grand_total
        return totals
