"""
Settlement calculator.

Computes the owner's net payout for a paid invoice. The fee formula comes
from an injected ISettlementPolicy; this service validates inputs and checks
the net-amount invariant on whatever the policy returns.
"""

from decimal import Decimal, InvalidOperation
from typing import Any

from invoiceflow.core.entities.settlement import SettlementBreakdown
from invoiceflow.core.exceptions import (
    InvalidAmountError,
    SettlementError,
    SettlementPolicyNotConfiguredError,
)
from invoiceflow.core.interfaces import FeeQuote, ISettlementPolicy
from invoiceflow.core.services.tax_engine import HUNDRED, ZERO, round_paise


def _decimal(value: Any, field: str) -> Decimal:
    try:
        number = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise InvalidAmountError(field, "Not a number", value) from e
    if not number.is_finite():
        raise InvalidAmountError(field, "Not a finite number", value)
    return number


class PercentageFeePolicy(ISettlementPolicy):
    """
    Percentage-based fee policy.

    commission = amount x commission_rate%, processor fee = amount x fee%,
    GST on fee = processor fee x gst%. Each deduction is rounded to paise.
    Both percentages must be configured; there are no built-in defaults.
    """

    def __init__(
        self,
        processor_fee_percent: Decimal | None,
        gst_on_fee_percent: Decimal | None,
    ):
        self._fee_percent = processor_fee_percent
        self._gst_percent = gst_on_fee_percent

    @property
    def is_configured(self) -> bool:
        return self._fee_percent is not None and self._gst_percent is not None

    def quote(self, invoice_amount: Decimal, commission_rate: Decimal) -> FeeQuote:
        if not self.is_configured:
            missing = []
            if self._fee_percent is None:
                missing.append("processor_fee_percent")
            if self._gst_percent is None:
                missing.append("gst_on_fee_percent")
            raise SettlementPolicyNotConfiguredError(missing)

        commission = round_paise(invoice_amount * commission_rate / HUNDRED)
        processor_fee = round_paise(invoice_amount * self._fee_percent / HUNDRED)
        gst_on_fee = round_paise(processor_fee * self._gst_percent / HUNDRED)
        return FeeQuote(
            platform_commission=commission,
            processor_fee=processor_fee,
            gst_on_fee=gst_on_fee,
        )


class SettlementCalculator:
    """Settlement breakdown with invariant checks around a fee policy."""

    def __init__(self, policy: ISettlementPolicy):
        self._policy = policy

    def calculate(
        self, invoice_amount: Decimal | int | str, commission_rate: Decimal | int | str = ZERO
    ) -> SettlementBreakdown:
        """
        Compute deductions and net payout.

        Raises:
            InvalidAmountError: If amount <= 0 or commission rate outside 0-100
            SettlementPolicyNotConfiguredError: If the policy has no fee rates
            SettlementError: If the policy yields negative deductions or a negative net
        """
        amount = _decimal(invoice_amount, "invoice_amount")
        rate = _decimal(commission_rate, "commission_rate")

        if amount <= ZERO:
            raise InvalidAmountError("invoice_amount", "Invoice amount must be positive", amount)
        if not ZERO <= rate <= HUNDRED:
            raise InvalidAmountError(
                "commission_rate", "Commission rate must be between 0 and 100", rate
            )

        quote = self._policy.quote(amount, rate)

        deductions = {
            "platform_commission": quote.platform_commission,
            "processor_fee": quote.processor_fee,
            "gst_on_fee": quote.gst_on_fee,
        }
        negative = {k: str(v) for k, v in deductions.items() if v < ZERO}
        if negative:
            raise SettlementError("negative deduction from fee policy", details=negative)

        net = amount - sum(deductions.values(), ZERO)
        if net < ZERO:
            raise SettlementError(
                "deductions exceed invoice amount",
                details={"invoice_amount": str(amount), "net_amount": str(net)},
            )

        return SettlementBreakdown(
            invoice_amount=amount,
            commission_rate=rate,
            net_amount=net,
            **deductions,
        )
