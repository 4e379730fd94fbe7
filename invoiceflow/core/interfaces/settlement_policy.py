"""
Abstract interface for settlement fee policies.

The fee formula is owned by the payment platform and configured per
deployment; the calculator only enforces the net-amount invariant.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal


@dataclass
class FeeQuote:
    """Deductions produced by a fee policy for one invoice amount."""

    platform_commission: Decimal
    processor_fee: Decimal
    gst_on_fee: Decimal


class ISettlementPolicy(ABC):
    """
    Abstract interface for settlement fee policies.

    Implementations: PercentageFeePolicy
    """

    @abstractmethod
    def quote(self, invoice_amount: Decimal, commission_rate: Decimal) -> FeeQuote:
        """
        Compute deductions for a settlement.

        Args:
            invoice_amount: Amount paid by the client, in rupees
            commission_rate: Platform commission percent for the owner

        Returns:
            FeeQuote with commission, processor fee and GST on the fee

        Raises:
            SettlementPolicyNotConfiguredError: If fee percentages are unset
        """
        pass
