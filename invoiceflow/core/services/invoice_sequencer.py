"""
Invoice number allocation.

Numbers are allocated by a single atomic statement in the sequence store;
this service only validates inputs and formats the result.
"""

import re

from invoiceflow.config import get_logger
from invoiceflow.core.exceptions import InvoiceFlowError, SequenceAllocationError
from invoiceflow.core.interfaces import IInvoiceSequenceStore

logger = get_logger(__name__)


class InvoiceSequencer:
    """
    Allocates PREFIX-YYYY-NNNNNN invoice numbers per owner per year.

    Allocation is never retried and never reclaimed: a create that fails after
    allocation leaves a gap, never a duplicate.
    """

    def __init__(
        self,
        sequence_store: IInvoiceSequenceStore,
        prefix: str = "INV",
        padding: int = 6,
    ):
        self._store = sequence_store
        self._prefix = prefix
        self._padding = padding
        self._pattern = re.compile(rf"^{re.escape(prefix)}-(\d{{4}})-(\d{{{padding},}})$")

    async def next(self, owner_id: int, year: int) -> int:
        """
        Allocate the next sequence value for (owner_id, year).

        Raises:
            SequenceAllocationError: If the store fails or returns a non-positive value
        """
        try:
            value = await self._store.allocate_next_sequence(owner_id, year)
        except InvoiceFlowError:
            raise
        except Exception as e:
            logger.error(
                "sequence_allocation_failed", owner_id=owner_id, year=year, error=str(e)
            )
            raise SequenceAllocationError(owner_id, year, str(e)) from e

        if value is None or value < 1:
            raise SequenceAllocationError(owner_id, year, f"store returned {value!r}")

        logger.debug("sequence_allocated", owner_id=owner_id, year=year, sequence=value)
        return value

    def format_number(self, year: int, sequence: int) -> str:
        return f"{self._prefix}-{year:04d}-{sequence:0{self._padding}d}"

    async def allocate_number(self, owner_id: int, year: int) -> tuple[int, str]:
        """Allocate and format in one step."""
        sequence = await self.next(owner_id, year)
        return sequence, self.format_number(year, sequence)

    def parse_number(self, invoice_number: str) -> tuple[int, int] | None:
        """Split an invoice number into (year, sequence), or None if malformed."""
        match = self._pattern.match(invoice_number or "")
        if not match:
            return None
        return int(match.group(1)), int(match.group(2))
